from trekdesk.domain import BatchCapacity
from trekdesk.models import Batch
from trekdesk.api.v1.schemas import BatchOut, CapacityOut


def batch_out(batch: Batch) -> BatchOut:
    """Serialize a batch together with its derived capacity figures"""
    capacity = BatchCapacity.of(batch)
    return BatchOut.model_validate(batch).model_copy(update={
        "available_slots": capacity.available_slots,
        "is_full": capacity.is_full,
        "was_marked_as_full": capacity.was_marked_as_full,
    })


def capacity_out(batch_id: int, capacity: BatchCapacity) -> CapacityOut:
    return CapacityOut(batch_id=batch_id, **capacity.as_dict())
