from fastapi import APIRouter, Depends

from trekdesk.roles import Role
from trekdesk.security import role_required
from trekdesk.api.v1.endpoints import treks, batches, bookings, manual_bookings


# Create main API router
api_v1_router = APIRouter()

admin_only = [Depends(role_required(Role.admin))]

# Trek catalogue (admin access)
api_v1_router.include_router(
    treks.router,
    prefix="/admin/treks",
    tags=["treks"],
    dependencies=admin_only
)

# Batch scheduling and capacity (admin access)
api_v1_router.include_router(
    batches.router,
    prefix="/admin/treks/{trek_id}/batches",
    tags=["batches"],
    dependencies=admin_only
)

# Booking management, cancellation and refunds (admin access)
api_v1_router.include_router(
    bookings.router,
    prefix="/admin/bookings",
    tags=["bookings"],
    dependencies=admin_only
)

# Manual booking intake (admin access)
api_v1_router.include_router(
    manual_bookings.router,
    prefix="/admin/manual-bookings",
    tags=["manual-bookings"],
    dependencies=admin_only
)
