"""Admin back office for trek batches, bookings and refunds."""
