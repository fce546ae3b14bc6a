from celery import shared_task

from community_hub.seats.services import sweep_expired_reservations


@shared_task(name="seats.sweep_expired")
def sweep_expired_task() -> int:
    """Periodic sweep of expired seat reservations (see CELERY_BEAT_SCHEDULE).

    Returns:
        Number of seats reclaimed.
    """
    return sweep_expired_reservations()
