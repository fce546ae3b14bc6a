from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from .models import AuditLog

logger = logging.getLogger(__name__)


def log_action(  # noqa: PLR0913
    action: str,
    *,
    actor: object | None = None,
    message: str = "",
    model_name: str = "",
    record_id: int | None = None,
    before: dict | list | None = None,
    after: dict | list | None = None,
    ip_address: str = "",
) -> None:
    user_model = get_user_model()
    actor_user = actor if isinstance(actor, user_model) else None
    AuditLog.objects.create(
        action=action,
        actor=actor_user,
        message=message,
        model_name=model_name,
        record_id=record_id,
        before=before,
        after=after,
        ip_address=ip_address,
    )


def audit_request(request, action: str, **kwargs) -> None:
    """Best-effort audit entry for an API request; never fails the request."""

    try:
        log_action(
            action,
            actor=getattr(request, "user", None),
            ip_address=request.META.get("REMOTE_ADDR", "") or "",
            **kwargs,
        )
    except Exception:  # noqa: BLE001 - auditing must not fail the request
        logger.warning("Audit entry %s could not be written", action, exc_info=True)
