# Overview: Best-effort audit trail writer.

"""
Audit Sink

Every order, payment and cash-session operation reports what happened here
after its own transaction has committed. Writing the event is best-effort:
a failure is logged and swallowed, and can never undo or fail the business
operation that triggered it.
"""

from __future__ import annotations

from flask import current_app

from ..constants import AuditAction
from ..extensions import db
from ..models import AuditEvent
from ..time_utils import utcnow


def record_event(
    *,
    actor_id: int,
    action: str,
    order_id: int | None = None,
    details: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> AuditEvent:
    """Insert and commit one audit event. Raises on failure; use emit() from services."""
    if action not in AuditAction.ALL:
        raise ValueError(f"Unknown audit action: {action}")

    event = AuditEvent(
        actor_id=actor_id,
        order_id=order_id,
        action=action,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )
    db.session.add(event)
    db.session.commit()
    return event


def emit(principal, action: str, *, order_id: int | None = None, details: str | None = None) -> None:
    """Fire-and-forget wrapper around record_event()."""
    try:
        record_event(
            actor_id=principal.user_id,
            action=action,
            order_id=order_id,
            details=details,
            ip_address=principal.ip_address,
            user_agent=principal.user_agent,
        )
    except Exception:
        db.session.rollback()
        current_app.logger.warning(
            "Failed to write audit event %s for order %s", action, order_id, exc_info=True
        )


def log_status_change(principal, order_id: int, from_status: str, to_status: str) -> None:
    emit(
        principal,
        AuditAction.STATUS_CHANGE,
        order_id=order_id,
        details=f"Status changed from {from_status} to {to_status}",
    )


def log_order_created(principal, order_id: int, channel: str) -> None:
    emit(principal, AuditAction.CREATE, order_id=order_id, details=f"Order created with channel: {channel}")


def log_cancel(principal, order_id: int, reason: str) -> None:
    emit(principal, AuditAction.CANCEL, order_id=order_id, details=f"Order cancelled. Reason: {reason}")


def log_payment(principal, order_id: int, amount, method: str) -> None:
    emit(principal, AuditAction.PAYMENT, order_id=order_id, details=f"Payment of {amount} via {method}")


def log_cash_open(principal, session_id: int, initial_cash) -> None:
    emit(
        principal,
        AuditAction.OTHER,
        details=f"Cash session opened. Session ID: {session_id}, Initial cash: {initial_cash}",
    )


def log_cash_close(principal, session_id: int, final_cash) -> None:
    emit(
        principal,
        AuditAction.OTHER,
        details=f"Cash session closed. Session ID: {session_id}, Final cash: {final_cash}",
    )
