# Overview: Service-layer operations for cashier drawer sessions.

"""
Cash Session Service

WHY: A payment is only accepted while a drawer is open somewhere in the
restaurant. Each cashier opens and closes their own session; payments
reference the session that was active when they were taken.

DESIGN PRINCIPLES:
- One active session per user (checked here, backed by a partial unique index)
- Sessions are immutable once closed
- Only the owner closes a session
- Open and close are recorded in the audit trail
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..constants import PaymentMethod
from ..errors import ForbiddenError, NotFoundError, StateError
from ..extensions import db
from ..models import CashSession, Payment
from ..policy import current_policy
from ..time_utils import utcnow
from ..validation import CENT, optional_text, parse_money
from . import audit_service
from .concurrency import transaction, update_if


# =============================================================================
# OPEN / CLOSE
# =============================================================================

def open_session(principal, initial_cash, notes: str | None = None) -> CashSession:
    """
    Open a drawer session for the calling cashier.

    Raises:
        ForbiddenError: Role lacks CASH_OPEN_SESSION
        ValidationError: initial_cash negative or not a number
        StateError: Caller already has an active session
    """
    current_policy().require(principal, "CASH_OPEN_SESSION", "No permission to open cash sessions")
    initial_cash = parse_money(initial_cash, "initial_cash")
    notes = optional_text(notes, "notes")

    existing = get_active_session(principal.user_id)
    if existing:
        raise StateError(f"User already has an active cash session (session {existing.id})")

    try:
        with transaction():
            session = CashSession(
                user_id=principal.user_id,
                opened_at=utcnow(),
                initial_cash=initial_cash,
                notes=notes,
            )
            db.session.add(session)
            db.session.flush()
    except IntegrityError:
        raise StateError("User already has an active cash session")

    audit_service.log_cash_open(principal, session.id, initial_cash)
    return session


def close_session(principal, session_id, final_cash, notes: str | None = None) -> CashSession:
    """
    Close the caller's own session, recording the counted cash.

    IMMUTABLE: a closed session is never reopened or modified.

    Raises:
        ForbiddenError: Role lacks CASH_CLOSE_SESSION, or session owned by someone else
        ValidationError: final_cash negative or not a number
        NotFoundError: Session does not exist
        StateError: Session already closed
    """
    current_policy().require(principal, "CASH_CLOSE_SESSION", "No permission to close cash sessions")
    final_cash = parse_money(final_cash, "final_cash")
    notes = optional_text(notes, "notes")

    session = db.session.get(CashSession, session_id, populate_existing=True)
    if not session:
        raise NotFoundError("Cash session not found")
    if session.user_id != principal.user_id:
        raise ForbiddenError("Only the session owner can close this cash session")
    if session.closed_at is not None:
        raise StateError("Cash session already closed")

    values = {"closed_at": utcnow(), "final_cash": final_cash}
    if notes is not None:
        values["notes"] = notes

    with transaction():
        # closed_at IS NULL guard: two concurrent closes cannot both win
        matched = update_if(CashSession, session.id, {"closed_at": None}, values)
        if matched == 0:
            raise StateError("Cash session already closed")

    audit_service.log_cash_close(principal, session.id, final_cash)
    return db.session.get(CashSession, session.id, populate_existing=True)


# =============================================================================
# LOOKUPS
# =============================================================================

def get_active_session(user_id: int) -> CashSession | None:
    """Most recent session for the user with closed_at NULL, or None."""
    return db.session.query(CashSession).filter(
        CashSession.user_id == user_id,
        CashSession.closed_at.is_(None),
    ).order_by(CashSession.opened_at.desc(), CashSession.id.desc()).first()


def get_any_active_session() -> CashSession | None:
    """Most recently opened active session anywhere in the restaurant, or None."""
    return db.session.query(CashSession).filter(
        CashSession.closed_at.is_(None),
    ).order_by(CashSession.opened_at.desc(), CashSession.id.desc()).first()


def list_user_sessions(principal, user_id: int | None = None) -> list[CashSession]:
    current_policy().require(principal, "CASH_VIEW_REPORTS", "No permission to view cash sessions")
    user_id = principal.user_id if user_id is None else user_id
    return db.session.query(CashSession).filter_by(user_id=user_id).order_by(
        CashSession.opened_at.desc(), CashSession.id.desc()
    ).all()


def get_session(principal, session_id) -> CashSession:
    current_policy().require(principal, "CASH_VIEW_REPORTS", "No permission to view cash sessions")
    session = db.session.get(CashSession, session_id)
    if not session:
        raise NotFoundError("Cash session not found")
    return session


def session_summary(principal, session_id) -> dict:
    """
    Raw payment sums for one session.

    Returns:
        Dict with totals per method, payment count, expected drawer cash
        (initial cash plus CASH payments) and, once closed, the variance
        between counted and expected cash.

    Raises:
        ForbiddenError: Role lacks VIEW_FINANCIAL_REPORTS or CASH_VIEW_REPORTS
        NotFoundError: Session does not exist
    """
    current_policy().require(principal, "VIEW_FINANCIAL_REPORTS", "No permission to view financial reports")
    session = get_session(principal, session_id)

    rows = db.session.query(
        Payment.method,
        func.count(Payment.id),
        func.coalesce(func.sum(Payment.amount), 0),
    ).filter(
        Payment.cash_session_id == session.id,
    ).group_by(Payment.method).all()

    by_method = {method: Decimal("0.00") for method in PaymentMethod.ALL}
    payments_count = 0
    for method, count, total in rows:
        by_method[method] = Decimal(str(total)).quantize(CENT)
        payments_count += count

    initial_cash = Decimal(session.initial_cash).quantize(CENT)
    expected_cash = initial_cash + by_method[PaymentMethod.CASH]
    variance = None
    if session.final_cash is not None:
        variance = Decimal(session.final_cash).quantize(CENT) - expected_cash

    return {
        "session": session.to_dict(),
        "payments_count": payments_count,
        "totals_by_method": {method: str(amount) for method, amount in by_method.items()},
        "total_collected": str(sum(by_method.values(), Decimal("0.00"))),
        "expected_cash": str(expected_cash),
        "variance": str(variance) if variance is not None else None,
    }
