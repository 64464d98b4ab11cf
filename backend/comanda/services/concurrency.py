# Overview: Concurrency primitives shared by the services: row locks, transactional scope, compare-and-swap.

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Mapping

from sqlalchemy import update

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE (it serializes writers at the
    database level instead), but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def transaction():
    """
    Transactional scope around a multi-write sequence.

    Commits when the block exits normally; rolls back and re-raises on any
    exception so no partial write survives.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def update_if(model, ident: Any, expected: Mapping[str, Any], values: Mapping[str, Any]) -> int:
    """
    Conditional update: UPDATE model SET values WHERE id = ident AND expected.

    expected maps column names to the values the caller last read; None means
    "IS NULL". Returns the number of matched rows (0 means someone else
    changed the row first). Does not commit.
    """
    stmt = update(model).where(model.id == ident)
    for column_name, value in expected.items():
        column = getattr(model, column_name)
        stmt = stmt.where(column.is_(None) if value is None else column == value)
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    result = db.session.execute(stmt)
    return result.rowcount
