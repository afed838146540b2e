"""Per-user write serialization."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.orm import Session

from challenge_engine.core.config import settings


def lock_user(db: Session, user_id: str) -> None:
    """Serialize mutating operations of one user until the transaction ends.

    PostgreSQL takes a transaction-scoped advisory lock keyed on the user id,
    waiting at most ``db_lock_timeout_ms``. Other backends serialize writers
    themselves, so nothing is done there.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(f"SET LOCAL lock_timeout = {int(settings.db_lock_timeout_ms)}"))
    db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:user_id))"), {"user_id": user_id})
