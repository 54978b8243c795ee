"""
Transaction scoping for every mutating points operation.

    with transaction_scope(session) as tx:
        tx.add(row)

Commits when the block exits normally; rolls back and re-raises on any
exception, so a failed or interrupted operation leaves nothing behind.
"""
import logging
from contextlib import contextmanager

from ..extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction_scope(session=None):
    """Run the block in one database transaction on the given session."""
    session = session or db.session
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
