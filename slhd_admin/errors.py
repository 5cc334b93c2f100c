"""
Domain errors shared by services and routers.

A missing stage record is not an error (the ledger falls back to a default),
and negative pipeline counts are only logged, so neither has a class here.
"""
import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError

log = logging.getLogger("storage")


class StorageUnavailable(Exception):
    """An aggregate/store query failed. Routers answer 503, nothing partial."""


class ApprovalError(Exception):
    """A user approval/rejection rule was violated."""


class UserNotFound(LookupError):
    pass


@contextmanager
def storage_errors(what: str):
    """Re-raise SQLAlchemy failures inside the block as StorageUnavailable."""
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("%s failed: %s", what, exc)
        raise StorageUnavailable(f"{what} unavailable") from exc
