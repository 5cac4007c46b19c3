"""Domain errors shared by every WashHub service.

Services raise these instead of HTTP exceptions; ``main.py`` maps them to
status codes.
"""

import functools
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

logger = logging.getLogger(__name__)


class WashHubError(Exception):
    """Base class for all domain errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WashHubError):
    """Malformed input: bad id, out-of-range value, missing field, bad enum value"""


class NotFoundError(WashHubError):
    """A referenced entity does not exist"""

    def __init__(self, entity: str, message: Optional[str] = None):
        super().__init__(message or f"{entity} not found")
        self.entity = entity


class ConflictError(WashHubError):
    """An invariant would be violated (duplicate slot, busy worker, ...)"""


class PermissionDeniedError(ConflictError):
    """The caller's role or ownership does not allow the operation"""


class DependencyError(WashHubError):
    """The store failed, timed out or was cancelled"""

    def __init__(self, message: str, retriable: bool = False):
        super().__init__(message)
        self.retriable = retriable


def store_operation(func):
    """
    Wrap a repository call so store failures surface as domain errors.

    The wrapped function must take the SQLAlchemy session as its first
    positional argument. IntegrityError is re-raised untouched (after a
    rollback) so the service layer can turn it into a ConflictError.
    """

    @functools.wraps(func)
    def wrapper(db, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except IntegrityError:
            db.rollback()
            raise
        except (OperationalError, PoolTimeoutError) as e:
            db.rollback()
            logger.error(f"❌ Store unavailable in {func.__qualname__}: {e}")
            raise DependencyError("store temporarily unavailable", retriable=True) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Store error in {func.__qualname__}: {e}")
            raise DependencyError("store operation failed") from e

    return wrapper
