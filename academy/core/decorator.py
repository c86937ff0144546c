import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class DBException(Exception):
    error_type = "database_error"

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundException(DBException):
    """A referenced course, user, coupon or enrollment does not exist."""

    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, 404)


class DataUnavailableException(DBException):
    """The underlying query failed, so no result can be computed."""

    error_type = "data_unavailable"

    def __init__(self, message: str = "Data is temporarily unavailable"):
        super().__init__(message, 503)


def db_exception(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DBException:
            raise
        except IntegrityError:
            # Usually a duplicate entry
            raise DBException("Duplicate entry: already exists", 409)
        except SQLAlchemyError as e:
            logger.error(f"Query failed in {func.__name__}: {type(e).__name__}: {e}")
            raise DataUnavailableException()

    return wrapper
