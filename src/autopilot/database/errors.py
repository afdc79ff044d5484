import functools
from typing import Awaitable, Callable, ParamSpec, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from autopilot.main.exceptions import PersistenceException, UniqueException

P = ParamSpec("P")
R = TypeVar("R")


def translate_db_errors(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Re-raise SQLAlchemy errors from a repository method as domain exceptions.

    Unique constraint violations become UniqueException, everything else
    PersistenceException.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except IntegrityError as e:
            message = str(e.orig or e)
            if "unique" in message.lower():
                raise UniqueException(f"{func.__qualname__}: {message}") from e
            raise PersistenceException(f"{func.__qualname__} failed: {message}") from e
        except SQLAlchemyError as e:
            message = str(getattr(e, "orig", None) or e)
            raise PersistenceException(f"{func.__qualname__} failed: {message}") from e

    return wrapper
