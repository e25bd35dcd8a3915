"""
Bounded calls to remote collaborators (database, identity provider).

A remote call that times out or loses its connection is reported as
TRANSIENT_ERROR, which callers may retry. Everything else propagates.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from tenant_access.domain.errors import transient_error
from tenant_access.libs.result import Result, Return

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (asyncio.TimeoutError, OperationalError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


async def run_bounded(
    operation: str, awaitable: Awaitable[Result[T]], timeout: float
) -> Result[T]:
    """Await a Result-returning coroutine with a timeout"""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except Exception as exc:
        if not is_transient(exc):
            raise
        logger.warning(f"Transient failure in {operation}: {type(exc).__name__}: {exc}")
        return Return.err(transient_error(operation))
