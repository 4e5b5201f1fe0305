"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the timeout/error policy for queries.
"""

import asyncio
from typing import Any, TypeVar, Generic
from supabase import Client

from .exceptions import OperationTimeoutError, StoreError
from .timeouts import with_timeout


T = TypeVar("T")

DEFAULT_STORE_TIMEOUT = 8.0


class BaseRepository(Generic[T]):
    """
    Base class for all Supabase repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - ``_execute`` which runs a built query off the event loop,
      bounded by the store timeout, and wraps driver errors in StoreError

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class SessionRepository(BaseRepository[Session]):
            async def get(self, session_id: str) -> Optional[Session]:
                query = self._db.table("sessions").select("*").eq("session_id", session_id)
                result = await self._execute(query, "get session")
                if not result.data:
                    return None
                return self._map_to_session(result.data[0])
    """

    def __init__(self, db: Client, timeout: float = DEFAULT_STORE_TIMEOUT) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
            timeout: Budget in seconds for each query.
        """
        self._db = db
        self._timeout = timeout

    async def _execute(self, query: Any, operation: str) -> Any:
        """
        Execute a PostgREST query builder.

        The Supabase client is synchronous, so the call runs in a worker
        thread and the await is bounded by the repository timeout.

        Raises:
            OperationTimeoutError: The query exceeded its budget.
            StoreError: The store rejected the query.
        """
        try:
            return await with_timeout(
                asyncio.to_thread(query.execute),
                self._timeout,
                operation,
            )
        except OperationTimeoutError:
            raise
        except Exception as e:
            raise StoreError(operation, str(e), db_code=getattr(e, "code", None)) from e
