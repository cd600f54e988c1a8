"""
Base Service Class for Relief Triage
Provides common functionality for the collaborator services
"""

from abc import ABC
from typing import Optional, Dict, Any, Callable
import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type
import httpx
from datetime import datetime

from config import Settings, settings as default_settings
from services.record_store import RecordStore


class BaseService(ABC):
    """Base class for all services with common functionality"""

    def __init__(self, store: Optional[RecordStore] = None, settings: Optional[Settings] = None):
        """
        Initialize base service

        Args:
            store: Record store the service reads and writes through
            settings: Settings override (defaults to the global settings)
        """
        self.store = store
        self.settings = settings or default_settings
        self.logger = structlog.get_logger(self.__class__.__name__)
        self._setup()

    def _setup(self):
        """Override for service-specific setup"""
        pass

    def _handle_error(
        self,
        error: Exception,
        context: Dict[str, Any],
        reraise: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Centralized error handling with logging

        Args:
            error: The exception that occurred
            context: Additional context for logging
            reraise: Whether to reraise the exception

        Returns:
            Error dict if not reraising, None otherwise
        """
        error_info = {
            "error": str(error),
            "error_type": type(error).__name__,
            "timestamp": datetime.utcnow().isoformat(),
            **context
        }

        self.logger.error(
            f"{self.__class__.__name__} error",
            **error_info
        )

        if reraise:
            raise error

        return {
            "success": False,
            "error": str(error),
            "error_type": type(error).__name__
        }

    async def _api_call_with_retry(
        self,
        func: Callable,
        *args,
        max_attempts: int = 3,
        min_wait: float = 2.0,
        **kwargs
    ) -> Any:
        """
        Execute API call with automatic retry logic

        Args:
            func: Async function to call
            max_attempts: Total attempts before giving up
            min_wait: Base of the exponential backoff in seconds

        Returns:
            Result from the function call

        Raises:
            httpx.TimeoutException: If all retries timeout
            httpx.HTTPError: If HTTP error persists after retries
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=min_wait, min=min_wait, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.HTTPError)),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                try:
                    return await func(*args, **kwargs)
                except httpx.TimeoutException:
                    self.logger.warning(
                        "API timeout, retrying...",
                        function=getattr(func, "__name__", repr(func)),
                        attempt=attempt.retry_state.attempt_number
                    )
                    raise
                except httpx.HTTPError as e:
                    self.logger.error(
                        f"API HTTP error: {e}",
                        function=getattr(func, "__name__", repr(func)),
                        attempt=attempt.retry_state.attempt_number
                    )
                    raise

    def _log_operation(
        self,
        operation: str,
        details: Dict[str, Any],
        level: str = "info"
    ):
        """
        Log service operation with consistent format

        Args:
            operation: Name of the operation
            details: Operation details
            level: Log level (info, warning, error)
        """
        log_func = getattr(self.logger, level, self.logger.info)
        log_func(
            f"{self.__class__.__name__}.{operation}",
            **details
        )
