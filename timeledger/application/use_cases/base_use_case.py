"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic
from dataclasses import dataclass
from datetime import datetime

from timeledger.domain.models.base import DomainException

logger = logging.getLogger(__name__)


T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: DomainException) -> "UseCaseResult[T]":
        """Create error result from a domain exception."""
        metadata = None
        field = getattr(exc, "field", None)
        if field:
            metadata = {"field": field}
        return cls.error_result(exc.message, exc.code, metadata)


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.
    Domain errors become error results; anything else propagates to the
    web layer's error handler.
    """

    def __init__(self):
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None

    async def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with error handling and timing metadata.
        """
        self.execution_start = datetime.utcnow()

        try:
            await self._validate_request(request)
            result = await self._execute_business_logic(request)
        except DomainException as exc:
            self.execution_end = datetime.utcnow()
            logger.warning("%s failed: %s (%s)", type(self).__name__, exc.message, exc.code)

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata = {
                **(error_result.metadata or {}),
                "execution_time_seconds": self._elapsed_seconds(),
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            }
            return error_result

        self.execution_end = datetime.utcnow()
        return UseCaseResult.success_result(
            result,
            metadata={
                "execution_time_seconds": self._elapsed_seconds(),
                "executed_at": self.execution_end.isoformat()
            }
        )

    async def _validate_request(self, request: T) -> None:
        """
        Validate the request. Override in subclasses if needed.
        Pydantic requests are already validated on construction.
        """
        pass

    @abstractmethod
    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass

    def _elapsed_seconds(self) -> float:
        return (self.execution_end - self.execution_start).total_seconds()


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read-only computations).
    """
    pass
