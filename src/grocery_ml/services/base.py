# services/base.py
"""
Base class and utilities for all services.
"""

from dataclasses import asdict, dataclass, field, is_dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, List, Optional, TypeVar

from grocery_ml.core.model_store import StoreResult, StoreStatus
from grocery_ml.models.training import EpochMetrics

if TYPE_CHECKING:
    from grocery_ml.repository.protocol import FileRepositoryProtocol

T = TypeVar("T")

# Failure reasons carried in ServiceResult.metadata["reason"]
REASON_VALIDATION = "validation"
REASON_NOT_FOUND = "not_found"
REASON_STORAGE = "storage"


@dataclass
class ServiceResult(Generic[T]):
    """
    Result object returned by service operations.

    Provides a consistent interface for views to handle operation outcomes.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T = None,
        message: str = None,
        warnings: List[str] = None,
        **metadata,
    ) -> "ServiceResult[T]":
        """Create a successful result."""
        return cls(
            success=True,
            data=data,
            message=message,
            warnings=warnings or [],
            metadata=metadata,
        )

    @classmethod
    def fail(cls, error: str, warnings: List[str] = None, **metadata) -> "ServiceResult[T]":
        """Create a failed result."""
        return cls(
            success=False,
            error=error,
            warnings=warnings or [],
            metadata=metadata,
        )

    @property
    def reason(self) -> Optional[str]:
        """Failure reason tag, if the service set one."""
        return self.metadata.get("reason")

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        result = {
            "success": self.success,
            "message": self.message,
            "error": self.error,
            "warnings": self.warnings,
        }

        # Serialize data if present
        if self.data is not None:
            if hasattr(self.data, "to_dict"):
                result["data"] = self.data.to_dict()
            elif is_dataclass(self.data):
                result["data"] = asdict(self.data)
            elif isinstance(self.data, (dict, list, str, int, float, bool)):
                result["data"] = self.data
            else:
                result["data"] = str(self.data)
        else:
            result["data"] = None

        # Include non-empty metadata
        if self.metadata:
            result["metadata"] = self.metadata

        return result


@dataclass
class EpochProgress:
    """Progress information for a training run."""

    total: int
    completed: int = 0
    metrics: Optional[EpochMetrics] = None

    @property
    def percent(self) -> float:
        """Get completion percentage."""
        return (self.completed / self.total * 100) if self.total > 0 else 0

    @property
    def remaining(self) -> int:
        """Get remaining epochs."""
        return self.total - self.completed


# Type alias for progress callback
ProgressCallback = Callable[[EpochProgress], None]


class BaseService:
    """
    Base class for all services.

    Provides common functionality for:
    - Dependency injection of the file repository
    - Progress reporting
    """

    def __init__(self, file_repository: Optional["FileRepositoryProtocol"] = None) -> None:
        """Initialize the service.

        Args:
            file_repository: Optional file repository for dependency injection.
                           Required for file-based services, not needed for in-memory services.
        """
        self.file_repository = file_repository
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        """Set a callback for progress updates during long operations."""
        self._progress_callback = callback

    def _report_progress(self, progress: EpochProgress) -> None:
        """Report progress if a callback is set."""
        if self._progress_callback:
            self._progress_callback(progress)


def store_failure(result: StoreResult, model_id: str) -> ServiceResult:
    """Convert a failed StoreResult into a tagged ServiceResult."""
    if result.status is StoreStatus.NOT_FOUND:
        return ServiceResult.fail(
            f"Model not found: {model_id}",
            reason=REASON_NOT_FOUND,
            status=result.status.value,
        )
    return ServiceResult.fail(
        f"Storage error for model {model_id} ({result.status.value}): {result.detail}",
        reason=REASON_STORAGE,
        status=result.status.value,
    )
