"""Batch engine models for fetchkit.

Type-safe models for batch input, coordinator state and results.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fetchkit.core.errors import ErrorCategory

if TYPE_CHECKING:
    import asyncio

    from fetchkit.core.batch.coordinator import TaskCoordinator


SUPPORTED_METHODS = ("get", "post")


class WorkItem(BaseModel):
    """One named request in a batch submission."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Unique identifier within the batch")
    url: str = Field(..., min_length=1, description="Resource URL passed to the executor")
    method: str = Field("get", description="HTTP method: 'get' or 'post'")
    handler: Optional[Callable[[Any], Any]] = Field(
        None, description="Transforms or validates the result; return False to fail the item"
    )
    opts: Dict[str, Any] = Field(
        default_factory=dict, description="Per-item options merged over batch defaults"
    )
    data: Any = Field(None, description="Request body for post items")

    @field_validator("id", "url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> str:
        if value is None or value == "":
            return "get"
        normalized = str(value).lower()
        if normalized not in SUPPORTED_METHODS:
            raise ValueError(f"unsupported HTTP method {value!r}")
        return normalized


@dataclass
class CoordinatorState:
    """Completion bookkeeping owned by one TaskCoordinator."""

    required: Set[str] = field(default_factory=set)
    completed: Set[str] = field(default_factory=set)
    failed: Set[str] = field(default_factory=set)
    winner: Optional[str] = None

    def copy(self) -> "CoordinatorState":
        return CoordinatorState(
            required=set(self.required),
            completed=set(self.completed),
            failed=set(self.failed),
            winner=self.winner,
        )


@dataclass
class CompletionSnapshot:
    """First argument of every terminal callback."""

    context: Any
    state: CoordinatorState
    trigger: str


@dataclass
class TaskResult:
    """Value each submission handle resolves to."""

    id: str
    result: Any


@dataclass
class TaskError:
    """Recorded in place of a result when executing an item raised."""

    id: str
    error: str
    error_type: str
    category: ErrorCategory = ErrorCategory.UNKNOWN

    @classmethod
    def from_exception(cls, task_id: str, exc: BaseException, category: ErrorCategory) -> "TaskError":
        """Factory method to build a TaskError from a caught exception."""
        return cls(
            id=task_id,
            error=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            category=category,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "error": self.error,
            "error_type": self.error_type,
            "category": self.category.value,
        }


@dataclass
class BatchOutcome:
    """Result of BatchLoader.run().

    ``results`` is a dict of id -> result when the run awaited every item,
    or the list of live handles (one ``asyncio.Future`` per item, in
    submission order) when it did not.
    """

    coordinator: "TaskCoordinator"
    results: Union[Dict[str, Any], List["asyncio.Future"]]

    @property
    def failed_ids(self) -> Set[str]:
        return self.coordinator.state.failed
