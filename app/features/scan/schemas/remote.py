"""
Scan job as reported by the remote accessibility scanner.
"""
import enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScanStatus(str, enum.Enum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


IN_PROGRESS_STATUSES = {ScanStatus.pending, ScanStatus.running}
TERMINAL_STATUSES = {ScanStatus.completed, ScanStatus.failed}


class RemoteOutcome(enum.Enum):
    """Non-job results of a scanner call."""
    UNCONFIGURED = "unconfigured"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


class RemoteJob(BaseModel):
    # The scanner owns this schema; keep whatever else it sends.
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    status: ScanStatus = ScanStatus.pending
    violations: List[Dict[str, Any]] = Field(default_factory=list)
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("violations", mode="before")
    @classmethod
    def _null_violations_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def total_issue_count(self) -> int:
        return sum(len(v.get("issues") or []) for v in self.violations)

    @property
    def is_in_progress(self) -> bool:
        return self.status in IN_PROGRESS_STATUSES
