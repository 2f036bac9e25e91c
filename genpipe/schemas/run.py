from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, PrivateAttr

FlowStatus = Literal["pending", "running", "completed", "failed", "cancelled"]


class LogEntry(BaseModel):
    at: datetime
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)


class FlowRun(BaseModel):
    flow: str
    status: FlowStatus = "pending"
    input: Any = None
    output: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    reason: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    logs: List[LogEntry] = Field(default_factory=list)

    _result: Any = PrivateAttr(default=None)
    _exception: Optional[BaseException] = PrivateAttr(default=None)

    @property
    def result(self) -> Any:
        """The handler's output as returned, before JSON conversion."""
        return self._result

    @property
    def exception(self) -> Optional[BaseException]:
        return self._exception

    @property
    def done(self) -> bool:
        return self.status in ("completed", "failed", "cancelled")


class RunFlowRequest(BaseModel):
    input: Any = None
