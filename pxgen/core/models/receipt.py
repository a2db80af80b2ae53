"""
Receipt model — the execution contract with process runners.

The executor hands a ``ProcessCommand`` to a runner; the runner hands
back a ``Receipt``. Runners never raise: spawn errors and non-zero
exits are both captured here, and the executor decides what to do.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of running one external process."""

    runner: str
    command_id: str
    argv: list[str] = Field(default_factory=list)
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    return_code: int | None = None
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the process exited successfully."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        runner: str,
        command_id: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            runner=runner,
            command_id=command_id,
            status="ok",
            return_code=kwargs.pop("return_code", 0),
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        runner: str,
        command_id: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            runner=runner,
            command_id=command_id,
            status="failed",
            error=error,
            **kwargs,
        )
