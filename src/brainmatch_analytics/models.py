"""Analytics records produced while observing a BrainMatch session.

- **Session**: one per attached integration, immutable.
- **TaskRecord**: a single match attempt inside a level run.
- **Report**: the finalized summary of one level outcome.
- **ReportEnvelope**: what a buffered sink ships per ``submit_report``.

All are frozen Pydantic models so they serialise cleanly to JSON and
cannot be mutated after they leave the core.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Session(BaseModel):
    """Analytics session created once per attach."""

    model_config = {"frozen": True}

    id: str
    """Opaque unique id (e.g. ``session_1700000000000_k3j9x0a1b``)."""
    created_at: int
    """Epoch milliseconds."""


class TaskRecord(BaseModel):
    """One match attempt within a level run."""

    model_config = {"frozen": True}

    level_id: str
    task_id: str
    """``task_<n>`` where *n* is the 1-based sequence number within the level."""
    label: str
    expected: str
    actual: str
    time_taken_ms: int = Field(default=0, ge=0)
    xp_earned: int = Field(default=0, ge=0)


class Report(BaseModel):
    """Finalized outcome of one level run plus its accumulated metrics."""

    model_config = {"frozen": True}

    level_id: str
    success: bool
    duration_ms: int = Field(ge=0)
    xp: int = Field(default=0, ge=0)
    metrics: dict[str, str] = Field(default_factory=dict)


class ReportEnvelope(BaseModel):
    """A submitted report together with the session and tasks it belongs to."""

    model_config = {"frozen": True}

    app_name: str
    session_id: str
    report: Report
    tasks: list[TaskRecord] = Field(default_factory=list)
    submitted_at: str
    """ISO 8601 timestamp."""
