"""Core domain models for vmgateway.

These models represent the data flowing through the gateway: the raw
result of an external command invocation, the records emitted by a
streamed operation, and the JSON envelopes returned to clients.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Invocation Models
# ---------------------------------------------------------------------------


class CapturedInvocation(BaseModel):
    """The result of a single Invocation Bridge call.

    When ``exit_code`` is zero, ``output`` holds one entry per line.
    Otherwise ``output`` is diagnostic text, not data.
    """

    model_config = ConfigDict(frozen=True)

    output: str = Field(default="", description="Everything the command wrote to stdout")
    exit_code: int = Field(description="Exit status reported by the command")

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


# ---------------------------------------------------------------------------
# Streaming Models
# ---------------------------------------------------------------------------


class StreamRecord(BaseModel):
    """One step of a streamed operation, sent as its own JSON document."""

    model_config = ConfigDict(frozen=True)

    H: int
    W: int


# ---------------------------------------------------------------------------
# Response Envelopes
# ---------------------------------------------------------------------------


class VmListResponse(BaseModel):
    response: list[str] = Field(description="VM names relative to the inventory root")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    vm_path: str = ""
