"""Domain models for vmgateway.

Public API:
    CapturedInvocation -- Output and exit status of one bridge call
    StreamRecord -- One document of a streamed operation
    VmListResponse -- Success envelope for the VM listing
    ErrorResponse -- Error envelope
"""

from vmgateway.domain.models import (
    CapturedInvocation,
    ErrorResponse,
    HealthResponse,
    StreamRecord,
    VmListResponse,
)

__all__ = [
    "CapturedInvocation",
    "ErrorResponse",
    "HealthResponse",
    "StreamRecord",
    "VmListResponse",
]
