"""Invocation Bridge module for vmgateway.

Runs the external govc command and recovers everything it writes to
standard output. Only one invocation holds the redirected stream at a
time.

Public API:
    InvocationBridge -- Lock-guarded capture of command output
    CommandRunner -- Abstract base class for command runners
    SubprocessRunner -- Runs govc as a child process
    CallableRunner -- Runs an in-process callable that prints to stdout
"""

from vmgateway.bridge.invoker import (
    CallableRunner,
    CommandRunner,
    InvocationBridge,
    SubprocessRunner,
)

__all__ = ["CallableRunner", "CommandRunner", "InvocationBridge", "SubprocessRunner"]
