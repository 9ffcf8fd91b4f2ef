"""Lock-guarded capture of external command output.

The wrapped tool reports its results only by writing to standard
output. :class:`InvocationBridge` swaps ``sys.stdout`` for an in-memory
sink, runs the command, and restores the original stream on every exit
path. Because ``sys.stdout`` is process-wide, the whole
redirect -> run -> restore sequence is serialized behind one lock.
"""

from __future__ import annotations

import contextlib
import io
import logging
import os
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Callable, Mapping, Sequence, TextIO

from vmgateway.domain.models import CapturedInvocation

logger = logging.getLogger(__name__)

# Exit statuses reported when the child could not be run to completion,
# following the shell / coreutils conventions.
EXIT_COMMAND_NOT_FOUND = 127
EXIT_TIMED_OUT = 124

# Guards sys.stdout across every bridge instance in the process.
_STDOUT_LOCK = threading.Lock()


class CommandRunner(ABC):
    """Abstract interface for executing one command invocation.

    Implementations write everything the command produces on standard
    output to ``stdout`` and return the command's exit status.
    """

    @abstractmethod
    def run(self, args: Sequence[str], stdout: TextIO) -> int:
        """Execute the command with ``args`` and return its exit status.

        Args:
            args: Argument vector, first element usually the subcommand.
            stdout: Sink receiving the command's standard output. It is
                also installed as ``sys.stdout`` for the duration of the
                call.
        """
        ...


class SubprocessRunner(CommandRunner):
    """Runs the govc binary as a child process."""

    def __init__(
        self,
        binary: str = "govc",
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._binary = binary
        self._env = dict(env or {})
        self._timeout = timeout

    def run(self, args: Sequence[str], stdout: TextIO) -> int:
        argv = [self._binary, *args]
        env = {**os.environ, **self._env}
        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=env,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError:
            stdout.write(f"{self._binary}: command not found")
            return EXIT_COMMAND_NOT_FOUND
        except subprocess.TimeoutExpired:
            stdout.write(f"{self._binary} {' '.join(args)}: timed out after {self._timeout}s")
            return EXIT_TIMED_OUT

        stdout.write(completed.stdout or "")
        if completed.returncode != 0 and completed.stderr:
            stdout.write(completed.stderr)
        elif completed.stderr:
            logger.debug("%s stderr: %s", self._binary, completed.stderr.strip())
        return completed.returncode


class CallableRunner(CommandRunner):
    """Runs an in-process callable that prints its results to ``sys.stdout``.

    The callable receives the argument vector and returns an exit status,
    mirroring a CLI entry point such as ``main(argv) -> int``.
    """

    def __init__(self, func: Callable[[Sequence[str]], int]) -> None:
        self._func = func

    def run(self, args: Sequence[str], stdout: TextIO) -> int:
        return self._func(list(args))


class InvocationBridge:
    """Runs commands and returns their captured output and exit status.

    Example usage::

        bridge = InvocationBridge(SubprocessRunner(binary="govc"))
        result = bridge.invoke(["ls", "/dc/vm/"])
        if result.exit_code == 0:
            print(result.output.splitlines())
    """

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def invoke(self, args: Sequence[str]) -> CapturedInvocation:
        """Run one invocation with ``sys.stdout`` redirected to a private sink.

        Blocks while another invocation holds the redirected stream. A
        non-zero exit status is returned, not raised. Exceptions from the
        runner propagate after ``sys.stdout`` has been restored.
        """
        with _STDOUT_LOCK:
            sink = io.StringIO()
            with contextlib.redirect_stdout(sink):
                exit_code = self._runner.run(args, sink)
            output = sink.getvalue()

        logger.debug("Invoked %s -> exit %d (%d bytes)", list(args), exit_code, len(output))
        return CapturedInvocation(output=output, exit_code=exit_code)
