"""Lists virtual machines under the configured inventory root.

Runs ``govc ls <root>`` through the Invocation Bridge and turns each
output line into a name relative to the root.
"""

from __future__ import annotations

import logging

from vmgateway.bridge.invoker import InvocationBridge
from vmgateway.errors import InvocationFailure

logger = logging.getLogger(__name__)

LIST_SUBCOMMAND = "ls"


def list_vms(bridge: InvocationBridge, root_path: str) -> list[str]:
    """Return the VM names found under ``root_path``.

    Raises:
        InvocationFailure: If the list command exits with a non-zero status.
    """
    result = bridge.invoke([LIST_SUBCOMMAND, root_path])
    if not result.succeeded:
        logger.warning("List of %s failed with exit %d", root_path, result.exit_code)
        raise InvocationFailure(result.output, result.exit_code)

    logger.debug("List of %s returned: %s", root_path, result.output)
    return parse_vm_names(result.output, root_path)


def parse_vm_names(output: str, root_path: str) -> list[str]:
    """Strip ``root_path`` from every output line longer than it.

    Lines no longer than the root (including the root entry itself and
    blank lines) are dropped.
    """
    prefix_len = len(root_path)
    return [line[prefix_len:] for line in output.split("\n") if len(line) > prefix_len]
