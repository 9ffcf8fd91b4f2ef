"""vmgateway -- HTTP API in front of the govc virtualization CLI.

Lists virtual machines under a configured inventory path and streams
per-machine operation results back as a sequence of JSON documents.
All govc calls go through a single lock-guarded bridge that captures
the tool's standard output.
"""

__version__ = "0.1.0"
