"""API Gateway module for vmgateway.

FastAPI application exposing the VM listing and the streamed
per-machine operation, with access logging, recovery, and JSON error
envelopes.
"""
