"""
issuance_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure engines: the request line
    editor, the approval panel that drives it, and the HTTP client for
    the backend.  This is the only layer that talks to the network or
    reads the wall clock.

Architecture position:
    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        issuance_services/ -> issuance_engines/  (allowed)
        issuance_services/ -> issuance_kernel/   (allowed)
        issuance_services/ -> issuance_config/   (allowed)
        issuance_engines/  -> issuance_services/ (FORBIDDEN)
        issuance_kernel/   -> issuance_services/ (FORBIDDEN)
"""

from issuance_services.api_client import HttpRequestApi, RequestApi
from issuance_services.editor import (
    ALLOCATION_ADD,
    ALLOCATION_REMOVE,
    RequestLineEditor,
)
from issuance_services.panel_service import ApprovalPanel, SubmitOutcome

__all__ = [
    "ALLOCATION_ADD",
    "ALLOCATION_REMOVE",
    "ApprovalPanel",
    "HttpRequestApi",
    "RequestApi",
    "RequestLineEditor",
    "SubmitOutcome",
]
