"""
Typed Exception Hierarchy for the Issuance Kernel.

Every error has a typed class, a ``code`` class attribute (machine-readable,
safe to show in an API or a log line) and structured attributes instead of
a message that callers must parse.

    IssuanceKernelError (base)
    |
    +-- EditorError
    |   +-- UnknownLineError
    |   +-- ReadOnlyPanelError
    |   +-- PriorityLockedError
    |   +-- SubmissionInProgressError
    |
    +-- PanelError
    |   +-- InvalidPanelTransitionError
    |
    +-- RemoteError
    |   +-- RemoteRequestError
    |
    +-- ConfigError
        +-- ConfigValidationError

Input rejection (a negative quantity typed into a field, an allocation that
would exceed the issued quantity) is NOT an exception: the editor drops the
input and logs a warning.  Pre-submit validation failures are returned as
``ValidationResult`` values.  Only programmer errors, lifecycle violations
and remote failures raise.
"""


class IssuanceKernelError(Exception):
    """
    Base exception for all issuance kernel errors.

    All subclasses must have a `code` class attribute.
    """

    code: str = "ISSUANCE_KERNEL_ERROR"


# Editor exceptions


class EditorError(IssuanceKernelError):
    """Base exception for request line editor errors."""

    code: str = "EDITOR_ERROR"


class UnknownLineError(EditorError):
    """No line with the given key is loaded in the editor."""

    code: str = "UNKNOWN_LINE"

    def __init__(self, line_key: int):
        self.line_key = line_key
        super().__init__(f"No request line with key {line_key}")


class ReadOnlyPanelError(EditorError):
    """A mutating operation was attempted on a read-only panel."""

    code: str = "READ_ONLY_PANEL"

    def __init__(self, request_id: str, state: str):
        self.request_id = request_id
        self.state = state
        super().__init__(
            f"Request {request_id} is read-only in state '{state}'"
        )


class PriorityLockedError(EditorError):
    """
    The high-priority flag was set by another user.

    Only the user who raised the flag may lower it.
    """

    code: str = "PRIORITY_LOCKED"

    def __init__(self, set_by: str, attempted_by: str):
        self.set_by = set_by
        self.attempted_by = attempted_by
        super().__init__(
            f"Priority can only be changed by {set_by}, not {attempted_by}"
        )


class SubmissionInProgressError(EditorError):
    """A submit was attempted while another submit is still in flight."""

    code: str = "SUBMISSION_IN_PROGRESS"

    def __init__(self, request_id: str, action: str):
        self.request_id = request_id
        self.action = action
        super().__init__(
            f"Cannot {action} request {request_id}: a submission is already in progress"
        )


# Panel lifecycle exceptions


class PanelError(IssuanceKernelError):
    """Base exception for panel lifecycle errors."""

    code: str = "PANEL_ERROR"


class InvalidPanelTransitionError(PanelError):
    """The panel state machine has no transition for (state, action)."""

    code: str = "INVALID_PANEL_TRANSITION"

    def __init__(self, from_state: str, action: str):
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"No panel transition for action '{action}' from state '{from_state}'"
        )


# Remote exceptions


class RemoteError(IssuanceKernelError):
    """Base exception for failures in the backend API collaborator."""

    code: str = "REMOTE_ERROR"


class RemoteRequestError(RemoteError):
    """
    An HTTP call to the backend failed.

    ``backend_message`` carries the raw message text from the response body
    when the backend supplied one; it is what the user gets to see.
    """

    code: str = "REMOTE_REQUEST_FAILED"

    def __init__(
        self,
        operation: str,
        status_code: int | None,
        backend_message: str | None,
    ):
        self.operation = operation
        self.status_code = status_code
        self.backend_message = backend_message
        status = status_code if status_code is not None else "no response"
        super().__init__(
            f"{operation} failed ({status}): {backend_message or 'no message'}"
        )

    @property
    def user_message(self) -> str:
        return self.backend_message or f"Failed to {self.operation.replace('_', ' ')}."


# Configuration exceptions


class ConfigError(IssuanceKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigValidationError(ConfigError):
    """A configuration set failed structural validation."""

    code: str = "CONFIG_VALIDATION_FAILED"

    def __init__(self, config_name: str, errors: list[str]):
        self.config_name = config_name
        self.errors = errors
        super().__init__(
            f"Configuration '{config_name}' is invalid: {len(errors)} error(s): "
            + "; ".join(errors)
        )
