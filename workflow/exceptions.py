from core.exceptions import DomainError


class WorkflowError(DomainError):
    pass


class InvalidStateError(WorkflowError):
    """The requisition is in a status that does not allow the operation."""


class UnsupportedTransitionError(WorkflowError):
    def __init__(self, level: str, action: str):
        super().__init__(f"No transition for action '{action}' at level '{level}'.")
        self.level = level
        self.action = action


class StaleStateError(WorkflowError):
    """The requisition moved to another level since the caller last read it."""

    def __init__(self, expected_level: str, actual_level: str, changed_at=None):
        if changed_at is None:
            message = f"Requisition is at level '{actual_level}', expected '{expected_level}'."
        else:
            message = f"Requisition at level '{actual_level}' was changed at {changed_at:%Y-%m-%d %H:%M:%S}."
        super().__init__(message)
        self.expected_level = expected_level
        self.actual_level = actual_level
        self.changed_at = changed_at


class ActorNotAllowedError(WorkflowError):
    def __init__(self, role: str, level: str):
        super().__init__(f"Role '{role}' cannot act at level '{level}'.")
        self.role = role
        self.level = level
