class DomainError(Exception):
    """Base class for business-rule violations raised by the engine."""
