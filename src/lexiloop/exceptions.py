"""Exceptions raised by the scheduler."""


class LexiloopError(Exception):
    """Base class for scheduler errors."""


class StoreError(LexiloopError):
    """The backing store could not complete an operation."""

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        message = f"Store operation '{operation}' failed"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class InvalidTransition(LexiloopError):
    """A session flow was asked to move along an edge it does not have."""

    def __init__(self, state, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while in state '{state.value}'")
