"""Domain errors raised by the engine, the coordinator and the facade.

Every error carries the HTTP status the app maps it to, so routes never have
to translate them one by one.
"""


class OdomoError(Exception):
    """Base class for all domain errors."""

    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(OdomoError):
    """Referenced pet, account or inventory entry does not exist."""

    status_code = 404
    kind = "not_found"


class Conflict(OdomoError):
    """The record being created already exists."""

    status_code = 409
    kind = "conflict"


class InvalidRequest(OdomoError):
    """Malformed amount, quantity, step count or owner id."""

    status_code = 422
    kind = "invalid_request"


class PreconditionFailed(OdomoError):
    """Insufficient balance or quantity, or wrong lifecycle state."""

    status_code = 400
    kind = "precondition_failed"


class TerminalState(PreconditionFailed):
    """The pet is dead and the action is not a resurrection."""

    kind = "terminal_state"
