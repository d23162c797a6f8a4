"""
Engine errors.

Collected in one place so the API layer can map them uniformly.
"""


class TastingRoomError(Exception):
    """Base class for every engine error."""
    error_code = "INTERNAL_ERROR"


class ContractViolation(TastingRoomError):
    """
    A command the reducer does not know reached it.

    This is a caller bug, not a data problem. Never caught by the engine.
    """
    error_code = "CONTRACT_VIOLATION"

    def __init__(self, action_type):
        self.action_type = action_type
        super().__init__(f"Unhandled action type: {action_type!r}")


class ValidationError(TastingRoomError):
    """Payload breaks a state invariant (empty roster, duplicate ids, unknown bottle...)."""
    error_code = "VALIDATION_ERROR"


class InvalidPhaseError(TastingRoomError):
    """Command is not legal in the current phase."""
    error_code = "INVALID_PHASE"

    def __init__(self, action_type, phase):
        self.action_type = action_type
        self.phase = phase
        super().__init__(f"{action_type.value} not allowed during phase '{phase.value}'")


class SessionNotFound(TastingRoomError):
    error_code = "SESSION_NOT_FOUND"

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")
