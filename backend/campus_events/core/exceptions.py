"""
Domain errors.

Raised from the service layer as HTTPException subclasses so routes
do not need to translate them.
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """A referenced id does not resolve to a record."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} {entity_id} not found",
        )


class StateTransitionError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class RequestStateError(StateTransitionError):
    pass


class EventStateError(StateTransitionError):
    pass


class SurveyStateError(StateTransitionError):
    pass


class ConcurrencyConflictError(HTTPException):
    """Optimistic lock retries exhausted."""

    def __init__(self, detail: str = "Update failed due to concurrent modification. Please try again."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
