"""Domain exceptions raised by the service layer.

Routes translate these into HTTPException; status_code is the suggested
HTTP status for each kind.
"""


class ArenaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ArenaError):
    status_code = 400


class NotFoundError(ArenaError):
    status_code = 404


class ConflictError(ArenaError):
    status_code = 409


class AlreadyEvaluatedError(ConflictError):
    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__("Evaluation already exists for this match.")


class EvaluationError(ArenaError):
    status_code = 500


class EvaluationParseError(EvaluationError):
    """Model output was not the expected JSON mapping."""
    pass
