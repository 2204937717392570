"""Domain exceptions."""


class GrowCoachException(Exception):
    """Base exception for the coaching engine."""

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInputError(GrowCoachException):
    """Client input rejected before any mutation."""

    def __init__(self, field: str, reason: str = None):
        message = f"Invalid {field}"
        if reason:
            message += f": {reason}"

        super().__init__(
            message=message,
            code="INVALID_INPUT"
        )
        self.field = field


class MalformedModelOutputError(GrowCoachException):
    """Generator reply could not be split into message and state."""

    def __init__(self, details: str = None):
        message = "Malformed model output"
        if details:
            message += f": {details}"

        super().__init__(
            message=message,
            code="MALFORMED_MODEL_OUTPUT"
        )


class AIServiceError(GrowCoachException):
    """AI service error."""

    def __init__(self, service: str, details: str = None):
        message = f"AI service error in {service}"
        if details:
            message += f": {details}"

        super().__init__(
            message=message,
            code="AI_SERVICE_ERROR"
        )


class PersistenceError(GrowCoachException):
    """Durable store error."""

    def __init__(self, operation: str, details: str = None):
        message = f"Persistence error during {operation}"
        if details:
            message += f": {details}"

        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR"
        )
