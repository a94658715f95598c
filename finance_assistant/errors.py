class AppError(Exception):
    """Base error carrying the HTTP status the API reports for it."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    default_message = "Bad request"


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class DataUnavailableError(AppError):
    status_code = 500
    default_message = "Financial data is temporarily unavailable"


# Assistant backend failures
class AssistantError(AppError):
    status_code = 500
    default_message = "Failed to get AI response"


class RateLimitedError(AssistantError):
    status_code = 429
    default_message = "The AI assistant is receiving too many requests. Please try again later."


class BackendCredentialsError(AssistantError):
    status_code = 500
    default_message = "The AI assistant is not configured correctly. Please contact support."


class ModelUnavailableError(AssistantError):
    status_code = 503
    default_message = "The AI model is temporarily unavailable. Please try again later."


class BackendPermissionError(AssistantError):
    status_code = 403
    default_message = "Access to the AI service was denied. Please contact support."
