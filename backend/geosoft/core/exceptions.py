class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class GridMergeError(AppError):
    """Raised when a cell selection cannot be merged into one region."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class QuotaExceededError(AppError):
    """Raised when a user has spent their AI request allowance."""
    def __init__(self, used: int, quota: int):
        super().__init__(
            "AI request quota exhausted for this account.",
            status_code=429,
            details={"used_quota": used, "api_quota": quota},
        )

class AIServiceError(AppError):
    """Base class for failures of the generative model integration."""
    def __init__(self, message: str, status_code: int = 502, details: dict = None):
        super().__init__(message, status_code=status_code, details=details)

class MissingAPIKeyError(AIServiceError):
    """Raised before any network call when no model API key is configured."""
    def __init__(self, message: str = "API key is required for Gemini service"):
        super().__init__(message, status_code=503)

class AIResponseFormatError(AIServiceError):
    """Raised when the model answered but its text does not hold the expected JSON.

    Callers may retry immediately; this is not an upstream availability problem.
    """
    def __init__(self, reason: str):
        super().__init__("AI returned invalid format. Please try again.", details={"reason": reason})

class UpstreamModelError(AIServiceError):
    """Raised when the generative model call itself failed."""
    def __init__(self, message: str, status_code: int = 502, details: dict = None):
        super().__init__(message, status_code=status_code, details=details)
