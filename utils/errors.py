from typing import Optional


class AppError(Exception):
    """Base class for failures that are mapped to a JSON error response"""

    status_code: int = 500
    summary: str = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AppError):
    summary = "Service is not configured"


class UpstreamError(AppError):
    summary = "Model service request failed"

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body

    @property
    def rate_limited(self) -> bool:
        # Vertex AI reports quota exhaustion as 429 / RESOURCE_EXHAUSTED
        return self.upstream_status == 429 or "RESOURCE_EXHAUSTED" in self.body


class ParseError(AppError):
    summary = "Model output is not valid JSON"


class ShapeError(AppError):
    summary = "Model output does not match the expected format"


class InputValidationError(AppError):
    status_code = 400
    summary = "Invalid request body"


class RateLimitError(AppError):
    status_code = 429
    summary = "Please wait a moment before making another request"

    def __init__(self, message: str, retry_after_ms: int):
        super().__init__(message)
        self.retry_after_ms = retry_after_ms

    @property
    def retry_after_seconds(self) -> int:
        return max(1, -(-self.retry_after_ms // 1000))
