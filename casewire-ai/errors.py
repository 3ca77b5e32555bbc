class CasewireError(Exception):
    """Base error carrying the HTTP status the handlers should answer with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, details: str | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ConfigurationError(CasewireError):
    status_code = 500


class NothingToAnalyze(CasewireError):
    status_code = 400

    def __init__(self, message: str = "Nothing to analyze: no document text available."):
        super().__init__(message)


class GatewayError(CasewireError):
    """Non-success answer from the model gateway. Never retried."""

    status_code = 500


class RateLimitExceeded(GatewayError):
    status_code = 429

    def __init__(self, details: str | None = None):
        super().__init__("Rate limit exceeded. Please try again later.", details=details)


class InsufficientCredits(GatewayError):
    status_code = 402

    def __init__(self, details: str | None = None):
        super().__init__("Insufficient AI credits.", details=details)
