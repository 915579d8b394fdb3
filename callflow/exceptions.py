"""Error taxonomy for the completion proxy and the dashboard client."""


class CallFlowError(Exception):
    """Base error carrying the HTTP status the proxy answers with."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class PayloadValidationError(CallFlowError):
    """Raised when a request body does not match the agent request schema."""

    status_code = 400

    def __init__(self, message: str = "Invalid payload for call agent.", fields: list[str] = None):
        self.fields = fields or []
        super().__init__(message)


class ConfigurationError(CallFlowError):
    """Raised when the completion credential is missing."""

    status_code = 500

    def __init__(self, message: str = "OpenAI API key is missing from the environment."):
        super().__init__(message)


class UpstreamError(CallFlowError):
    """Raised when the completion model cannot be reached or answers unusably."""

    status_code = 502

    def __init__(self, message: str = "Unable to reach the intelligence engine right now. Try again shortly."):
        super().__init__(message)


class ClientTransportError(Exception):
    """Raised by the dashboard client when its request to the proxy fails."""

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self):
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message
