class CopilotExtensionError(Exception):
    """Base exception for all errors raised by copilot_extensions."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

class PublicKeyError(CopilotExtensionError):
    """Raised when the platform signing key cannot be fetched or parsed."""
    pass

class PayloadDecodeError(CopilotExtensionError):
    """Raised when a payload signature is not valid base64 / ASN.1.

    A signature that decodes but does not match is not an error, the
    verifier returns ``False`` for it.
    """
    pass

class SessionValidationError(CopilotExtensionError):
    """Raised when independently supplied session facts contradict each other."""
    def __init__(self, message: str, field: str, details: dict = None):
        super().__init__(message, details)
        self.field = field

class StreamParseError(CopilotExtensionError):
    """Raised when an event stream cannot be read or a frame cannot be decoded."""
    def __init__(self, message: str, category: str, details: dict = None):
        super().__init__(message, details)
        self.category = category

class CopilotAPIError(CopilotExtensionError):
    """Raised when the chat completions API answers with a non-200 status."""
    def __init__(self, message: str, status_code: int, details: dict = None):
        super().__init__(message, details)
        self.status_code = status_code
