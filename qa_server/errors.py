"""
Service exception types

Raised by the pipeline components without any HTTP knowledge; the API layer
maps ``kind`` and ``status_code`` onto responses.
"""


class QAError(Exception):
    """Base class for all pipeline failures"""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QAError):
    """Malformed or missing request field"""

    kind = "validation"
    status_code = 400


class ResourceError(QAError):
    """Vocabulary resource missing or malformed"""

    kind = "resource"


class DownloadError(QAError):
    """Network or filesystem failure while fetching the model artifact"""

    kind = "download"


class SessionInitError(QAError):
    """ONNX Runtime could not build a session from the artifact"""

    kind = "session_init"


class InferenceError(QAError):
    """Forward pass failed or no session was available"""

    kind = "inference"
