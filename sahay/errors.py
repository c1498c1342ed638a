"""Error taxonomy shared by the scheduling engine, tools and API."""

from typing import Optional, List


class SchedulingError(Exception):
    """Base class for every typed error raised by the assistant core."""

    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Structured description used in tool results and HTTP bodies."""
        return {"success": False, "error": self.code, "message": self.message}


class ValidationError(SchedulingError):
    """Malformed or missing input."""

    code = "validation_error"
    status_code = 400


class NotFoundError(SchedulingError):
    """A doctor, appointment or specialty reference does not resolve."""

    code = "not_found"
    status_code = 404


class AmbiguousError(NotFoundError):
    """A reference resolved to more than one entity where one is required."""

    code = "ambiguous"

    def __init__(self, message: str, candidates: Optional[List[str]] = None):
        super().__init__(message)
        self.candidates = candidates or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["candidates"] = self.candidates
        return data


class ConflictError(SchedulingError):
    """The requested slot already holds a confirmed appointment."""

    code = "conflict"
    status_code = 409


class UpstreamError(SchedulingError):
    """Model or tool-dispatch failure, timeout, or protocol violation."""

    code = "upstream_error"
    status_code = 500

    def __init__(self, message: str, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout
        if timeout:
            self.status_code = 504


class ConfigurationError(SchedulingError):
    """Missing required credentials or settings. Fatal at startup."""

    code = "configuration_error"
    status_code = 500
