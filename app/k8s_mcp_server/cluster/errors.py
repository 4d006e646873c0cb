"""
Error taxonomy for cluster inspection calls.

Every failure a handler reports is one of these. The MCP layer turns them
into tool errors; none of them outlive the call that raised them.
"""


class ClusterToolError(Exception):
    """Base exception for cluster tool errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"code": self.code, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidArgument(ClusterToolError):
    """Raised when caller input is missing or malformed."""

    code = "INVALID_ARGUMENT"

    @classmethod
    def missing(cls, parameter: str) -> "InvalidArgument":
        return cls(f"missing required parameter: {parameter}")


class NotFound(ClusterToolError):
    """Raised when the requested object or resource kind does not exist."""

    code = "NOT_FOUND"


class BackendUnavailable(ClusterToolError):
    """Raised when the Kubernetes API cannot be reached or rejects the call."""

    code = "BACKEND_UNAVAILABLE"


class SerializationError(ClusterToolError):
    """Raised when a result cannot be encoded as JSON."""

    code = "SERIALIZATION_ERROR"
