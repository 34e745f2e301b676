"""Exception taxonomy for the redaction engine."""
from typing import List, Optional


class RedactionError(Exception):
    """Base exception for all tonemask errors."""
    pass


class DecodeError(RedactionError):
    """Raised when a source cannot be parsed as audio."""
    pass


class ToolInvocationError(RedactionError):
    """
    Raised when an external tool fails to spawn, exits nonzero,
    or doesn't leave the expected artifact behind.
    """

    def __init__(self, message: str, command: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class UnsupportedFormatError(RedactionError):
    """Raised when neither sample-domain nor overlay redaction applies."""
    pass


class PassthroughError(RedactionError, OSError):
    """Raised when even the verbatim copy of the source fails."""
    pass
