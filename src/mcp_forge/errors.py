"""Exceptions raised by mcp-forge.

Parsing never raises: structural problems come back as ``ParseError``
entries. Exceptions are reserved for calls that cannot produce a partial
result.
"""


class ForgeError(Exception):
    """Base class for mcp-forge errors."""


class VersionError(ForgeError):
    """Either side of a version comparison failed to parse."""

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []

    def __str__(self) -> str:
        if not self.details:
            return super().__str__()
        return f"{super().__str__()}: " + "; ".join(self.details)


class GenerationError(ForgeError):
    """Code generation was asked for something it cannot produce."""
