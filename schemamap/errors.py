"""Exception types raised by the schemamap core."""


class SchemamapError(Exception):
    """Base class for all schemamap errors"""


class ConfigurationMissing(SchemamapError):
    """No installation key file could be resolved."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or 'Configuration not found. Run "schemamap init" first.')


class AuthenticationError(SchemamapError):
    """An encrypted payload failed its integrity check (wrong key or tampering)."""


class MalformedArtifact(SchemamapError, ValueError):
    """A mapping artifact, saved connection or payload is structurally invalid."""
