"""Custom exceptions for context-pack."""


class ContextPackError(Exception):
    """Base exception for all context-pack errors."""


class ConfigError(ContextPackError):
    """Rules loading or validation errors."""


class ScanError(ContextPackError):
    """Fatal repository traversal or version-control listing errors."""


class BundleError(ContextPackError):
    """Malformed or missing bundle payloads."""
