"""Load-time failures. All are fatal to startup; nothing here is retried."""

from __future__ import annotations


class LoadError(Exception):
    """The player could not be constructed for a given file."""


class FileUnreadableError(LoadError):
    """Path is missing, not a regular file, or cannot be opened."""


class UnsupportedFormatError(LoadError):
    """File extension is unknown or the data could not be decoded."""


class OutputDeviceUnavailableError(LoadError):
    """No usable audio output stream could be opened."""
