"""Exception types raised by the ffa engine."""

from __future__ import annotations


class FfaError(Exception):
    """Base class for engine errors."""


class UnknownManagerError(FfaError, ValueError):
    """A request named a manager outside the closed roster."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Unknown manager: {raw!r}")
        self.raw = raw


class SourceError(FfaError):
    """The authoritative match source returned something unusable."""


class StorageError(FfaError):
    """The record store failed to read or replace rows."""


class SyncError(FfaError):
    """Ledger synchronization could not complete."""
