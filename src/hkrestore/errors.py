from __future__ import annotations


class HKRestoreError(Exception):
    """Base class for hkrestore errors."""


class StorageError(HKRestoreError):
    """Reading or writing a persisted blob failed."""


class DiscoveryError(HKRestoreError):
    """A browse subscription could not be opened."""


class ResolveError(DiscoveryError):
    """A discovered service could not be resolved to an endpoint."""


class ExportError(HKRestoreError):
    """Writing an export file failed."""
