# msfs_checksum/errors.py
from __future__ import annotations


class ChecksumError(Exception):
    """Base class for errors that end a run with a user-facing message."""
    pass


class ConfigError(ChecksumError):
    """Bad command-line input: missing override root, output is a folder, etc."""
    pass


class ResolutionError(ChecksumError):
    """No package installation could be located."""
    pass


class ReadError(ChecksumError):
    """A stream failed while being hashed. The OSError is kept as __cause__."""
    pass


class OutputError(ChecksumError):
    """
    Writing the manifest (or its report) failed after hashing finished.
    The finished summary and in-memory manifest ride along so the caller
    can still report them or retry the write.
    """
    def __init__(self, message: str, summary=None, manifest=None):
        super().__init__(message)
        self.summary = summary
        self.manifest = manifest
