"""
Error types for the periphery runner pipeline.
"""
from typing import Optional


class PeripheryRunnerError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr


class BuildFailure(PeripheryRunnerError):
    """Raised when bazel build fails or produces no build event log."""
    pass


class NoIndexStoresFound(PeripheryRunnerError):
    """Raised when the build event log references no index stores."""
    pass


class RemapFailure(PeripheryRunnerError):
    """Raised when index-import fails for a store."""

    def __init__(self, message: str, index_store: str, stderr: Optional[str] = None):
        super().__init__(message, stderr=stderr)
        self.index_store = index_store


class ScanFailure(PeripheryRunnerError):
    """Raised when periphery exits non-zero."""

    def __init__(self, message: str, returncode: int, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output
