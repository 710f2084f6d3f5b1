"""Custom exceptions for the app catalog."""

from pathlib import Path


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    pass


class RepositoryUnavailableError(CatalogError):
    """Raised when the definition directory cannot be enumerated.

    This is the only error that aborts a repository load. Problems with
    individual definition files are reported and skipped instead.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Unable to load app repository from {path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedDefinitionError(CatalogError):
    """Raised when a single definition file cannot be parsed or is incomplete."""

    def __init__(self, file: str, message: str):
        super().__init__(f"Invalid app definition in {file}: {message}")
        self.file = file
        self.message = message


class AppNotFoundError(CatalogError):
    """Raised when a requested app id is not in the catalog."""

    def __init__(self, app_id: str):
        super().__init__(f"App not found: {app_id}")
        self.app_id = app_id
