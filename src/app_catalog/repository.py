"""In-memory catalog of app templates loaded from a definition directory."""

import logging
import threading
from pathlib import Path
from typing import NamedTuple

from app_catalog.exceptions import MalformedDefinitionError, RepositoryUnavailableError
from app_catalog.loader import find_definition_files, load_definition
from schemas.app import AppDefinition

logger = logging.getLogger(__name__)


class LoadIssue(NamedTuple):
    """A definition file that was skipped during load."""

    file: str
    message: str


class AppRepository:
    """Index of app templates keyed by ``metadata.id``.

    The index is rebuilt as a new dict and swapped in under a lock, so
    readers see either the previous complete index or the new one, and
    never block on file I/O. Loads and reloads are serialized.

    Example:
        repository = AppRepository(Path("apps/repository"))
        repository.ensure_loaded()
        redis = repository.get_by_id("redis")
    """

    def __init__(self, repository_path: Path):
        """Initialize repository.

        Args:
            repository_path: Directory containing one definition file per app
        """
        self.repository_path = Path(repository_path)
        self._index: dict[str, AppDefinition] = {}
        self._load_issues: list[LoadIssue] = []
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def load_issues(self) -> list[LoadIssue]:
        """Files skipped by the most recent load."""
        return list(self._load_issues)

    def ensure_loaded(self) -> None:
        """Load the repository once.

        Concurrent first callers wait for the same load. If the load fails
        the repository stays unloaded and the next call tries again.

        Raises:
            RepositoryUnavailableError: If the directory cannot be enumerated
        """
        if self._loaded:
            return

        with self._lock:
            if not self._loaded:
                self._load()

    def load_all(self) -> list[LoadIssue]:
        """Scan the definition directory and replace the index.

        Returns:
            Files that were skipped, with the reason

        Raises:
            RepositoryUnavailableError: If the directory cannot be enumerated
        """
        with self._lock:
            return self._load()

    def reload(self) -> list[LoadIssue]:
        """Discard the index and rebuild it from disk.

        On failure the previous index is kept.

        Raises:
            RepositoryUnavailableError: If the directory cannot be enumerated
        """
        logger.info(f"Reloading app repository from {self.repository_path}")
        return self.load_all()

    def get_all(self) -> list[AppDefinition]:
        self.ensure_loaded()
        return [_snapshot(app) for app in self._index.values()]

    def get_by_id(self, app_id: str) -> AppDefinition | None:
        """Return the template with the given id, or None."""
        self.ensure_loaded()
        app = self._index.get(app_id)
        return _snapshot(app) if app is not None else None

    def get_by_category(self, category: str) -> list[AppDefinition]:
        """Return templates whose category matches, ignoring case."""
        self.ensure_loaded()
        wanted = category.lower()
        return [
            _snapshot(app)
            for app in self._index.values()
            if app.metadata.category.lower() == wanted
        ]

    def search(self, query: str) -> list[AppDefinition]:
        """Find templates by name, description or tag.

        Matching is a case-insensitive substring test. Results keep index
        order.
        """
        self.ensure_loaded()
        needle = query.lower()
        return [
            _snapshot(app)
            for app in self._index.values()
            if _matches(app, needle)
        ]

    def categories(self) -> list[str]:
        """Return the sorted set of categories in use."""
        self.ensure_loaded()
        return sorted(
            {app.metadata.category for app in self._index.values() if app.metadata.category}
        )

    def _load(self) -> list[LoadIssue]:
        """Build a new index and swap it in. Caller holds the lock."""
        try:
            files = find_definition_files(self.repository_path)
        except OSError as e:
            logger.error(f"Failed to load app repository: {e}")
            raise RepositoryUnavailableError(self.repository_path, str(e)) from e

        index: dict[str, AppDefinition] = {}
        issues: list[LoadIssue] = []

        for path in files:
            try:
                app = load_definition(path)
            except MalformedDefinitionError as e:
                logger.warning(str(e))
                issues.append(LoadIssue(file=e.file, message=e.message))
                continue

            if app.id in index:
                logger.warning(
                    f"Duplicate app id '{app.id}' in {path.name}, replacing earlier definition"
                )
            index[app.id] = app

        self._index = index
        self._load_issues = issues
        self._loaded = True

        logger.info(
            f"Loaded {len(index)} app definitions from {self.repository_path}"
            f" ({len(issues)} skipped)"
        )
        return list(issues)


def _matches(app: AppDefinition, needle: str) -> bool:
    metadata = app.metadata
    return (
        needle in metadata.name.lower()
        or needle in metadata.description.lower()
        or any(needle in tag.lower() for tag in metadata.tags)
    )


def _snapshot(app: AppDefinition) -> AppDefinition:
    # Callers get their own copy; list fields are mutable even on frozen models
    return app.model_copy(deep=True)
