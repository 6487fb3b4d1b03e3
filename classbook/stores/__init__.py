"""
Attendance document store interface and factory.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from classbook.constants import STORE_GITHUB, STORE_LOCAL
from classbook.exceptions import ConfigurationMissingException
from classbook.models.attendance import AttendanceDocument


@dataclass(frozen=True)
class LoadResult:
    document: AttendanceDocument
    version: Optional[str] = None


class DocumentStore(ABC):
    """Abstract base class for attendance document stores."""

    kind: str = ""
    is_remote: bool = False

    @property
    def missing_settings(self) -> list[str]:
        """Names of required settings that are not configured."""
        return []

    @property
    def is_configured(self) -> bool:
        return not self.missing_settings

    def ensure_configured(self):
        if self.missing_settings:
            raise ConfigurationMissingException(
                f"{self.kind} store is not configured: missing {', '.join(self.missing_settings)}"
            )

    @abstractmethod
    def load(self) -> LoadResult:
        """
        Load the current document.

        Returns:
            LoadResult: The document and its version token. A store with no document yet
            returns an empty document and no version.

        Raises:
            StoreException: If the store cannot be read.
        """
        pass

    @abstractmethod
    def store(self, document: AttendanceDocument, expected_version: Optional[str]) -> Optional[str]:
        """
        Persist the whole document.

        Args:
            document: The document to write
            expected_version: Version token from the last load, or None to create

        Returns:
            The new version token, or None for stores without versioning.

        Raises:
            StoreException: If the write is rejected or cannot be delivered.
        """
        pass


def get_document_store(config) -> DocumentStore:
    """Factory function to get the configured attendance store."""
    from classbook.stores.github_store import GitHubDocumentStore
    from classbook.stores.local_store import LocalDocumentStore

    document_stores = {
        STORE_GITHUB: GitHubDocumentStore,
        STORE_LOCAL: LocalDocumentStore,
    }

    store_name = config.get("ATTENDANCE_STORE") or STORE_GITHUB
    store_class = document_stores.get(store_name.lower())
    if not store_class:
        raise ValueError(
            f"Unknown attendance store: {store_name}. Available stores: {', '.join(document_stores.keys())}"
        )

    return store_class(config)
