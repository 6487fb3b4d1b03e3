"""
Attendance store backed by a JSON file in a GitHub repository.
"""

import base64
import binascii
from typing import Optional

import requests
from flask import current_app

from classbook.constants import DEFAULT_COMMIT_MESSAGE, DEFAULT_GITHUB_FILE_PATH, STORE_GITHUB
from classbook.exceptions import (
    ConflictException,
    DocumentUnavailableException,
    ForbiddenException,
    MalformedDocumentException,
    StoreUnreachableException,
    TransportFailureException,
    UnauthenticatedException,
)
from classbook.integrations.github.client import GitHubClient
from classbook.models.attendance import AttendanceDocument, parse_document, serialize_document
from classbook.stores import DocumentStore, LoadResult


class GitHubDocumentStore(DocumentStore):
    """
    Keeps the attendance document as one file in a repository. The blob SHA of the file is the
    version token: writes carry the SHA they were based on and GitHub rejects them if the file
    has moved on since.
    """

    kind = STORE_GITHUB
    is_remote = True

    def __init__(self, config, client: Optional[GitHubClient] = None):
        self.client = client or GitHubClient(config)
        self.file_path = config.get("GITHUB_FILE_PATH") or DEFAULT_GITHUB_FILE_PATH
        self.commit_message = config.get("GITHUB_COMMIT_MESSAGE") or DEFAULT_COMMIT_MESSAGE

    @property
    def missing_settings(self) -> list[str]:
        missing = []
        if not self.client.repo:
            missing.append("GITHUB_REPO")
        if not self.client.token:
            missing.append("GITHUB_TOKEN")
        return missing

    def load(self) -> LoadResult:
        self.ensure_configured()

        try:
            payload = self.client.get_contents(self.file_path)
        except DocumentUnavailableException:
            current_app.logger.info(f"{self.file_path} does not exist yet, starting with an empty document")
            return LoadResult(AttendanceDocument.empty(), None)
        except requests.exceptions.RequestException as e:
            raise StoreUnreachableException(f"Could not load attendance from GitHub: {e}") from e

        if not isinstance(payload, dict):
            # The configured path names a directory
            raise StoreUnreachableException(f"{self.file_path} is not a file in {self.client.repo}")

        sha = payload.get("sha")
        try:
            if payload.get("encoding") == "none":
                # Files over 1 MB come without inline content
                raw = self.client.get_raw_contents(self.file_path)
            else:
                raw = base64.b64decode(payload.get("content") or "")
            document = parse_document(raw)
        except requests.exceptions.RequestException as e:
            raise StoreUnreachableException(f"Could not load attendance from GitHub: {e}") from e
        except (binascii.Error, MalformedDocumentException) as e:
            # No version: a later save cannot silently replace the unreadable file
            current_app.logger.warning(f"Ignoring unreadable attendance document {self.file_path}: {e}")
            return LoadResult(AttendanceDocument.empty(), None)

        return LoadResult(document, sha)

    def store(self, document: AttendanceDocument, expected_version: Optional[str]) -> Optional[str]:
        self.ensure_configured()

        content = serialize_document(document).encode("utf-8")
        try:
            response = self.client.put_contents(self.file_path, content, expected_version, self.commit_message)
        except requests.exceptions.HTTPError as e:
            raise self._error_for_status(e.response.status_code, e) from e
        except requests.exceptions.RequestException as e:
            raise TransportFailureException(f"Could not reach GitHub: {e}") from e

        current_app.logger.info(f"Saved attendance to GitHub ({self.client.repo}/{self.file_path})")
        return (response.get("content") or {}).get("sha")

    def _error_for_status(self, status_code, error):
        if status_code in (409, 422):
            # 409: sha mismatch, 422: sha missing for a file that already exists
            return ConflictException("Attendance was changed by someone else, reload and save again")
        if status_code == 401:
            return UnauthenticatedException("GitHub rejected the configured token")
        if status_code in (403, 404):
            return ForbiddenException(f"The configured token cannot write to {self.client.repo}/{self.file_path}")
        return TransportFailureException(f"GitHub sync failed with status {status_code}: {error}")
