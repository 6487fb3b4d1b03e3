"""
Attendance store backed by a JSON file on the local filesystem.
"""

import os
import tempfile
from typing import Optional

from flask import current_app

from classbook.constants import DEFAULT_LOCAL_STORE_PATH, STORE_LOCAL
from classbook.exceptions import MalformedDocumentException, StoreIOException
from classbook.models.attendance import AttendanceDocument, parse_document, serialize_document
from classbook.stores import DocumentStore, LoadResult


class LocalDocumentStore(DocumentStore):
    """Unversioned store: the last write wins and no version token is ever returned."""

    kind = STORE_LOCAL
    is_remote = False

    def __init__(self, config):
        self.path = config.get("LOCAL_STORE_PATH") or DEFAULT_LOCAL_STORE_PATH

    def load(self) -> LoadResult:
        if not os.path.exists(self.path):
            return LoadResult(AttendanceDocument.empty(), None)

        try:
            with open(self.path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise StoreIOException(f"Could not read {self.path}: {e}") from e

        try:
            document = parse_document(raw)
        except MalformedDocumentException as e:
            current_app.logger.warning(f"Ignoring unreadable attendance file {self.path}: {e}")
            return LoadResult(AttendanceDocument.empty(), None)

        return LoadResult(document, None)

    def store(self, document: AttendanceDocument, expected_version: Optional[str]) -> Optional[str]:
        folder = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(folder, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=folder, suffix=".tmp", delete=False
            ) as f:
                tmp_path = f.name
                f.write(serialize_document(document))
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreIOException(f"Could not write {self.path}: {e}") from e

        current_app.logger.info(f"Saved attendance to {self.path}")
        return None
