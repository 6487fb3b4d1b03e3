import threading
from dataclasses import dataclass
from typing import Optional

from classbook.models.attendance import AttendanceDocument


@dataclass(frozen=True)
class CacheValue:
    document: AttendanceDocument
    version: Optional[str] = None


class AttendanceCache:
    """
    In-process copy of the attendance document and its last known version token.

    Readers take ``snapshot()`` and work on that value; writers replace it wholesale, so a
    reader never observes a half-applied save. ``write_lock`` serializes whole save cycles
    (refresh, mutate, store, record version) against each other.
    """

    def __init__(self, document: Optional[AttendanceDocument] = None, version: Optional[str] = None):
        self._value = CacheValue(document or AttendanceDocument.empty(), version)
        self._swap_lock = threading.Lock()
        self.write_lock = threading.RLock()

    def snapshot(self) -> CacheValue:
        with self._swap_lock:
            return self._value

    @property
    def document(self) -> AttendanceDocument:
        return self.snapshot().document

    @property
    def version(self) -> Optional[str]:
        return self.snapshot().version

    @property
    def is_synced(self) -> bool:
        """True once a version token has been obtained from the store."""
        return self.snapshot().version is not None

    def replace(self, document: AttendanceDocument, version: Optional[str]):
        with self._swap_lock:
            self._value = CacheValue(document, version)

    def set_slot(self, key: str, marks: list[dict]) -> CacheValue:
        with self._swap_lock:
            self._value = CacheValue(self._value.document.with_slot(key, marks), self._value.version)
            return self._value

    def set_version(self, version: Optional[str]):
        with self._swap_lock:
            self._value = CacheValue(self._value.document, version)
