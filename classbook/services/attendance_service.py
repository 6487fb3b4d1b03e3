"""
Service for reading and saving attendance slots and building the weekly matrix.
Owns the attendance cache and keeps it in step with the configured store.
"""

import unicodedata
from typing import Any, Optional

from flask import current_app

from classbook.constants import FIRST_PERIOD, LAST_PERIOD
from classbook.exceptions import StoreException
from classbook.models.attendance import slot_key
from classbook.stores import DocumentStore
from classbook.utils.cache import AttendanceCache


def name_sort_key(name: str):
    """Collation key approximating a locale-aware, case-insensitive name comparison."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    # Lowercase sorts before uppercase when names differ only in case
    return (base.casefold(), name.casefold(), name.swapcase())


class AttendanceService:
    """Service for attendance slots."""

    def __init__(self, store: DocumentStore, cache: Optional[AttendanceCache] = None):
        self.store = store
        self.cache = cache or AttendanceCache()

    def initialize(self):
        """
        Load the document into the cache at startup. Failures leave the cache empty so the
        application can still start.
        """
        if not self.store.is_configured:
            current_app.logger.warning(
                f"Attendance store '{self.store.kind}' is missing {', '.join(self.store.missing_settings)}. "
                "Saving will not work."
            )
            return

        try:
            result = self.store.load()
        except StoreException as e:
            current_app.logger.warning(f"Could not load attendance at startup, starting empty: {e}")
            return

        self.cache.replace(result.document, result.version)
        current_app.logger.info(f"Loaded attendance from {self.store.kind} store")

    def _refresh(self) -> bool:
        try:
            result = self.store.load()
        except StoreException as e:
            current_app.logger.warning(f"Attendance refresh failed, using cached document: {e}")
            return False

        self.cache.replace(result.document, result.version)
        return True

    def get_slot(self, date, period) -> list[dict[str, Any]]:
        """
        Returns the marks saved for a slot, or an empty list. Never raises: if the cache has
        never synchronized with a remote store, one best-effort load is attempted first.
        """
        if self.store.is_remote and self.store.is_configured and not self.cache.is_synced:
            # A save in progress refreshes on its own; reloading now would drop its change
            if self.cache.write_lock.acquire(blocking=False):
                try:
                    if not self.cache.is_synced:
                        self._refresh()
                finally:
                    self.cache.write_lock.release()

        return self.cache.document.get_slot(slot_key(date, period))

    def save_slot(self, date, period, marks: list[dict[str, Any]]) -> Optional[str]:
        """
        Replace the marks of one slot and persist the whole document.

        The latest document is loaded first (best effort) to keep the version token current.
        When the store rejects the write the cache keeps the attempted change.

        Args:
            date: Slot date
            period: Slot period (1..8)
            marks: List of ``{"name": str, "present": bool}`` dictionaries

        Returns:
            The version token returned by the store.

        Raises:
            ConfigurationMissingException: If the store is not configured. The cache is untouched.
            StoreException: If the store rejects or cannot receive the write.
        """
        self.store.ensure_configured()
        key = slot_key(date, period)

        with self.cache.write_lock:
            self._refresh()
            value = self.cache.set_slot(key, marks)

            try:
                version = self.store.store(value.document, value.version)
            except StoreException as e:
                current_app.logger.error(f"Saving attendance slot {key} failed: {e}")
                raise

            self.cache.set_version(version)

        current_app.logger.info(f"Saved attendance slot {key} ({len(marks)} students)")
        return version

    def build_matrix(self, week_dates) -> list[dict[str, Any]]:
        """
        Build one row per student across the given week from the cached document only.

        Args:
            week_dates: Ordered list of dates; the position of each date is its day index

        Returns:
            list: ``{"name": str, "slots": {"<dayIndex>_<period>": bool}}`` rows sorted by name
        """
        if not isinstance(week_dates, (list, tuple)):
            return []

        document = self.cache.document
        rows: dict[str, dict[str, Any]] = {}

        for day_index, date in enumerate(week_dates):
            for period in range(FIRST_PERIOD, LAST_PERIOD + 1):
                for mark in document.attendance.get(slot_key(date, period)) or []:
                    name = mark.get("name")
                    if not isinstance(name, str) or not name:
                        continue
                    if name not in rows:
                        rows[name] = {"name": name, "slots": {}}
                    rows[name]["slots"][f"{day_index}_{period}"] = bool(mark.get("present"))

        return sorted(rows.values(), key=lambda row: name_sort_key(row["name"]))
