from .attendance import AttendanceDocument, parse_document, serialize_document, slot_key

__all__ = [
    "AttendanceDocument",
    "parse_document",
    "serialize_document",
    "slot_key",
]
