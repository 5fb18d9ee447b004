"""
Cache key encoding for records.

Records are cached under ``"{path}_{id}"``. Each component is
percent-escaped and a literal underscore inside a component becomes
``%5F``, so the key holds exactly one unescaped underscore and can be
split back into ``(path, id)`` without ambiguity.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote

DELIMITER = "_"


def _escape(component: str) -> str:
    return quote(component, safe="").replace(DELIMITER, "%5F")


@dataclass(frozen=True)
class RecordKey:
    """Logical address of a record: collection path plus document id."""

    path: str
    record_id: str

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Record path must not be empty")
        if not self.record_id:
            raise ValueError("Record id must not be empty")

    def encode(self) -> str:
        return f"{_escape(self.path)}{DELIMITER}{_escape(self.record_id)}"

    @classmethod
    def decode(cls, key: str) -> RecordKey:
        """Parse an encoded key.

        Raises:
            ValueError: If the key does not contain exactly one delimiter
        """
        parts = key.split(DELIMITER)
        if len(parts) != 2:
            raise ValueError(f"Malformed record key: {key!r}")
        return cls(unquote(parts[0]), unquote(parts[1]))

    def __str__(self) -> str:
        return f"{self.path}/{self.record_id}"
