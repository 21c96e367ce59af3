"""
Common Schema Types
==================

Bounded Context: Shared Data Structures

Design Principles:
- Immutability: frozen=True prevents accidental mutation
- Serialization: to_dict() / from_dict() for JSON
- Validation: Constructor validates invariants

Types:
- Timestamp: ISO 8601 timestamp wrapper
- parse_coordinate: [lat, lon] JSON pair -> (lat, lon) tuple
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class Timestamp:
    """
    Immutable ISO 8601 timestamp wrapper.

    Example:
        >>> ts = Timestamp.now()
        >>> ts.value
        '2026-10-19T15:30:45.123456+00:00'
    """
    value: str

    @classmethod
    def now(cls) -> 'Timestamp':
        """Create timestamp from current time."""
        return cls(value=datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'Timestamp':
        return cls(value=dt.isoformat())

    def to_datetime(self) -> datetime:
        """
        Raises:
            ValueError: If timestamp format invalid
        """
        try:
            return datetime.fromisoformat(self.value)
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp: {self.value}") from e

    def to_dict(self) -> str:
        """Serialize to JSON (as string)."""
        return self.value


def parse_coordinate(value: Any) -> Tuple[float, float]:
    """
    Parse a [lat, lon] JSON pair.

    Raises:
        ValueError: If value is not a pair of numbers
    """
    try:
        lat, lon = value
        return (float(lat), float(lon))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid coordinate {value!r}: expected [lat, lon]") from e


def parse_optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
