"""Annotation model: a text note pinned to a point-cloud coordinate."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, NamedTuple


class Coordinates(NamedTuple):
    """World-space position of a picked point."""

    x: float
    y: float
    z: float


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


@dataclass(frozen=True)
class Annotation:
    """Stored annotation. Immutable once created."""

    annotation_id: str
    x: float
    y: float
    z: float
    text: str
    created_at: str

    @property
    def position(self) -> Coordinates:
        return Coordinates(self.x, self.y, self.z)

    def to_json(self) -> dict[str, Any]:
        """Wire/store representation (camelCase keys)."""
        return {
            "annotationId": self.annotation_id,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "text": self.text,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "Annotation":
        """Build from a store row or wire object, coercing field types."""
        return cls(
            annotation_id=str(item["annotationId"]),
            x=float(item["x"]),
            y=float(item["y"]),
            z=float(item["z"]),
            text=str(item.get("text", "")),
            created_at=str(item.get("createdAt", "")),
        )
