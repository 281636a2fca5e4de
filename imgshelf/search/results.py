"""Result types for search operations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from imgshelf.core.models import FolderPreview


class ResultStatus(Enum):
    """Status of a search outcome."""

    SUCCESS = "success"
    INVALID_PATTERN = "invalid_pattern"
    QUERY_FAILED = "query_failed"
    STORE_UNAVAILABLE = "store_unavailable"

    def is_success(self) -> bool:
        return self is ResultStatus.SUCCESS


@dataclass
class SearchOutcome:
    """Result of a keyword or similar-title search.

    A failed search carries no previews; an empty but successful search is
    a legitimate result.
    """

    status: ResultStatus
    message: str
    previews: list[FolderPreview] = field(default_factory=list)
    warnings: list[str] | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    # Performance metrics
    duration_ms: int | None = None

    @property
    def success(self) -> bool:
        return self.status.is_success()

    @property
    def fids(self) -> list[int]:
        return [p.fid for p in self.previews]

    def __len__(self) -> int:
        return len(self.previews)

    @classmethod
    def succeeded(
        cls, previews: list[FolderPreview], warnings: list[str] | None = None
    ) -> "SearchOutcome":
        return cls(
            status=ResultStatus.SUCCESS,
            message=f"Found {len(previews)} folders",
            previews=previews,
            warnings=warnings or None,
        )

    @classmethod
    def failed(cls, status: ResultStatus, message: str) -> "SearchOutcome":
        return cls(status=status, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "results": [
                {
                    "fid": p.fid,
                    "folder_path": p.folder_path,
                    "title": p.title,
                    "record_time": p.record_time,
                    "eh_gid": p.eh_gid,
                    "has_cover": bool(p.cover_base64),
                }
                for p in self.previews
            ],
        }

        if self.warnings:
            result["warnings"] = self.warnings

        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms

        return result
