"""Data models for ordered content and audio segments."""

from dataclasses import dataclass, field

from segment_studio.constants import DEFAULT_CONTENT_TYPE


@dataclass
class OrderedUnit:
    id: str
    order: int         # 1-based, unique within parent scope
    parent_id: str = ""
    title: str = ""
    status: str = "DRAFT"

    @classmethod
    def from_api(cls, data: dict, parent_id: str = "") -> "OrderedUnit":
        return cls(
            id=str(data.get("id", "")),
            order=int(data.get("order") or 0),
            parent_id=str(data.get("chapterId") or data.get("audioId") or parent_id),
            title=data.get("title", ""),
            status=data.get("status", "DRAFT"),
        )


@dataclass
class CapturedClip:
    data: bytes
    content_type: str


@dataclass
class PendingSegment:
    filename: str      # locally generated or picked file name
    data: bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    source: str = "file"  # "file" or "recording"


@dataclass
class RecordingSession:
    active: bool = False
    elapsed_seconds: int = 0
    captured: CapturedClip | None = None


@dataclass
class AudioArtifact:
    id: str
    title: str = ""
    status: str = "DRAFT"
    file_url: str | None = None
    segment_public_ids: list[str] = field(default_factory=list)
    segment_urls: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, payload: dict) -> "AudioArtifact":
        """Build from a server body, wrapped as {"audio": {...}} or bare."""
        data = payload.get("audio", payload) if isinstance(payload, dict) else {}
        if not isinstance(data, dict) or "id" not in data:
            raise ValueError("Response does not describe an audio artifact")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            status=data.get("status") or "DRAFT",
            file_url=data.get("fileUrl"),
            segment_public_ids=list(data.get("segmentPublicIds") or []),
            segment_urls=list(data.get("segmentUrls") or []),
            raw=data,
        )
