"""Typed records for media attached to articles.

Articles store these as JSON columns; conversion happens only in the model
accessors, so services and serializers work with the dataclasses.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

SIZE_NAMES = ("thumbnail", "medium", "large", "original")


def _text(data: dict, key: str, required: bool = False) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        if required:
            raise ValueError(f"'{key}' is required")
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


@dataclass(frozen=True)
class ImageDescriptor:
    url: str
    id: str | None = None
    caption: str | None = None
    alt: str | None = None
    sizes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ImageDescriptor":
        if not isinstance(data, dict):
            raise ValueError("image must be an object")
        sizes = data.get("sizes") or {}
        if not isinstance(sizes, dict):
            raise ValueError("'sizes' must be an object")
        clean_sizes = {}
        for name in SIZE_NAMES:
            value = sizes.get(name)
            if value is not None:
                if not isinstance(value, str):
                    raise ValueError(f"'sizes.{name}' must be a string")
                clean_sizes[name] = value
        return cls(
            url=_text(data, "url", required=True),
            id=_text(data, "id"),
            caption=_text(data, "caption"),
            alt=_text(data, "alt"),
            sizes=clean_sizes,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VideoDescriptor:
    url: str
    id: str | None = None
    caption: str | None = None
    thumbnail: str | None = None
    duration: float | None = None
    format: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "VideoDescriptor":
        if not isinstance(data, dict):
            raise ValueError("video must be an object")
        duration = data.get("duration")
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, (int, float)):
                raise ValueError("'duration' must be a number")
            duration = float(duration)
        return cls(
            url=_text(data, "url", required=True),
            id=_text(data, "id"),
            caption=_text(data, "caption"),
            thumbnail=_text(data, "thumbnail"),
            duration=duration,
            format=_text(data, "format"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_images(items: Any) -> list[ImageDescriptor]:
    if not isinstance(items, list):
        raise ValueError("must be a list")
    return [ImageDescriptor.from_dict(item) for item in items]


def parse_videos(items: Any) -> list[VideoDescriptor]:
    if not isinstance(items, list):
        raise ValueError("must be a list")
    return [VideoDescriptor.from_dict(item) for item in items]


__all__ = ["ImageDescriptor", "VideoDescriptor", "parse_images", "parse_videos"]
