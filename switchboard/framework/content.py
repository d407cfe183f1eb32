"""
Content blocks and display metadata shared by tools, prompts and resources.

All types are immutable and serialize to their wire form with ``to_dict()``.
"""

from dataclasses import dataclass
from typing import Any, Literal

from switchboard.framework.utils import compact

SUPPORTED_ICON_THEMES = ("light", "dark")


@dataclass(frozen=True)
class Annotations:
    """Hints about how a client should use or display a content block."""

    audience: list[str] | None = None
    priority: float | None = None
    last_modified: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "audience": self.audience,
                "priority": self.priority,
                "lastModified": self.last_modified,
            }
        )


@dataclass(frozen=True)
class Icon:
    """An icon for a server, tool, prompt or resource.

    Attributes:
        src: Icon URI (http(s) or data URI)
        mime_type: Optional MIME type override
        sizes: Sizes the icon is available in, e.g. ["48x48"]
        theme: "light" or "dark"
    """

    src: str | None = None
    mime_type: str | None = None
    sizes: list[str] | None = None
    theme: str | None = None

    def __post_init__(self) -> None:
        if self.theme is not None and self.theme not in SUPPORTED_ICON_THEMES:
            msg = 'The value of theme must specify "light" or "dark".'
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {"mimeType": self.mime_type, "sizes": self.sizes, "src": self.src, "theme": self.theme}
        )


def _annotations(annotations: Annotations | dict[str, Any] | None) -> dict[str, Any] | None:
    if isinstance(annotations, Annotations):
        return annotations.to_dict()
    return annotations


@dataclass(frozen=True)
class TextContent:
    text: str
    annotations: Annotations | dict[str, Any] | None = None
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {"type": self.type, "text": self.text, "annotations": _annotations(self.annotations)}
        )


@dataclass(frozen=True)
class ImageContent:
    """Base64-encoded image data."""

    data: str
    mime_type: str
    annotations: Annotations | dict[str, Any] | None = None
    type: Literal["image"] = "image"

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "type": self.type,
                "data": self.data,
                "mimeType": self.mime_type,
                "annotations": _annotations(self.annotations),
            }
        )


@dataclass(frozen=True)
class TextResourceContents:
    uri: str
    text: str
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact({"uri": self.uri, "mimeType": self.mime_type, "text": self.text})


@dataclass(frozen=True)
class BlobResourceContents:
    """Binary resource contents, base64-encoded."""

    uri: str
    blob: str
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact({"uri": self.uri, "mimeType": self.mime_type, "blob": self.blob})


@dataclass(frozen=True)
class EmbeddedResource:
    """Resource contents embedded in a tool result or prompt message."""

    resource: TextResourceContents | BlobResourceContents | dict[str, Any]
    annotations: Annotations | dict[str, Any] | None = None
    type: Literal["resource"] = "resource"

    def to_dict(self) -> dict[str, Any]:
        resource = self.resource if isinstance(self.resource, dict) else self.resource.to_dict()
        return compact(
            {
                "type": self.type,
                "resource": resource,
                "annotations": _annotations(self.annotations),
            }
        )


ContentBlock = TextContent | ImageContent | EmbeddedResource


def content_to_dict(block: Any) -> Any:
    """Serialize a content block, passing plain mappings through."""
    if hasattr(block, "to_dict"):
        return block.to_dict()
    return block


__all__ = [
    "SUPPORTED_ICON_THEMES",
    "Annotations",
    "BlobResourceContents",
    "ContentBlock",
    "EmbeddedResource",
    "Icon",
    "ImageContent",
    "TextContent",
    "TextResourceContents",
    "content_to_dict",
]
