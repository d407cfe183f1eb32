"""Resource and resource template definitions."""

from dataclasses import dataclass
from typing import Any

from switchboard.framework.content import Icon
from switchboard.framework.utils import compact, icons_to_list


@dataclass(frozen=True)
class Resource:
    """A readable resource, indexed by URI."""

    uri: str
    name: str
    title: str | None = None
    description: str | None = None
    icons: tuple[Icon, ...] = ()
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "uri": self.uri,
                "name": self.name,
                "title": self.title,
                "description": self.description,
                "icons": icons_to_list(self.icons),
                "mimeType": self.mime_type,
            }
        )


@dataclass(frozen=True)
class ResourceTemplate:
    """A parameterized family of resources (RFC 6570 URI template)."""

    uri_template: str
    name: str
    title: str | None = None
    description: str | None = None
    icons: tuple[Icon, ...] = ()
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "uriTemplate": self.uri_template,
                "name": self.name,
                "title": self.title,
                "description": self.description,
                "icons": icons_to_list(self.icons),
                "mimeType": self.mime_type,
            }
        )


__all__ = ["Resource", "ResourceTemplate"]
