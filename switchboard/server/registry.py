"""
Registry of tools, prompts, resources and resource templates.

Tools and prompts are keyed by name, resources by URI; templates are only
enumerated. Registration is meant to happen while a server is being set up.
Lookups are read-only and safe from any thread.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from typing import Any

from switchboard.framework.errors import ToolNotUniqueError
from switchboard.framework.prompts import Prompt
from switchboard.framework.resources import Resource, ResourceTemplate
from switchboard.framework.tools import Tool

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Named capabilities exposed by a server.

    Raises:
        ToolNotUniqueError: If two tools share a name
    """

    def __init__(
        self,
        tools: Iterable[Tool] = (),
        prompts: Iterable[Prompt] = (),
        resources: Iterable[Resource] = (),
        resource_templates: Iterable[ResourceTemplate] = (),
    ) -> None:
        tools = list(tools)
        duplicated = [name for name, count in Counter(t.name for t in tools).items() if count > 1]
        if duplicated:
            raise ToolNotUniqueError(duplicated)

        self._tools: dict[str, Tool] = {tool.name: tool for tool in tools}
        self._prompts: dict[str, Prompt] = {prompt.name: prompt for prompt in prompts}
        self._resources: list[Resource] = list(resources)
        self._resource_templates: list[ResourceTemplate] = list(resource_templates)
        self._resources_by_uri: dict[str, Resource] = {r.uri: r for r in self._resources}

    @property
    def tools(self) -> dict[str, Tool]:
        return dict(self._tools)

    @property
    def prompts(self) -> dict[str, Prompt]:
        return dict(self._prompts)

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources)

    @property
    def resource_templates(self) -> list[ResourceTemplate]:
        return list(self._resource_templates)

    def add_tool(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ToolNotUniqueError([tool.name])
        self._tools[tool.name] = tool
        logger.info("Registered tool: %s", tool.name)

    def add_prompt(self, prompt: Prompt) -> None:
        if prompt.name in self._prompts:
            logger.warning("Replacing prompt: %s", prompt.name)
        self._prompts[prompt.name] = prompt
        logger.info("Registered prompt: %s", prompt.name)

    def get_tool(self, name: Any) -> Tool | None:
        return self._tools.get(name) if isinstance(name, str) else None

    def get_prompt(self, name: Any) -> Prompt | None:
        return self._prompts.get(name) if isinstance(name, str) else None

    def get_resource(self, uri: Any) -> Resource | None:
        return self._resources_by_uri.get(uri) if isinstance(uri, str) else None

    def primitives(self) -> Iterator[Tool | Prompt | Resource | ResourceTemplate]:
        """Iterate every registered definition."""
        yield from self._tools.values()
        yield from self._prompts.values()
        yield from self._resources
        yield from self._resource_templates

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]

    def list_prompts(self) -> list[dict[str, Any]]:
        return [prompt.to_dict() for prompt in self._prompts.values()]

    def list_resources(self) -> list[dict[str, Any]]:
        return [resource.to_dict() for resource in self._resources]

    def list_resource_templates(self) -> list[dict[str, Any]]:
        return [template.to_dict() for template in self._resource_templates]

    def copy(self) -> "CapabilityRegistry":
        return CapabilityRegistry(
            tools=self._tools.values(),
            prompts=self._prompts.values(),
            resources=self._resources,
            resource_templates=self._resource_templates,
        )


__all__ = ["CapabilityRegistry"]
