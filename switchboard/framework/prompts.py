"""
Prompt definitions.

A Prompt is an immutable description of a named message template plus the
callable that renders it. Templates receive the prompt arguments as a dict,
and ``server_context`` when their signature accepts it.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from switchboard.framework.content import Icon, content_to_dict
from switchboard.framework.errors import ErrorType, RequestHandlerError
from switchboard.framework.utils import (
    accepts_server_context,
    compact,
    handle_from_name,
    icons_to_list,
)


@dataclass(frozen=True)
class PromptArgument:
    name: str
    title: str | None = None
    description: str | None = None
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "name": self.name,
                "title": self.title,
                "description": self.description,
                "required": self.required,
            }
        )


@dataclass(frozen=True)
class PromptMessage:
    """A single message in a rendered prompt."""

    role: str
    content: Any

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": content_to_dict(self.content)}


@dataclass(frozen=True)
class PromptResult:
    messages: list[PromptMessage] = field(default_factory=list)
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "description": self.description,
                "messages": [content_to_dict(message) for message in self.messages],
            }
        )


@dataclass(frozen=True)
class Prompt:
    """An immutable prompt definition bound to its template."""

    name: str
    template: Callable[..., Any] = field(repr=False, compare=False)
    title: str | None = None
    description: str | None = None
    icons: tuple[Icon, ...] = ()
    arguments: tuple[PromptArgument, ...] = ()
    meta: dict[str, Any] | None = None

    @classmethod
    def define(
        cls,
        template: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        title: str | None = None,
        description: str | None = None,
        icons: Iterable[Icon] = (),
        arguments: Iterable[PromptArgument | Mapping[str, Any]] = (),
        meta: dict[str, Any] | None = None,
    ) -> "Prompt":
        """Build a Prompt, deriving the name from the template if omitted."""
        if template is None:
            template = _not_implemented

        if name is None:
            name = handle_from_name(
                getattr(template, "__name__", None) or type(template).__name__
            )

        return cls(
            name=name,
            template=template,
            title=title,
            description=description,
            icons=tuple(icons),
            arguments=tuple(
                arg if isinstance(arg, PromptArgument) else PromptArgument(**arg)
                for arg in arguments
            ),
            meta=meta,
        )

    @property
    def required_arguments(self) -> list[str]:
        return [arg.name for arg in self.arguments if arg.required]

    def validate_arguments(self, arguments: Mapping[str, Any]) -> None:
        """Raise if a required argument is missing.

        Raises:
            RequestHandlerError: with error type ``missing_required_arguments``
        """
        missing = [name for name in self.required_arguments if name not in arguments]
        if missing:
            raise RequestHandlerError(
                f"Missing required arguments: {', '.join(missing)}",
                error_type=ErrorType.MISSING_REQUIRED_ARGUMENTS,
            )

    def render(self, arguments: Mapping[str, Any], server_context: Any = None) -> Any:
        """Invoke the template."""
        if accepts_server_context(self.template):
            return self.template(dict(arguments), server_context=server_context)
        return self.template(dict(arguments))

    def to_dict(self) -> dict[str, Any]:
        return compact(
            {
                "name": self.name,
                "title": self.title,
                "description": self.description,
                "icons": icons_to_list(self.icons),
                "arguments": [arg.to_dict() for arg in self.arguments],
                "_meta": self.meta,
            }
        )


def prompt(
    template: Callable[..., Any] | None = None, **options: Any
) -> Prompt | Callable[[Callable[..., Any]], Prompt]:
    """Decorator form of ``Prompt.define``."""
    if template is not None:
        return Prompt.define(template, **options)

    def decorator(func: Callable[..., Any]) -> Prompt:
        return Prompt.define(func, **options)

    return decorator


def _not_implemented(arguments: dict[str, Any], **kwargs: Any) -> Any:
    msg = "Prompt template is not implemented"
    raise NotImplementedError(msg)


__all__ = ["Prompt", "PromptArgument", "PromptMessage", "PromptResult", "prompt"]
