"""Core MCP server.

The server owns the capability registry and an explicit method -> handler
table, and plugs both into the JSON-RPC dispatcher. Every dispatched call is
capability-gated, instrumented and exception-reported here; transports only
move bytes.

Example:
    server = Server(
        name="calculator",
        tools=[add_tool],
        configuration=Configuration(validate_tool_call_arguments=True),
    )
    StdioTransport(server).open()
"""

import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from switchboard.core import jsonrpc
from switchboard.core.logging_levels import LogLevelThreshold
from switchboard.core.methods import Methods, ensure_capability
from switchboard.core.protocol import (
    filter_server_info,
    negotiate_version,
    supports_instructions,
    validate_definitions,
)
from switchboard.framework.content import Icon, TextContent
from switchboard.framework.errors import (
    ErrorType,
    MethodAlreadyDefinedError,
    RequestHandlerError,
)
from switchboard.framework.instrumentation import add_instrumentation_data, instrument_call
from switchboard.framework.prompts import Prompt
from switchboard.framework.resources import Resource, ResourceTemplate
from switchboard.framework.tools import Tool, ToolResponse
from switchboard.framework.utils import compact, icons_to_list
from switchboard.server.config import Configuration, get_configuration
from switchboard.server.context import RequestContext, current_request_context, request_context
from switchboard.server.registry import CapabilityRegistry

logger = logging.getLogger(__name__)

DEFAULT_NAME = "model_context_protocol"
DEFAULT_VERSION = "0.1.0"

Handler = Callable[[Any], Any]

# Results of these methods are wrapped in an object under the given key
_RESULT_KEYS = {
    Methods.TOOLS_LIST: "tools",
    Methods.PROMPTS_LIST: "prompts",
    Methods.RESOURCES_LIST: "resources",
    Methods.RESOURCES_READ: "contents",
    Methods.RESOURCES_TEMPLATES_LIST: "resourceTemplates",
}


def default_capabilities() -> dict[str, Any]:
    return {
        "tools": {"listChanged": True},
        "prompts": {"listChanged": True},
        "resources": {"listChanged": True},
        "logging": {},
    }


def _noop(params: Any) -> None:
    return None


def _object_params(params: Any) -> dict[str, Any]:
    if params is None:
        return {}
    if not isinstance(params, dict):
        raise RequestHandlerError(
            "Method parameters must be an object", params, error_type=ErrorType.INVALID_PARAMS
        )
    return params


class Server:
    """An MCP server.

    Attributes:
        name: Server name reported in ``serverInfo``
        version: Server version reported in ``serverInfo``
        capabilities: Declared capability set; gates callable methods
        configuration: Process-wide configuration merged with the override
        server_context: Opaque value passed to tools and prompt templates
            that accept a ``server_context`` argument
        transport: Transport used for server-initiated notifications
    """

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        version: str = DEFAULT_VERSION,
        *,
        title: str | None = None,
        description: str | None = None,
        icons: Iterable[Icon] = (),
        website_url: str | None = None,
        instructions: str | None = None,
        tools: Iterable[Tool] = (),
        prompts: Iterable[Prompt] = (),
        resources: Iterable[Resource] = (),
        resource_templates: Iterable[ResourceTemplate] = (),
        server_context: Any = None,
        configuration: Configuration | None = None,
        capabilities: Mapping[str, Any] | None = None,
        transport: Any = None,
    ) -> None:
        """Create a server.

        Raises:
            ToolNotUniqueError: If two tools share a name
            ProtocolVersionError: If a definition uses a field the configured
                protocol version does not support
        """
        self.name = name
        self.version = version
        self.title = title
        self.description = description
        self.icons = tuple(icons)
        self.website_url = website_url
        self.instructions = instructions
        self.server_context = server_context
        self.configuration = get_configuration().merge(configuration)

        self.registry = CapabilityRegistry(tools, prompts, resources, resource_templates)
        self._validate(self.registry)

        self.capabilities: dict[str, Any] = (
            dict(capabilities) if capabilities is not None else default_capabilities()
        )
        self.log_threshold: LogLevelThreshold | None = None

        self._handlers: dict[str, Handler] = {
            Methods.RESOURCES_LIST: self._list_resources,
            Methods.RESOURCES_READ: self._read_resource_no_content,
            Methods.RESOURCES_TEMPLATES_LIST: self._list_resource_templates,
            Methods.TOOLS_LIST: self._list_tools,
            Methods.TOOLS_CALL: self._call_tool,
            Methods.PROMPTS_LIST: self._list_prompts,
            Methods.PROMPTS_GET: self._get_prompt,
            Methods.INITIALIZE: self._initialize,
            Methods.PING: lambda params: {},
            Methods.NOTIFICATIONS_INITIALIZED: _noop,
            Methods.LOGGING_SET_LEVEL: self._set_logging_level,
            # Accepted but not implemented yet
            Methods.RESOURCES_SUBSCRIBE: _noop,
            Methods.RESOURCES_UNSUBSCRIBE: _noop,
            Methods.COMPLETION_COMPLETE: _noop,
            Methods.ELICITATION_CREATE: _noop,
        }
        self.transport = transport

    # ------------------------------------------------------------------
    # Registry access
    # ------------------------------------------------------------------

    @property
    def tools(self) -> dict[str, Tool]:
        return self.registry.tools

    @property
    def prompts(self) -> dict[str, Prompt]:
        return self.registry.prompts

    @property
    def resources(self) -> list[Resource]:
        return self.registry.resources

    @property
    def resource_templates(self) -> list[ResourceTemplate]:
        return self.registry.resource_templates

    @property
    def server_info(self) -> dict[str, Any]:
        return compact(
            {
                "description": self.description,
                "icons": icons_to_list(self.icons),
                "name": self.name,
                "title": self.title,
                "version": self.version,
                "websiteUrl": self.website_url,
            }
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle(
        self, request: Any, context: RequestContext | None = None
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Handle a decoded JSON-RPC request or batch."""
        context = context or RequestContext()
        return jsonrpc.handle(request, functools.partial(self._resolve, context=context))

    def handle_json(
        self, request_json: str | bytes, context: RequestContext | None = None
    ) -> str | None:
        """Handle a serialized JSON-RPC request or batch."""
        context = context or RequestContext()
        return jsonrpc.handle_json(request_json, functools.partial(self._resolve, context=context))

    def _resolve(self, method: str, context: RequestContext) -> Handler | None:
        if method not in self._handlers:
            with instrument_call("unsupported_method", self.configuration.instrument):
                if context.client_info:
                    add_instrumentation_data(client=context.client_info)
            return None

        ensure_capability(method, self.capabilities)

        return functools.partial(self._dispatch, method, context)

    def _dispatch(self, method: str, context: RequestContext, params: Any) -> Any:
        with instrument_call(method, self.configuration.instrument) as data, request_context(
            context
        ):
            try:
                result = self._handlers[method](params)
            except RequestHandlerError as e:
                if not e.expected:
                    self.report_exception(e, {"method": method, "request": params})
                data.setdefault("error", e.error_type.value)
                raise
            except Exception as e:
                self.report_exception(e, {"method": method, "request": params})
                data.setdefault("error", ErrorType.INTERNAL_ERROR.value)
                raise RequestHandlerError(
                    f"Internal error handling {method} request", params, original_error=e
                ) from e

            if context.client_info:
                add_instrumentation_data(client=context.client_info)

            if method in _RESULT_KEYS:
                return {_RESULT_KEYS[method]: result}
            return result

    def report_exception(self, exception: BaseException, context: dict[str, Any]) -> None:
        self.configuration.report_exception(exception, context)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def define_tool(self, handler: Callable[..., Any] | None = None, **options: Any) -> Any:
        """Register a tool after construction.

        Usable directly (``server.define_tool(func, name="echo")``) or as a
        decorator (``@server.define_tool(name="echo")``). Options are those
        of ``Tool.define``.

        Raises:
            ToolNotUniqueError: If a tool with the same name exists
            ProtocolVersionError: If the tool uses an unsupported field
        """

        def register(func: Callable[..., Any]) -> Tool:
            tool = Tool.define(func, **options)
            registry = self.registry.copy()
            registry.add_tool(tool)
            self._validate(registry)
            self.registry = registry
            return tool

        if handler is not None:
            return register(handler)
        return register

    def define_prompt(self, template: Callable[..., Any] | None = None, **options: Any) -> Any:
        """Register a prompt after construction. See ``define_tool``."""

        def register(func: Callable[..., Any]) -> Prompt:
            prompt = Prompt.define(func, **options)
            registry = self.registry.copy()
            registry.add_prompt(prompt)
            self._validate(registry)
            self.registry = registry
            return prompt

        if template is not None:
            return register(template)
        return register

    def define_custom_method(self, method_name: str, handler: Handler | None = None) -> Any:
        """Register a handler for a non-standard method.

        The handler receives the request params. Usable as a decorator.

        Raises:
            MethodAlreadyDefinedError: If the method already has a handler
        """
        if method_name in self._handlers:
            raise MethodAlreadyDefinedError(method_name)

        def register(func: Handler) -> Handler:
            self._handlers[method_name] = func
            logger.info("Registered custom method: %s", method_name)
            return func

        if handler is not None:
            return register(handler)
        return register

    def tools_list_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.TOOLS_LIST] = handler
        return handler

    def tools_call_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.TOOLS_CALL] = handler
        return handler

    def prompts_list_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.PROMPTS_LIST] = handler
        return handler

    def prompts_get_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.PROMPTS_GET] = handler
        return handler

    def resources_list_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.RESOURCES_LIST] = handler
        return handler

    def resources_read_handler(self, handler: Handler) -> Handler:
        """Set the ``resources/read`` handler; its return value becomes ``contents``."""
        self._handlers[Methods.RESOURCES_READ] = handler
        return handler

    def resources_templates_list_handler(self, handler: Handler) -> Handler:
        self._handlers[Methods.RESOURCES_TEMPLATES_LIST] = handler
        return handler

    def _validate(self, registry: CapabilityRegistry) -> None:
        validate_definitions(
            self.configuration.effective_protocol_version,
            self.server_info,
            self.instructions,
            registry.tools.values(),
            registry.primitives(),
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify_tools_list_changed(self) -> None:
        self._notify(Methods.NOTIFICATIONS_TOOLS_LIST_CHANGED, label="tools_list_changed")

    def notify_prompts_list_changed(self) -> None:
        self._notify(Methods.NOTIFICATIONS_PROMPTS_LIST_CHANGED, label="prompts_list_changed")

    def notify_resources_list_changed(self) -> None:
        self._notify(Methods.NOTIFICATIONS_RESOURCES_LIST_CHANGED, label="resources_list_changed")

    def notify_log_message(self, data: Any, level: str, logger: str | None = None) -> None:
        """Send a ``notifications/message`` if ``level`` meets the client's threshold.

        Nothing is sent until a client has called ``logging/setLevel``.
        """
        if self.log_threshold is None or not self.log_threshold.should_notify(level):
            return

        params = {"data": data, "level": level}
        if logger:
            params["logger"] = logger
        self._notify(Methods.NOTIFICATIONS_MESSAGE, params, label="log_message")

    def _notify(self, method: str, params: dict[str, Any] | None = None, *, label: str) -> None:
        if self.transport is None:
            return
        try:
            self.transport.send_notification(method, params)
        except Exception as e:
            self.report_exception(e, {"notification": label})

    # ------------------------------------------------------------------
    # Standard handlers
    # ------------------------------------------------------------------

    def _initialize(self, params: Any) -> dict[str, Any]:
        params = _object_params(params)
        negotiated = negotiate_version(
            params.get("protocolVersion"), self.configuration.effective_protocol_version
        )

        context = current_request_context()
        if context is not None:
            context.client_info = params.get("clientInfo")
            context.protocol_version = negotiated

        logger.info(
            "Initialized session %s for client %s (protocol %s)",
            context.session_id if context else None,
            params.get("clientInfo"),
            negotiated,
        )

        return compact(
            {
                "protocolVersion": negotiated,
                "capabilities": self.capabilities,
                "serverInfo": filter_server_info(self.server_info, negotiated),
                "instructions": self.instructions if supports_instructions(negotiated) else None,
            }
        )

    def _set_logging_level(self, params: Any) -> dict[str, Any]:
        params = _object_params(params)
        if self.capabilities.get("logging") is None:
            raise RequestHandlerError(
                "Server does not support logging", params, error_type=ErrorType.INTERNAL_ERROR
            )

        threshold = LogLevelThreshold(level=params.get("level"))
        if not threshold.valid:
            raise RequestHandlerError(
                f"Invalid log level {params.get('level')}",
                params,
                error_type=ErrorType.INVALID_PARAMS,
            )

        self.log_threshold = threshold
        return {}

    def _list_tools(self, params: Any) -> list[dict[str, Any]]:
        return self.registry.list_tools()

    def _call_tool(self, params: Any) -> dict[str, Any]:
        params = _object_params(params)
        tool_name = params.get("name")

        tool = self.registry.get_tool(tool_name)
        if tool is None:
            add_instrumentation_data(tool_name=tool_name, error="tool_not_found")
            raise RequestHandlerError(tool_name, params, error_type=ErrorType.INVALID_PARAMS)

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise RequestHandlerError(
                "Tool arguments must be an object", params, error_type=ErrorType.INVALID_PARAMS
            )
        add_instrumentation_data(tool_name=tool_name, tool_arguments=arguments)

        missing = tool.input_schema.missing_required_arguments(arguments)
        if missing:
            add_instrumentation_data(error="missing_required_arguments")
            return ToolResponse.error(f"Missing required arguments: {', '.join(missing)}").to_dict()

        if self.configuration.validate_tool_call_arguments:
            validation = tool.input_schema.validate_arguments(arguments)
            if not validation.valid:
                add_instrumentation_data(error="invalid_schema")
                return ToolResponse.error(validation.message).to_dict()

        try:
            return _tool_result(tool.call(arguments, server_context=self.server_context))
        except RequestHandlerError:
            raise
        except Exception as e:
            self.report_exception(e, {"method": Methods.TOOLS_CALL, "request": params})
            return ToolResponse.error(f"Internal error calling tool {tool_name}: {e}").to_dict()

    def _list_prompts(self, params: Any) -> list[dict[str, Any]]:
        return self.registry.list_prompts()

    def _get_prompt(self, params: Any) -> Any:
        params = _object_params(params)
        prompt_name = params.get("name")

        prompt = self.registry.get_prompt(prompt_name)
        if prompt is None:
            add_instrumentation_data(error="prompt_not_found")
            raise RequestHandlerError(
                f"Prompt not found {prompt_name}", params, error_type=ErrorType.PROMPT_NOT_FOUND
            )

        add_instrumentation_data(prompt_name=prompt_name)

        arguments = params.get("arguments") or {}
        prompt.validate_arguments(arguments)

        result = prompt.render(arguments, server_context=self.server_context)
        return result.to_dict() if hasattr(result, "to_dict") else result

    def _list_resources(self, params: Any) -> list[dict[str, Any]]:
        return self.registry.list_resources()

    def _read_resource_no_content(self, params: Any) -> list[Any]:
        # Servers serve contents by setting resources_read_handler
        params = _object_params(params)
        add_instrumentation_data(resource_uri=params.get("uri"))
        return []

    def _list_resource_templates(self, params: Any) -> list[dict[str, Any]]:
        return self.registry.list_resource_templates()


def _tool_result(response: Any) -> dict[str, Any]:
    if isinstance(response, ToolResponse):
        return response.to_dict()
    if isinstance(response, Mapping):
        return dict(response)
    if isinstance(response, str):
        return ToolResponse([TextContent(response)]).to_dict()
    if hasattr(response, "to_dict"):
        return response.to_dict()
    msg = f"Tool returned unsupported result type {type(response).__name__}"
    raise TypeError(msg)


__all__ = ["DEFAULT_NAME", "DEFAULT_VERSION", "Server", "default_capabilities"]
