"""
Tool registry and dispatch for elicitation tools
"""

import importlib
import logging
import pkgutil
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType, ModuleType
from typing import Any

from pydantic import BaseModel, ValidationError

from ..elicitation.mediator import ElicitationMediator
from ..elicitation.schemas import ANSWER_OUTPUT_SCHEMA, MediationResult
from ..exceptions import InvalidArgumentError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any, ElicitationMediator], Awaitable[MediationResult]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named tool: its argument model, handler and advertised metadata"""

    name: str
    description: str
    args_model: type[BaseModel]
    handler: ToolHandler
    title: str | None = None

    @classmethod
    def from_function(cls, func: Callable) -> "ToolDefinition":
        """Build a definition from a function decorated with @tool"""
        metadata = getattr(func, "_mcp_tool_metadata", None)
        if metadata is None:
            raise ValueError(
                f"Function {func.__name__} does not have MCP tool metadata. Use @tool decorator first."
            )
        return cls(
            name=metadata["name"],
            title=metadata["title"],
            description=metadata["description"],
            args_model=metadata["args_model"],
            handler=func,
        )

    def to_mcp_tool(self) -> dict[str, Any]:
        """Tool metadata in tools/list format"""
        info: dict[str, Any] = {"name": self.name}
        if self.title:
            info["title"] = self.title
        info["description"] = self.description
        info["inputSchema"] = self.args_model.model_json_schema(by_alias=True)
        info["outputSchema"] = ANSWER_OUTPUT_SCHEMA
        return info


class ToolRegistry:
    """
    Read-only mapping from tool name to tool definition.

    The mapping is built once when the registry is constructed and never
    changes afterwards, so a single registry can be shared by every
    concurrent tool call.
    """

    def __init__(self, definitions: Iterable[ToolDefinition] = ()) -> None:
        tools: dict[str, ToolDefinition] = {}
        for definition in definitions:
            if definition.name in tools:
                raise ValueError(f"Duplicate tool name: {definition.name}")
            tools[definition.name] = definition
            logger.info(f"Registered tool: {definition.name}")
        self._tools = MappingProxyType(tools)

    @classmethod
    def from_functions(cls, functions: Iterable[Callable]) -> "ToolRegistry":
        return cls(ToolDefinition.from_function(func) for func in functions)

    @classmethod
    def discover(cls, *modules_or_packages: ModuleType | str) -> "ToolRegistry":
        """
        Build a registry from every @tool-decorated function found in the
        given modules or packages.

        Args:
            modules_or_packages: Modules, packages or dotted import paths to scan
        """
        found: list[Callable] = []
        for module_or_package in modules_or_packages:
            if isinstance(module_or_package, str):
                module_or_package = importlib.import_module(module_or_package)

            # If it's a package, scan all modules
            if hasattr(module_or_package, "__path__"):
                for _, modname, _ in pkgutil.iter_modules(
                    module_or_package.__path__, module_or_package.__name__ + "."
                ):
                    try:
                        submodule = importlib.import_module(modname)
                    except ImportError as e:
                        logger.warning(f"Could not import {modname}: {e}")
                        continue
                    cls._scan_module(submodule, found)
            cls._scan_module(module_or_package, found)

        return cls.from_functions(found)

    @staticmethod
    def _scan_module(module: ModuleType, found: list[Callable]) -> None:
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if callable(obj) and hasattr(obj, "_mcp_tool_metadata") and obj not in found:
                found.append(obj)
                logger.debug(f"Discovered tool: {obj._mcp_tool_metadata['name']}")

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def list_tools(self) -> list[dict[str, Any]]:
        """Advertised metadata of all tools, in registration order"""
        return [definition.to_mcp_tool() for definition in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    async def dispatch(
        self,
        name: str,
        raw_args: dict[str, Any] | None,
        mediator: ElicitationMediator,
    ) -> MediationResult:
        """
        Validate the raw arguments of a tool call and run its handler.

        Raises:
            UnknownToolError: No tool is registered under ``name``
            InvalidArgumentError: ``raw_args`` do not satisfy the tool's argument model
        """
        definition = self._tools.get(name)
        if definition is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        try:
            args = definition.args_model.model_validate(raw_args or {})
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid arguments for tool '{name}': {e}",
                diagnostics=e.errors(include_url=False, include_context=False),
            ) from e

        logger.info(f"Dispatching tool call: {name}")
        return await definition.handler(args, mediator)
