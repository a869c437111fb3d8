"""
Tool Registry - Name to tool lookup for agents
"""
from typing import Any, Dict, List

from ..errors import InvalidInputError, ToolNotFoundError
from ..utils.logger import setup_logger

logger = setup_logger('tool_registry', 'tools.log')


class ToolRegistry:
    """Manages tool registration, discovery, and access"""

    def __init__(self):
        self._tools: Dict[str, Any] = {}

    def register_tool(self, tool: Any):
        """
        Register a tool, replacing any tool with the same name

        Args:
            tool: Object exposing get_name() and execute()
        """
        if tool is None or not callable(getattr(tool, 'get_name', None)) or not callable(getattr(tool, 'execute', None)):
            raise InvalidInputError("Invalid tool implementation: must have get_name() and execute() methods")

        name = tool.get_name()
        if name in self._tools:
            logger.warning(f"Tool {name} already registered, overwriting")

        self._tools[name] = tool
        logger.debug(f"Registered tool: {name}")

    def get_tool(self, name: str) -> Any:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {name}")
        return tool

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def get_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def get_tool_info(self) -> List[Dict[str, Any]]:
        return [
            {
                'name': name,
                'description': tool.get_description() if callable(getattr(tool, 'get_description', None)) else None
            }
            for name, tool in self._tools.items()
        ]
