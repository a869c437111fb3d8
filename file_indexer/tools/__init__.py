"""
Tools Package - Filesystem tools available to agents
"""
from .tool_registry import ToolRegistry
from .glob_tool import GlobTool
from .view_tool import ViewTool

__all__ = ["ToolRegistry", "GlobTool", "ViewTool"]
