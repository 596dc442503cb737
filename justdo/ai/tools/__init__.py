"""
Tool layer for native Anthropic tool use (function calling).

The package is organised into:
- schemas.py: Tool schema definitions (Anthropic ToolParam format)
- validation.py: argument validation against those schemas
- registry.py: ToolRegistry (catalogue + validation)
- executor.py: ToolExecutor (guardrail, dispatch, verification)
- capture.py: entry construction for classify_and_capture
- routing.py: confidence routing and the inbox agent note
- resolution.py: stale-path resolution and disambiguation
- verification.py: post-mutation checks and receipts

Re-exports:
    ToolRegistry: catalogue and argument validation
    ToolExecutor: executes tool calls
    TOOL_SCHEMAS: List of Anthropic tool schemas
"""

from .executor import ToolExecutor
from .registry import ToolRegistry
from .schemas import TOOL_SCHEMAS

__all__ = ["ToolExecutor", "ToolRegistry", "TOOL_SCHEMAS"]
