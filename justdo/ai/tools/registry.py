"""
Tool registry: the fixed tool catalogue and argument validation.

Dispatch lives in executor.py; the registry only knows what each tool looks
like, so it can be shared freely and needs no collaborators.
"""

from __future__ import annotations

import logging
from typing import Any

from ...models import ValidationResult
from .schemas import TOOL_SCHEMAS
from .validation import validate_against_schema

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Holds the tool schemas handed to the model and validates tool input."""

    def __init__(self, schemas: list[dict] | None = None) -> None:
        self._tools: dict[str, dict] = {}
        for schema in schemas if schemas is not None else TOOL_SCHEMAS:
            self._tools[schema["name"]] = schema

    @property
    def schemas(self) -> list[dict]:
        """Return the list of Anthropic tool schemas."""
        return list(self._tools.values())

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_tool(self, name: str) -> dict | None:
        return self._tools.get(name)

    def validate_arguments(self, name: str, args: Any) -> ValidationResult:
        tool = self.get_tool(name)
        if tool is None:
            return ValidationResult(valid=False, errors=[f"Unknown tool: {name}"])
        result = validate_against_schema(name, tool["input_schema"], args)
        if not result.valid:
            logger.debug("Invalid arguments for %s: %s", name, result.errors)
        return result
