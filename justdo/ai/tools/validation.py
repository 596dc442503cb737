"""
Argument validation against the tool input schemas.

Covers the subset of JSON Schema the tool catalogue uses: required keys,
primitive types, enums, nested objects and arrays. Extra keys are allowed.
Pure functions, no I/O.
"""

from __future__ import annotations

from typing import Any

from ...models import ValidationResult

# tool -> [(object field, trigger key, trigger value, key then required)]
CONDITIONAL_REQUIREMENTS: dict[str, list[tuple[str, str, str, str]]] = {
    "update_entry": [("body_content", "mode", "section", "section")],
}


def json_type(value: Any) -> str:
    """JSON type name of a Python value. Booleans are never numbers."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _type_matches(expected: str, value: Any) -> bool:
    actual = json_type(value)
    if expected == "integer":
        return actual == "number" and float(value).is_integer()
    return actual == expected


def validate_field(name: str, value: Any, schema: dict) -> list[str]:
    """Errors for one value; nulls are left to the required-key check."""
    if value is None:
        return []

    expected = schema.get("type")
    if expected and not _type_matches(expected, value):
        return [f"Field '{name}' must be of type {expected}, got {json_type(value)}"]

    errors: list[str] = []
    enum = schema.get("enum")
    if enum is not None and value not in enum:
        errors.append(f"Field '{name}' must be one of: {', '.join(map(str, enum))}")

    if expected == "object" and "properties" in schema:
        for required in schema.get("required", []):
            if value.get(required) is None:
                errors.append(f"Field '{name}.{required}' is required")
        for key, nested in value.items():
            nested_schema = schema["properties"].get(key)
            if nested_schema:
                errors.extend(validate_field(f"{name}.{key}", nested, nested_schema))

    if expected == "array" and "items" in schema:
        for index, item in enumerate(value):
            errors.extend(validate_field(f"{name}[{index}]", item, schema["items"]))

    return errors


def _conditional_errors(tool_name: str, args: dict) -> list[str]:
    errors = []
    for field, trigger_key, trigger_value, required in CONDITIONAL_REQUIREMENTS.get(tool_name, []):
        obj = args.get(field)
        if isinstance(obj, dict) and obj.get(trigger_key) == trigger_value:
            section = obj.get(required)
            if not isinstance(section, str) or not section.strip():
                errors.append(
                    f"Field '{field}.{required}' is required when "
                    f"{field}.{trigger_key} is '{trigger_value}'"
                )
    return errors


def validate_against_schema(tool_name: str, input_schema: dict, args: Any) -> ValidationResult:
    if not isinstance(args, dict):
        return ValidationResult(valid=False, errors=["Arguments must be an object"])

    errors: list[str] = []
    for required in input_schema.get("required", []):
        if args.get(required) is None:
            errors.append(f"Missing required field: {required}")

    properties = input_schema.get("properties", {})
    for key, value in args.items():
        schema = properties.get(key)
        if schema is None:
            continue
        errors.extend(validate_field(key, value, schema))

    errors.extend(_conditional_errors(tool_name, args))
    return ValidationResult(valid=not errors, errors=errors)
