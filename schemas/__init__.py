"""
schemas/__init__.py

JSON Schema definition and validation utilities for diagram records.
Used by Diagram.replace_all before any node or edge is built.
"""

from __future__ import annotations

import json
import math
import os
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft202012Validator, validators

# Schema file paths
SCHEMA_DIR = os.path.dirname(os.path.abspath(__file__))
DIAGRAM_SCHEMA_PATH = os.path.join(SCHEMA_DIR, "diagram_schema.json")

# Cached schema and validator
_diagram_schema: Optional[Dict] = None
_validator: Optional[Draft202012Validator] = None


def _is_finite_number(checker, instance) -> bool:
    # json.load accepts NaN and Infinity, which must never reach node coordinates
    if isinstance(instance, bool) or not isinstance(instance, (int, float)):
        return False
    return math.isfinite(instance)


DiagramValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine("number", _is_finite_number),
)


def get_diagram_schema() -> Dict:
    """Load and return the diagram records schema."""
    global _diagram_schema
    if _diagram_schema is None:
        with open(DIAGRAM_SCHEMA_PATH, "r", encoding="utf-8") as f:
            _diagram_schema = json.load(f)
    return _diagram_schema


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        _validator = DiagramValidator(get_diagram_schema())
    return _validator


def validate_records(data: Any) -> Tuple[bool, List[str]]:
    """
    Validate diagram records against the schema.

    Args:
        data: The plain-data records (``{"nodes": [...], "links": [...]}``)

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    errors = list(_get_validator().iter_errors(data))
    if not errors:
        return True, []

    error_messages = []
    for error in errors:
        path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
        error_messages.append(f"{path}: {error.message}")
    return False, error_messages


def record_defaults(definition: str) -> Dict[str, Any]:
    """
    Build ``{field: default}`` for one record definition under ``$defs``.

    Args:
        definition: ``"node"`` or ``"link"``

    Returns:
        Every property of the definition that declares a default.
    """
    defs = get_diagram_schema().get("$defs", {})
    props = defs.get(definition, {}).get("properties", {})
    return {name: prop["default"] for name, prop in props.items() if "default" in prop}


def enum_values(definition: str, field: str) -> List[str]:
    """Allowed values of an enum field, e.g. ``enum_values("node", "shape")``."""
    defs = get_diagram_schema().get("$defs", {})
    return list(defs.get(definition, {}).get("properties", {}).get(field, {}).get("enum", []))
