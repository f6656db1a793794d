"""
Schema Validation - JSON Schema validation utilities.

Validates declared resource documents against the resource kind's schema.
"""

import base64
import binascii
import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import SchemaError

logger = logging.getLogger(__name__)

format_checker = FormatChecker()


@format_checker.checks("base64", raises=(binascii.Error, ValueError))
def is_base64(value: Any) -> bool:
    if not isinstance(value, str):
        return True
    base64.b64decode(value, validate=True)
    return True


def validate_schema(schema: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate that a schema is a valid JSON Schema (Draft 7).

    Args:
        schema: The schema to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        Draft7Validator.check_schema(schema)
        return True, None
    except SchemaError as e:
        return False, f"Invalid schema: {e.message}"


def validate_document(
    document: Dict[str, Any], schema: Dict[str, Any]
) -> Tuple[bool, Optional[str]]:
    """
    Validate a declared document against a JSON Schema.

    Args:
        document: The declared document to validate
        schema: The JSON Schema to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    validator = Draft7Validator(schema, format_checker=format_checker)
    errors = sorted(
        validator.iter_errors(document),
        key=lambda e: ".".join(str(p) for p in e.absolute_path),
    )

    if not errors:
        return True, None

    # Collect all validation errors
    error_messages = []
    for error in errors:
        path = ".".join(str(p) for p in error.absolute_path) or "(root)"
        error_messages.append(f"{path}: {error.message}")

    logger.debug(f"Document failed validation with {len(errors)} error(s)")
    return False, "; ".join(error_messages)
