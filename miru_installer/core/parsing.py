"""
Structured field extraction for small JSON documents.

The release API answers with a JSON object; callers ask for one field and get
either its value or a typed ParseError, never a silently empty string.
"""

import json
from typing import Any, Dict, Optional, Union

from .exceptions import DocumentParseError, MissingFieldError


def load_json_object(document: Union[str, bytes]) -> Dict[str, Any]:
    """
    Decode a JSON document that must be an object.

    Args:
        document: Raw JSON text or bytes

    Returns:
        Decoded dictionary

    Raises:
        DocumentParseError: If the document is not valid JSON or not an object

    Example:
        >>> load_json_object('{"tag_name": "v0.8.0"}')
        {'tag_name': 'v0.8.0'}
    """
    if isinstance(document, bytes):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentParseError(f"Document is not valid UTF-8: {e}")

    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise DocumentParseError(f"Document is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise DocumentParseError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    return data


def extract_string_field(data: Dict[str, Any], field: str) -> str:
    """
    Extract a non-empty string field from a decoded document.

    Args:
        data: Decoded JSON object
        field: Field name

    Returns:
        Field value with surrounding whitespace removed

    Raises:
        MissingFieldError: If the field is absent, not a string, or empty
    """
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise MissingFieldError(field)
    return value.strip()


def optional_string_field(data: Dict[str, Any], field: str) -> Optional[str]:
    """Like extract_string_field, but returns None instead of raising."""
    try:
        return extract_string_field(data, field)
    except MissingFieldError:
        return None


__all__ = [
    "load_json_object",
    "extract_string_field",
    "optional_string_field",
]
