"""Boundary validation helpers.

Payloads are parsed into pydantic models before they reach the services.
Every violation is collected into one list of human-readable messages; a
payload is either fully valid or rejected as a whole.
"""
from typing import Any, Iterable, List, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from inec_poll.core.exceptions import ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)

# Location prefixes FastAPI adds to request validation errors
_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _format_location(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in _REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> List[str]:
    """
    Turn pydantic error dicts into user-facing messages.

    Messages raised by our own validators (``ValueError("Poll title is required")``)
    are used verbatim; built-in pydantic errors are prefixed with the field path.
    """
    messages = []
    for error in errors:
        if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
            message = str(error["ctx"]["error"])
        else:
            location = _format_location(error.get("loc", ()))
            message = f"{location}: {error.get('msg')}" if location else str(error.get("msg"))
        if message not in messages:
            messages.append(message)
    return messages


def validate(schema: Type[ModelT], data: Any) -> ModelT:
    """
    Validate ``data`` against ``schema``.

    Returns:
        A fully-typed instance of ``schema``

    Raises:
        ValidationFailed: With every violation found, never a partial result
    """
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(format_validation_errors(exc.errors()))
