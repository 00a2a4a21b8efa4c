"""Structural validation of decoded API payloads."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import pydantic
from pydantic import TypeAdapter

from errors import ValidationError, context_prefix

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def validate(raw: Any, shape: Any, context: str) -> Any:
    """Validate ``raw`` against ``shape`` (a pydantic model or type hint).

    Returns the data typed as ``shape``. Raises ValidationError naming the
    provider and every failing field.
    """
    if shape is None:
        return raw
    try:
        return _adapter(shape).validate_python(raw)
    except pydantic.ValidationError as e:
        details = "; ".join(_describe(err) for err in e.errors())
        logger.debug("%s payload failed validation: %s", context, details)
        raise ValidationError(
            f"{context_prefix(context)} Response validation failed: {details}"
        ) from e


def _describe(err: dict) -> str:
    location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
    return f"{location}: {err.get('msg', 'invalid value')}"
