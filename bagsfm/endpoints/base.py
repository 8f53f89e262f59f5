from __future__ import annotations

from typing import Any, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bagsfm.errors import UnexpectedResponseError, ValidationError
from bagsfm.models import Envelope

M = TypeVar("M", bound=BaseModel)


def require(**fields: Any) -> None:
    """Reject blank required string fields before any network call."""

    missing = [k for k, v in fields.items() if not isinstance(v, str) or not v.strip()]
    if len(missing) == 1:
        raise ValidationError(f"{missing[0]} is required")
    if missing:
        raise ValidationError(f"{', '.join(missing)} are required")


def unwrap(data: Any) -> Any:
    """Return the envelope's ``response`` payload when ``success`` is true."""

    try:
        env = Envelope.model_validate(data)
    except PydanticValidationError as e:
        raise UnexpectedResponseError("unexpected response: not an envelope") from e
    if not env.success:
        raise UnexpectedResponseError("unexpected response: success flag not set")
    return env.response


def unwrap_str(data: Any, *, required: bool = True) -> str:
    """Unwrap a plain string payload; blank is an error when ``required``."""

    value = unwrap(data)
    if value is None and not required:
        return ""
    if not isinstance(value, str) or (required and not value.strip()):
        raise UnexpectedResponseError("unexpected response: empty payload")
    return value


def unwrap_model(data: Any, model: Type[M]) -> M:
    """Unwrap an object payload into ``model``; a missing object is an error."""

    value = unwrap(data)
    if not value:
        raise UnexpectedResponseError("unexpected response: empty payload")
    return _validate(model, value)


def unwrap_list(data: Any, model: Type[M]) -> List[M]:
    """Unwrap a list payload; null is treated as an empty list."""

    items = unwrap(data)
    if items is None:
        return []
    if not isinstance(items, list):
        raise UnexpectedResponseError("unexpected response: payload is not a list")
    return [_validate(model, item) for item in items]


def _validate(model: Type[M], value: Any) -> M:
    try:
        return model.model_validate(value)
    except PydanticValidationError as e:
        raise UnexpectedResponseError(f"unexpected response: invalid {model.__name__}") from e
