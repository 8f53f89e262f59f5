from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel


def to_jsonable(obj: Any) -> Any:
    """
    Convert API results to JSON-serializable equivalents.

    pydantic models are dumped with their wire (camelCase) names so CLI
    output matches the API documentation.

    Security considerations:
    - open streams and other objects fall back to their string form; their
      contents are never read.

    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, BaseModel):
        return to_jsonable(obj.model_dump(by_alias=True, mode="json"))

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [to_jsonable(x) for x in obj]

    return str(obj)
