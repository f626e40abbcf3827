"""
Request validation shared by the services.
"""

from __future__ import annotations

from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from core.errors import RequestValidationError

M = TypeVar("M", bound=BaseModel)


def _describe(error: Dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ())) or "value"
    return f'"{loc}" {error["msg"]}'


def validate(schema: Union[Type[M], TypeAdapter], raw: Any) -> Any:
    """
    Shape ``raw`` with ``schema`` (a model class or a ``TypeAdapter``).

    Raises ``RequestValidationError`` (400) listing every failing field.
    """
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(raw)
        if isinstance(raw, schema):
            raw = raw.model_dump(exclude_unset=True)
        return schema.model_validate(raw)
    except ValidationError as exc:
        details: List[Dict[str, Any]] = exc.errors(include_url=False)
        message = "; ".join(_describe(e) for e in details)
        raise RequestValidationError(message, details=details) from exc
