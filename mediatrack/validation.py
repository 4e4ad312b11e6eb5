"""Turns pydantic failures into the API's ``{field: [messages]}`` shape."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Type, TypeVar

from pydantic import AnyHttpUrl, BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from mediatrack.errors import ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)

MIN_YEAR = 1900
RATING_MIN = 0
RATING_MAX = 10

# Location prefixes FastAPI puts in front of the field name
_SOURCES = {"body", "query", "path", "header", "cookie"}
_VALUE_ERROR_PREFIX = "Value error, "

_url_adapter = TypeAdapter(AnyHttpUrl)


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _SOURCES:
            loc = loc[1:]
        field = str(loc[0]) if loc else "body"
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]
        messages = out.setdefault(field, [])
        if msg not in messages:
            messages.append(msg)
    return out


def validate_payload(model: Type[ModelT], raw: Mapping[str, Any]) -> ModelT:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationFailed(field_errors(exc.errors()))


# Reusable field rules shared by the schemas

def check_year(value):
    if value is None:
        return value
    current = datetime.now().year
    if value < MIN_YEAR or value > current:
        raise ValueError(f"Year must be between {MIN_YEAR} and {current}")
    return value


def check_url(value):
    if value is None:
        return value
    try:
        _url_adapter.validate_python(value)
    except ValueError:
        raise ValueError("Invalid URL")
    return value


def check_not_blank(value):
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Must not be empty")
    return value
