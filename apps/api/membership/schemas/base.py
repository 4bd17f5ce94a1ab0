from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


# Older clients send "" for unknown dates and null for unset text fields.
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
Text = Annotated[str, BeforeValidator(_none_to_empty)]

# Hashed exactly as typed, so exempt from the model-wide stripping.
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1, max_length=1024)]
OptionalPassword = Annotated[
    Annotated[str, StringConstraints(strip_whitespace=False, max_length=1024)] | None,
    BeforeValidator(_blank_to_none),
]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
