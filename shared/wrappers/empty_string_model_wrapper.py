from datetime import date, datetime
import re
from uuid import UUID
from pydantic import BaseModel, model_validator
from typing import Any, Union, get_args, get_origin

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively strip form strings, drop invisible chars and turn blanks into None."""

    if isinstance(value, BaseModel):
        return deep_clean(value.model_dump())

    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    if isinstance(value, UUID):
        return value

    return value


def safe_parse_date(value: Any):
    """Convert date strings to date, return None if invalid."""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            return None

    return None


def _is_date_annotation(annotation) -> bool:
    origin = get_origin(annotation)
    args = get_args(annotation)
    return (
        annotation in (date, datetime)
        or (origin is Union and any(a in (date, datetime) for a in args))
    )


class EmptyStringModel(BaseModel):
    """Base for models fed by browser forms where "" means "not filled in"."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            return deep_clean(values)
        return values

    @model_validator(mode="before")
    @classmethod
    def fix_dates(cls, values):
        if not isinstance(values, dict):
            return values

        for field_name, field in cls.model_fields.items():
            if field_name in values and _is_date_annotation(field.annotation):
                values[field_name] = safe_parse_date(values[field_name])

        return values
