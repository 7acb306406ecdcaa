"""Shared helpers for JSON DTOs.

Wire payloads are camelCase; Python attributes are snake_case. Models are
frozen so a parsed DTO can be shared freely between callers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def pick(data: Mapping[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    """Return the value of the first key present (and not None) in ``data``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def with_fallback_keys(
    data: Any, aliases: Mapping[str, Iterable[str]]
) -> Any:
    """Fill canonical keys from their alternative spellings.

    ``aliases`` maps a canonical wire key to the alternative keys the backend
    has been seen to use for it. Non-mapping input is returned untouched so
    pydantic reports the type error.
    """
    if not isinstance(data, Mapping):
        return data
    filled = dict(data)
    for canonical, alternatives in aliases.items():
        if filled.get(canonical) is None:
            value = pick(data, alternatives)
            if value is not None:
                filled[canonical] = value
    return filled


class Dto(BaseModel):
    """Base class for immutable API records."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @classmethod
    def from_json(cls, data: Any):
        """Parse a decoded JSON object, raising pydantic.ValidationError."""
        return cls.model_validate(data)

    def to_json(self) -> dict[str, Any]:
        """Serialize back to the camelCase wire shape."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def drop_nulls(data: Any, keys: Iterable[str]) -> Any:
    """Remove explicit nulls for ``keys`` so field defaults apply."""
    if not isinstance(data, Mapping):
        return data
    return {k: v for k, v in data.items() if not (k in keys and v is None)}
