# src/ecwt/domain/value_objects.py

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from .exceptions import ConfigurationError, TokenFormatError, ValidationError

if TYPE_CHECKING:
    from .ports import Identifier

Validator = Callable[[Any], bool]
SchemaSpec = Union[Mapping[str, Optional[Validator]], Iterable[str]]


# --- Schema ----------------------------------------------------------------


@dataclass(frozen=True, slots=True, eq=False)
class Schema:
    """
    Ordered set of token data fields, each with an optional validator.

    The token payload is positional, so both create and verify walk the
    field names in canonical (lexicographic) order.
    """

    fields: Tuple[str, ...]
    validators: Mapping[str, Validator]

    def __init__(self, spec: SchemaSpec | None = None) -> None:
        if spec is None:
            items: dict[str, Optional[Validator]] = {}
        elif isinstance(spec, Mapping):
            items = dict(spec)
        elif isinstance(spec, (str, bytes)):
            raise ConfigurationError("Schema must be a mapping or an iterable of field names.")
        else:
            items = {name: None for name in spec}

        for name, validator in items.items():
            if not isinstance(name, str):
                raise ConfigurationError(f"Schema field name must be a string, got {name!r}.")
            if validator is not None and not callable(validator):
                raise ConfigurationError(f"Validator for field {name!r} is not callable.")

        object.__setattr__(self, "fields", tuple(sorted(items)))
        object.__setattr__(
            self,
            "validators",
            MappingProxyType({k: v for k, v in items.items() if v is not None}),
        )

    def to_payload(self, data: Mapping[str, Any]) -> list[Any]:
        """
        Validate `data` and lay it out in canonical order.

        Missing fields are encoded as None. Fields without a validator
        pass through unchecked.

        Raises:
          - ValidationError on an unknown field or a rejected value
        """
        unknown = sorted(set(data) - set(self.fields), key=str)
        if unknown:
            raise ValidationError(f"Unknown field(s) not in schema: {unknown}")

        payload: list[Any] = []
        for name in self.fields:
            value = data.get(name)
            validator = self.validators.get(name)
            if validator is not None and not validator(value):
                raise ValidationError(f"Value {value!r} of field {name!r} is invalid.")
            payload.append(value)
        return payload

    def to_data(self, payload: Iterable[Any]) -> dict[str, Any]:
        values = list(payload)
        if len(values) != len(self.fields):
            raise TokenFormatError("Malformed token.")
        return dict(zip(self.fields, values))


# --- Wire and cache records ------------------------------------------------


@dataclass(frozen=True, slots=True)
class CanonicalTuple:
    """The only structure that is ever encrypted: (id bytes, ttl, payload)."""

    id_bytes: bytes
    ttl: Optional[float]
    payload: Tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Decoded token parts kept by the decode cache."""

    snowflake: Identifier
    ttl_initial: Optional[float]
    data: Mapping[str, Any]


def is_valid_ttl(value: Any) -> bool:
    """True for None or a finite, non-negative number of seconds."""
    if value is None:
        return True
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0
