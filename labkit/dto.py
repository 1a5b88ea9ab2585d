"""Request and response bodies of the product API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class DTOError(ValueError):
    """Raised when a request body does not have the expected shape."""


def _fields(data: Any, **kinds: type) -> dict[str, Any]:
    """Read the named fields of a JSON object; missing ones take zero values."""
    if not isinstance(data, Mapping):
        raise DTOError("request body must be a JSON object")
    values: dict[str, Any] = {}
    for key, kind in kinds.items():
        value = data.get(key)
        if value is None:
            values[key] = kind()
        elif kind is float and isinstance(value, (int, float)) and not isinstance(value, bool):
            values[key] = float(value)
        elif kind is str and isinstance(value, str):
            values[key] = value
        else:
            raise DTOError(f"field {key!r} must be a {'number' if kind is float else 'string'}")
    return values


@dataclass
class CreateProductInput:
    name: str = ""
    price: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "CreateProductInput":
        return cls(**_fields(data, name=str, price=float))


@dataclass
class CreateUserInput:
    name: str = ""
    email: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "CreateUserInput":
        return cls(**_fields(data, name=str, email=str, password=str))


@dataclass
class GetJWTInput:
    email: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "GetJWTInput":
        return cls(**_fields(data, email=str, password=str))


@dataclass
class GetJWTOutput:
    access_token: str

    def to_dict(self) -> dict[str, str]:
        return {"access_token": self.access_token}