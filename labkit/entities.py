"""Domain entities: products and users."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import bcrypt

from labkit.ids import new_id, parse_id


class EntityError(ValueError):
    """Base class for entity validation errors."""

    default_message = "invalid entity"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class IDRequiredError(EntityError):
    default_message = "id is required"


class InvalidIDError(EntityError):
    default_message = "invalid id"


class NameRequiredError(EntityError):
    default_message = "name is required"


class PriceRequiredError(EntityError):
    default_message = "price is required"


class InvalidPriceError(EntityError):
    default_message = "invalid price"


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class Product:
    """A product for sale."""

    id: Any
    name: str
    price: float
    created_at: datetime = field(default_factory=_now)

    def validate(self) -> None:
        """Raise an :class:`EntityError` subclass if the product is not valid."""
        if self.id is None or str(self.id) == "":
            raise IDRequiredError()
        try:
            parse_id(str(self.id))
        except ValueError:
            raise InvalidIDError() from None
        if self.name == "":
            raise NameRequiredError()
        if self.price == 0:
            raise PriceRequiredError()
        if self.price < 0:
            raise InvalidPriceError()

    def to_dict(self) -> dict[str, Any]:
        """Return the product as a JSON-ready mapping."""
        return {
            "id": str(self.id),
            "name": self.name,
            "price": float(self.price),
            "created_at": self.created_at.isoformat(),
        }


def new_product(name: str, price: float) -> Product:
    """Create a validated product with a fresh id and the current time."""
    product = Product(id=new_id(), name=name, price=float(price))
    product.validate()
    return product


@dataclass
class User:
    """A user; ``password`` holds the bcrypt hash, never the plain text."""

    id: uuid.UUID
    name: str
    email: str
    password: str

    def validate_password(self, password: str) -> bool:
        """Tell whether ``password`` matches the stored hash."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password.encode("utf-8"))
        except ValueError:
            return False


def new_user(name: str, email: str, password: str) -> User:
    """Create a user with a fresh id, hashing ``password`` with bcrypt."""
    raw = password.encode("utf-8")
    if len(raw) > 72:
        raise EntityError("bcrypt: password length exceeds 72 bytes")
    hashed = bcrypt.hashpw(raw, bcrypt.gensalt(rounds=10)).decode("ascii")
    return User(id=new_id(), name=name, email=email, password=hashed)