"""Application settings read from a ``.env`` file and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import jwt
from dotenv import dotenv_values


class TokenError(ValueError):
    """Raised when a token cannot be verified."""


class TokenAuth:
    """Signs and verifies HS256 JSON web tokens with a shared secret."""

    algorithm = "HS256"

    def __init__(self, secret: str | bytes) -> None:
        self._secret = secret.encode() if isinstance(secret, str) else bytes(secret)

    def encode(self, claims: dict[str, Any]) -> str:
        return jwt.encode(dict(claims), self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify ``token`` (signature and expiry) and return its claims."""
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise TokenError(str(exc)) from exc


@dataclass
class Config:
    """Settings of the product API."""

    db_driver: str = ""
    db_host: str = ""
    db_port: str = ""
    db_user: str = ""
    db_password: str = ""
    db_name: str = ""
    web_server_port: str = ""
    jwt_secret: str = ""
    jwt_expires_in: int = 0
    token_auth: TokenAuth = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.token_auth = TokenAuth(self.jwt_secret)


def _env_key(attribute: str) -> str:
    return "JWT_EXPIRESIN" if attribute == "jwt_expires_in" else attribute.upper()


def load_config(path: str | os.PathLike[str] = ".") -> Config:
    """Read ``.env`` in ``path``; environment variables override its values."""
    env_file = Path(path) / ".env"
    if not env_file.is_file():
        raise FileNotFoundError(f"config file not found: {env_file}")
    file_values = dotenv_values(env_file)

    values: dict[str, Any] = {}
    for f in fields(Config):
        if not f.init:
            continue
        key = _env_key(f.name)
        raw = os.environ.get(key, file_values.get(key) or "")
        if f.name == "jwt_expires_in":
            try:
                raw = int(raw.strip() or 0)
            except ValueError:
                raise ValueError(f"{key}: cannot parse {raw!r} as an integer") from None
        values[f.name] = raw
    return Config(**values)