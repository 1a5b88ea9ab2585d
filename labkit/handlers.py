"""HTTP handlers for the product and user endpoints."""

from __future__ import annotations

import json
import re
import sqlite3
import time
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Mapping, Protocol

from werkzeug.wrappers import Request, Response

from labkit.config import TokenAuth
from labkit.dto import CreateProductInput, CreateUserInput, DTOError, GetJWTInput, GetJWTOutput
from labkit.entities import EntityError, Product, User, new_product, new_user
from labkit.ids import parse_id

__all__ = ["ProductHandler", "UserHandler"]

_STORE_ERRORS = (LookupError, sqlite3.Error)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class _ProductRepository(Protocol):
    def create(self, product: Product) -> None: ...

    def find_all(self, page: int, limit: int, sort: str) -> list[Product]: ...

    def find_by_id(self, product_id: str) -> Product: ...

    def update(self, product: Product) -> None: ...

    def delete(self, product_id: str) -> None: ...


class _UserRepository(Protocol):
    def create(self, user: User) -> None: ...

    def find_by_email(self, email: str) -> User: ...


def _read_json(request: Request) -> Any:
    """Decode the request body as JSON, raising ``ValueError`` if it is not."""
    return json.loads(request.get_data().decode("utf-8"))


def _json_response(payload: Any, status: HTTPStatus) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def _error_response(message: str, status: HTTPStatus) -> Response:
    return _json_response({"message": message}, status)


def _atoi(text: str) -> int:
    """Parse a decimal integer, giving 0 for anything that is not one."""
    return int(text) if _INTEGER.fullmatch(text) else 0


def _parse_time(value: Any) -> datetime:
    if value is None:
        return _ZERO_TIME
    if not isinstance(value, str):
        raise ValueError("created_at must be a string")
    text = value[:-1] + "+00:00" if value[-1:] in ("Z", "z") else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError("created_at must carry a time zone offset")
    return parsed


def _product_from_body(data: Any, product_id: Any) -> Product:
    """Build a product from an update body; the path id replaces any body id."""
    fields = CreateProductInput.from_dict(data)
    assert isinstance(data, Mapping)
    raw_id = data.get("id")
    if raw_id is not None:
        parse_id(raw_id)
    created_at = _parse_time(data.get("created_at"))
    return Product(id=product_id, name=fields.name, price=fields.price, created_at=created_at)


class ProductHandler:
    """Create, read, update, delete and list products."""

    def __init__(self, product_db: _ProductRepository) -> None:
        self.product_db = product_db

    def create_product(self, request: Request) -> Response:
        """Create a product from ``{"name", "price"}``; answers 201 on success."""
        try:
            body = CreateProductInput.from_dict(_read_json(request))
            product = new_product(body.name, body.price)
        except (ValueError, DTOError, EntityError):
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            self.product_db.create(product)
        except sqlite3.Error:
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        return Response(status=HTTPStatus.CREATED)

    def get_product(self, request: Request, product_id: str) -> Response:
        """Return one product as JSON, or 404 if it does not exist."""
        if not product_id:
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            product = self.product_db.find_by_id(product_id)
        except _STORE_ERRORS:
            return Response(status=HTTPStatus.NOT_FOUND)
        return _json_response(product.to_dict(), HTTPStatus.OK)

    def update_product(self, request: Request, product_id: str) -> Response:
        """Replace a stored product with the request body and echo it back."""
        if not product_id:
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            data = _read_json(request)
            parsed_id = parse_id(product_id)
            product = _product_from_body(data, parsed_id)
        except (ValueError, DTOError):
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            self.product_db.find_by_id(product_id)
        except _STORE_ERRORS:
            return Response(status=HTTPStatus.NOT_FOUND)
        try:
            self.product_db.update(product)
        except _STORE_ERRORS:
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        return _json_response(product.to_dict(), HTTPStatus.OK)

    def delete_product(self, request: Request, product_id: str) -> Response:
        """Delete a product; answers 404 if it does not exist."""
        if not product_id:
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            self.product_db.find_by_id(product_id)
        except _STORE_ERRORS:
            return Response(status=HTTPStatus.NOT_FOUND)
        try:
            self.product_db.delete(product_id)
        except _STORE_ERRORS:
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        return Response(status=HTTPStatus.OK, content_type="application/json")

    def get_products(self, request: Request) -> Response:
        """List products, honouring the ``page``, ``limit`` and ``sort`` query values."""
        page = _atoi(request.args.get("page", ""))
        limit = _atoi(request.args.get("limit", ""))
        sort = request.args.get("sort", "")
        try:
            products = self.product_db.find_all(page, limit, sort)
        except sqlite3.Error:
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        return _json_response([product.to_dict() for product in products], HTTPStatus.OK)


class UserHandler:
    """Create users and issue access tokens for them."""

    def __init__(self, user_db: _UserRepository, token_auth: TokenAuth, jwt_expires_in: int = 0) -> None:
        self.user_db = user_db
        self.token_auth = token_auth
        self.jwt_expires_in = jwt_expires_in

    def create(self, request: Request) -> Response:
        """Create a user from ``{"name", "email", "password"}``; answers 201."""
        try:
            body = CreateUserInput.from_dict(_read_json(request))
        except (ValueError, DTOError):
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            user = new_user(body.name, body.email, body.password)
        except EntityError as exc:
            return _error_response(str(exc), HTTPStatus.BAD_REQUEST)
        try:
            self.user_db.create(user)
        except sqlite3.Error as exc:
            return _error_response(str(exc), HTTPStatus.INTERNAL_SERVER_ERROR)
        return Response(status=HTTPStatus.CREATED)

    def get_jwt(self, request: Request) -> Response:
        """Check the credentials and answer with a signed access token."""
        try:
            credentials = GetJWTInput.from_dict(_read_json(request))
        except (ValueError, DTOError):
            return Response(status=HTTPStatus.BAD_REQUEST)
        try:
            user = self.user_db.find_by_email(credentials.email)
        except _STORE_ERRORS as exc:
            message = exc.args[0] if isinstance(exc, LookupError) and exc.args else str(exc)
            return _error_response(message, HTTPStatus.NOT_FOUND)
        if not user.validate_password(credentials.password):
            return Response(status=HTTPStatus.UNAUTHORIZED)
        claims = {"sub": str(user.id), "exp": int(time.time()) + self.jwt_expires_in}
        signed = self.token_auth.encode(claims)
        return _json_response(GetJWTOutput(access_token=signed).to_dict(), HTTPStatus.OK)