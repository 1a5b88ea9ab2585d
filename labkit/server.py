"""The product API as a WSGI application, and the command that serves it."""

from __future__ import annotations

import argparse
import logging
import sqlite3
from http import HTTPStatus
from typing import Any, Callable, Iterable

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.serving import run_simple
from werkzeug.wrappers import Request, Response

from labkit.config import Config, TokenAuth, TokenError, load_config
from labkit.database import ProductStore, UserStore, migrate
from labkit.handlers import ProductHandler, UserHandler

_log = logging.getLogger(__name__)


def _token_from_request(request: Request) -> str | None:
    bearer = request.headers.get("Authorization", "")
    if len(bearer) > 7 and bearer[:6].upper() == "BEARER":
        return bearer[7:]
    return request.cookies.get("jwt") or None


class ApiApp:
    """Routes requests to the handlers; product routes need a valid bearer token."""

    def __init__(
        self, product_handler: ProductHandler, user_handler: UserHandler, token_auth: TokenAuth
    ) -> None:
        self.product_handler = product_handler
        self.user_handler = user_handler
        self.token_auth = token_auth
        routes = [
            ("/products", "POST", product_handler.create_product, True),
            ("/products", "GET", product_handler.get_products, True),
            ("/products/<product_id>", "GET", product_handler.get_product, True),
            ("/products/<product_id>", "PUT", product_handler.update_product, True),
            ("/products/<product_id>", "DELETE", product_handler.delete_product, True),
            ("/users", "POST", user_handler.create, False),
            ("/users/generate_token", "POST", user_handler.get_jwt, False),
        ]
        self._url_map = Map(
            [Rule(path, methods=[method], endpoint=(view, protected)) for path, method, view, protected in routes]
        )

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        request = Request(environ)
        response = self._dispatch(request)
        _log.info("%s %s %s", request.method, request.path, response.status_code)
        return response(environ, start_response)

    def _dispatch(self, request: Request) -> Response:
        try:
            (view, protected), arguments = self._url_map.bind_to_environ(request.environ).match()
        except HTTPException as exc:
            return exc.get_response(request.environ)
        if protected:
            token = _token_from_request(request)
            try:
                if token is None:
                    raise TokenError("no token found")
                self.token_auth.decode(token)
            except TokenError as exc:
                return Response(f"{exc}\n", status=HTTPStatus.UNAUTHORIZED, mimetype="text/plain")
        return view(request, **arguments)


def create_app(config: Config, connection: sqlite3.Connection) -> ApiApp:
    """Prepare the database and wire stores and handlers into an application."""
    migrate(connection)
    product_handler = ProductHandler(ProductStore(connection))
    user_handler = UserHandler(UserStore(connection), config.token_auth, config.jwt_expires_in)
    return ApiApp(product_handler, user_handler, config.token_auth)


def main(argv: list[str] | None = None) -> int:
    """Serve the product API."""
    parser = argparse.ArgumentParser(description="Serve the product API.")
    parser.add_argument("--config-dir", default=".", help="directory holding the .env file")
    parser.add_argument("--database", default="test.db", help="SQLite database file")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    config = load_config(args.config_dir)
    connection = sqlite3.connect(args.database, check_same_thread=False)
    try:
        run_simple(args.host, args.port, create_app(config, connection))
    finally:
        connection.close()
    return 0