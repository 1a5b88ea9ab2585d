"""Dollar-to-real exchange quotes: fetch, serve, store and save to a file."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
import threading
import time
import urllib.error
import urllib.request
from dataclasses import astuple, dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from werkzeug.serving import run_simple
from werkzeug.wrappers import Request, Response

_log = logging.getLogger(__name__)

_ROOT_KEY = "USDBRL"
_JSON_KEYS = {"var_bid": "varBid", "pct_change": "pctChange"}

_FETCH_TIMEOUT = 0.2
_DB_TIMEOUT = 0.010
_CLIENT_TIMEOUT = 0.5

_SCHEMA = """
CREATE TABLE IF NOT EXISTS usdbrl (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT, codein TEXT, name TEXT, high TEXT, low TEXT, varBid TEXT,
    pctChange TEXT, bid TEXT, ask TEXT, timestamp TEXT, createDate TEXT
);
"""

_INSERT = (
    "INSERT INTO usdbrl (code, codein, name, high, low, varBid, pctChange, bid, ask, "
    "timestamp, createDate) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)


class QuoteError(Exception):
    """Raised when a quote cannot be fetched, decoded or stored."""


@dataclass
class Quote:
    """One USD/BRL quote; every value is kept as the text the source sent."""

    code: str = ""
    codein: str = ""
    name: str = ""
    high: str = ""
    low: str = ""
    var_bid: str = ""
    pct_change: str = ""
    bid: str = ""
    ask: str = ""
    timestamp: str = ""
    create_date: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Quote":
        """Build from a decoded ``{"USDBRL": {...}}`` document; missing values are empty."""
        if not isinstance(data, Mapping):
            raise QuoteError("quote document must be a JSON object")
        inner = data.get(_ROOT_KEY)
        if inner is None:
            return cls()
        if not isinstance(inner, Mapping):
            raise QuoteError(f"{_ROOT_KEY} must be a JSON object")
        values: dict[str, str] = {}
        for attribute in cls.__dataclass_fields__:
            key = _JSON_KEYS.get(attribute, attribute)
            value = inner.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise QuoteError(f"field {key!r} must be a string")
            values[attribute] = value
        return cls(**values)

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Return the quote in the same shape it is received in."""
        return {
            _ROOT_KEY: {
                _JSON_KEYS.get(attribute, attribute): getattr(self, attribute)
                for attribute in self.__dataclass_fields__
            }
        }


def init_db(path: str | Path = "./requests.db") -> sqlite3.Connection:
    """Open the quote database, retrying a few times, and create its table."""
    for attempt in range(5):
        try:
            connection = sqlite3.connect(str(path), check_same_thread=False)
            connection.execute("SELECT 1")
            break
        except sqlite3.Error as exc:
            _log.info("trying to connect to the database...")
            if attempt == 4:
                raise QuoteError(f"could not connect to the database: {exc}") from exc
            time.sleep(2.0)
    try:
        connection.executescript(_SCHEMA)
        connection.commit()
    except sqlite3.Error as exc:
        connection.close()
        raise QuoteError(str(exc)) from exc
    _log.info("database connection established")
    return connection


def persist_quote(connection: sqlite3.Connection, quote: Quote) -> None:
    """Insert ``quote`` as a new row of the ``usdbrl`` table."""
    try:
        with connection:
            connection.execute(_INSERT, astuple(quote))
    except sqlite3.Error as exc:
        _log.info("failed to save the quote: %s", exc)
        raise QuoteError(str(exc)) from exc
    _log.info("quote saved")


def _get(url: str, timeout: float) -> bytes:
    """Return the body of a GET on ``url`` whatever its status."""
    try:
        with urllib.request.urlopen(urllib.request.Request(url), timeout=timeout) as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.read()
    except (OSError, ValueError) as exc:
        raise QuoteError(f"request failed: {exc}") from exc


def _decode(body: bytes) -> Quote:
    try:
        return Quote.from_dict(json.loads(body.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise QuoteError(f"invalid quote document: {exc}") from exc


def fetch_quote(url: str, timeout: float = _FETCH_TIMEOUT) -> Quote:
    """Fetch and decode the current quote from ``url``."""
    _log.info("starting request")
    body = _get(url, timeout)
    _log.info("request complete")
    return _decode(body)


class _QuoteApp:
    """Answers ``/cotacao`` with a freshly fetched quote and records it."""

    def __init__(self, connection: sqlite3.Connection, fetcher: Callable[[], Quote]) -> None:
        self.connection = connection
        self.fetcher = fetcher
        self._lock = threading.Lock()

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if Request(environ).path != "/cotacao":
            response = Response("404 page not found\n", status=HTTPStatus.NOT_FOUND, mimetype="text/plain")
        else:
            response = self._quote()
        return response(environ, start_response)

    def _quote(self) -> Response:
        try:
            quote = self.fetcher()
        except Exception as exc:  # any failure to obtain a quote is a server error
            _log.info("failed to fetch the quote: %s", exc)
            return Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)

        deadline = time.monotonic() + _DB_TIMEOUT
        with self._lock:
            if time.monotonic() > deadline:
                _log.info("database timeout")
                return Response(
                    "timeout while saving to the database\n",
                    status=HTTPStatus.REQUEST_TIMEOUT,
                    mimetype="text/plain",
                )
            # Abort the statement once the deadline has passed.
            self.connection.set_progress_handler(lambda: int(time.monotonic() > deadline), 100)
            try:
                persist_quote(self.connection, quote)
            except QuoteError:
                return Response(
                    "failed to save to the database\n",
                    status=HTTPStatus.INTERNAL_SERVER_ERROR,
                    mimetype="text/plain",
                )
            finally:
                self.connection.set_progress_handler(None, 100)
        return Response(
            json.dumps(quote.to_dict(), ensure_ascii=False) + "\n",
            status=HTTPStatus.OK,
            mimetype="application/json",
        )


def create_quote_app(connection: sqlite3.Connection, fetcher: Callable[[], Quote]) -> _QuoteApp:
    """Return a WSGI application serving quotes from ``fetcher`` and storing them."""
    return _QuoteApp(connection, fetcher)


def fetch_and_store(
    url: str = "http://localhost:8080/cotacao",
    output: str | Path = "cotacao.txt",
    timeout: float = _CLIENT_TIMEOUT,
) -> Quote:
    """Fetch a quote from the quote server, echo it and save it indented to ``output``."""
    body = _get(url, timeout)
    sys.stdout.write(body.decode("utf-8", errors="replace"))
    sys.stdout.flush()
    with open(output, "w", encoding="utf-8") as handle:
        quote = _decode(body)
        handle.write(json.dumps(quote.to_dict(), indent=1, ensure_ascii=False))
    _log.info("quote saved to %s", output)
    return quote


def server_main(argv: list[str] | None = None) -> int:
    """Serve ``/cotacao``, fetching each quote from the configured source."""
    parser = argparse.ArgumentParser(description="Serve USD/BRL quotes.")
    parser.add_argument("--source-url", required=True, help="URL the quotes are fetched from")
    parser.add_argument("--database", default="./requests.db", help="SQLite database file")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    print("Starting the server...")
    connection = init_db(args.database)
    try:
        app = create_quote_app(connection, lambda: fetch_quote(args.source_url, _FETCH_TIMEOUT))
        _log.info("server listening on port %d", args.port)
        run_simple(args.host, args.port, app)
    finally:
        connection.close()
    return 0


def client_main(argv: list[str] | None = None) -> int:
    """Ask the quote server for a quote and save it to a file."""
    parser = argparse.ArgumentParser(description="Fetch a USD/BRL quote and save it.")
    parser.add_argument("--url", default="http://localhost:8080/cotacao")
    parser.add_argument("--output", default="cotacao.txt")
    parser.add_argument("--timeout", type=float, default=_CLIENT_TIMEOUT)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    print("Starting the client...")
    fetch_and_store(args.url, args.output, args.timeout)
    return 0