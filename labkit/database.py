"""SQLite-backed storage for products and users."""

from __future__ import annotations

import sqlite3
from datetime import datetime

from labkit.entities import Product, User
from labkit.ids import parse_id

_SCHEMA = """
CREATE TABLE IF NOT EXISTS products (id TEXT PRIMARY KEY, name TEXT, price REAL, created_at TEXT);
CREATE TABLE IF NOT EXISTS users (id TEXT PRIMARY KEY, name TEXT, email TEXT, password TEXT);
"""

_PRODUCT_COLUMNS = "SELECT id, name, price, created_at FROM products"


class RecordNotFoundError(LookupError):
    """Raised when a lookup matches no stored record."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


def migrate(connection: sqlite3.Connection) -> None:
    """Create the product and user tables if they do not exist yet."""
    connection.executescript(_SCHEMA)
    connection.commit()


def _product(row: tuple) -> Product:
    product_id, name, price, created_at = row
    return Product(parse_id(product_id), name, float(price), datetime.fromisoformat(created_at))


class ProductStore:
    """Stores products in the ``products`` table."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, product: Product) -> None:
        with self._connection:
            self._connection.execute(
                "INSERT INTO products (id, name, price, created_at) VALUES (?, ?, ?, ?)",
                (str(product.id), product.name, float(product.price), product.created_at.isoformat()),
            )

    def find_all(self, page: int = 0, limit: int = 0, sort: str = "") -> list[Product]:
        """Products by creation time; one page if ``page`` and ``limit`` are both non-zero."""
        direction = "DESC" if sort == "desc" else "ASC"
        query = f"{_PRODUCT_COLUMNS} ORDER BY created_at {direction}, rowid {direction}"
        params: tuple = ()
        if page != 0 and limit != 0:
            query += " LIMIT ? OFFSET ?"
            params = (limit, max(0, (page - 1) * limit))
        return [_product(row) for row in self._connection.execute(query, params)]

    def find_by_id(self, product_id: str) -> Product:
        row = self._connection.execute(
            f"{_PRODUCT_COLUMNS} WHERE id = ? LIMIT 1", (str(product_id),)
        ).fetchone()
        if row is None:
            raise RecordNotFoundError()
        return _product(row)

    def update(self, product: Product) -> None:
        """Overwrite a stored product; it must already exist."""
        self.find_by_id(str(product.id))
        with self._connection:
            self._connection.execute(
                "UPDATE products SET name = ?, price = ?, created_at = ? WHERE id = ?",
                (product.name, float(product.price), product.created_at.isoformat(), str(product.id)),
            )

    def delete(self, product_id: str) -> None:
        """Delete a stored product; it must already exist."""
        product = self.find_by_id(product_id)
        with self._connection:
            self._connection.execute("DELETE FROM products WHERE id = ?", (str(product.id),))


class UserStore:
    """Stores users in the ``users`` table."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, user: User) -> None:
        with self._connection:
            self._connection.execute(
                "INSERT INTO users (id, name, email, password) VALUES (?, ?, ?, ?)",
                (str(user.id), user.name, user.email, user.password),
            )

    def find_by_email(self, email: str) -> User:
        row = self._connection.execute(
            "SELECT id, name, email, password FROM users WHERE email = ? ORDER BY rowid LIMIT 1",
            (email,),
        ).fetchone()
        if row is None:
            raise RecordNotFoundError()
        user_id, name, found_email, password_hash = row
        return User(parse_id(user_id), name, found_email, password_hash)