# labkit

A collection of small, self-contained services and building blocks:

- **A product catalogue API** (`labkit.server`, `labkit.handlers`,
  `labkit.database`): a WSGI application backed by SQLite, with user
  sign-up, JWT login and token-protected CRUD endpoints for products.
- **A currency quote service** (`labkit.quotes`): a server that fetches the
  current USD/BRL quote from a URL you give it, stores it in SQLite and
  serves it as JSON, and a client that fetches it from that server and
  saves it to a file.
- **An event dispatcher** (`labkit.events`): register handlers under event
  names and dispatch events to all of them concurrently.
- **Tax rules** (`labkit.tax`): tiered tax calculation with an optional
  repository to hand the result to.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## The product API

### Configuration

`labkit.config.load_config(path)` reads the `.env` file in the directory
`path` (it raises `FileNotFoundError` if there is none). Environment
variables of the same names override the file's values:

```
DB_DRIVER=sqlite
DB_HOST=localhost
DB_PORT=3306
DB_USER=root
DB_PASSWORD=password
DB_NAME=products
WEB_SERVER_PORT=8000
JWT_SECRET=secret
JWT_EXPIRESIN=300
```

The result is a `Config` dataclass. `JWT_SECRET` signs the access tokens
(HS256, through `Config.token_auth`, a `TokenAuth`) and `JWT_EXPIRESIN` sets
their lifetime in seconds; a value that is not an integer raises
`ValueError`.

### Running

```
labkit-api
```

serves the API on port 8000. Options:

- `--config-dir` – directory holding the `.env` file (default `.`)
- `--database` – SQLite database file (default `test.db`)
- `--host` – address to listen on (default `0.0.0.0`)
- `--port` – port to listen on (default `8000`)

Each request is logged with its method, path and status.

### Endpoints

| Method | Path                    | Auth   | Description                             |
|--------|-------------------------|--------|-----------------------------------------|
| POST   | `/users`                | none   | Create a user                           |
| POST   | `/users/generate_token` | none   | Exchange e-mail and password for a JWT  |
| POST   | `/products`             | Bearer | Create a product                        |
| GET    | `/products`             | Bearer | List products (`page`, `limit`, `sort`) |
| GET    | `/products/{id}`        | Bearer | Fetch one product                       |
| PUT    | `/products/{id}`        | Bearer | Update a product                        |
| DELETE | `/products/{id}`        | Bearer | Delete a product                        |

Product routes take the token from an `Authorization: Bearer ...` header,
or else from a `jwt` cookie; a missing, badly signed or expired token is
answered with 401.

A typical session:

```
POST /users
{"name": "Ana", "email": "ana@example.com", "password": "password"}
-> 201 Created

POST /users/generate_token
{"email": "ana@example.com", "password": "password"}
-> 200 {"access_token": "..."}

POST /products
Authorization: Bearer token
{"name": "Notebook", "price": 1200.0}
-> 201 Created
```

Responses in detail:

- `POST /products` answers 400 for a body that is not valid JSON or gives
  an invalid product (empty name, zero or negative price).
- `GET /products/{id}` answers the product as
  `{"id", "name", "price", "created_at"}`, or 404.
- `PUT /products/{id}` replaces the stored product with the body, keeping
  the id from the path, and echoes the result; 400 for a malformed body or
  id, 404 if there is no such product.
- `DELETE /products/{id}` answers 200 with an empty body, or 404.
- `GET /products` lists products by creation time; `sort=desc` reverses
  the order (anything else sorts ascending), and `page` together with
  `limit` selects one page. Values that are not integers count as 0, which
  means no paging.
- `POST /users/generate_token` answers 404 with `{"message": ...}` for an
  unknown e-mail and 401 for a wrong password.

### Using it in your own WSGI server

```python
import sqlite3

from labkit.config import load_config
from labkit.server import create_app

config = load_config(".")
connection = sqlite3.connect("products.db", check_same_thread=False)
app = create_app(config, connection)
```

`create_app` creates the tables it needs (`labkit.database.migrate`) and
returns an `ApiApp`, an ordinary WSGI callable.

### Storage

`labkit.database.ProductStore` and `UserStore` wrap an `sqlite3`
connection. Lookups that match nothing, and updates or deletes of products
that do not exist, raise `RecordNotFoundError`.

### Entities

```python
from labkit.entities import new_product, new_user, InvalidPriceError

product = new_product("Notebook", 10.0)
product.validate()

try:
    new_product("Notebook", -10.0)
except InvalidPriceError:
    ...

password = "password"
user = new_user("Ana", "ana@example.com", password)
user.validate_password(password)   # True
```

Validation errors are subclasses of `EntityError`: `IDRequiredError`,
`InvalidIDError`, `NameRequiredError`, `PriceRequiredError` and
`InvalidPriceError`. Passwords are stored as bcrypt hashes, never in plain
text; a password longer than 72 bytes raises `EntityError`. Identifiers
are random UUIDs from `labkit.ids.new_id`, and `labkit.ids.parse_id`
raises `ValueError` for text that is not one.

Request bodies are parsed by the dataclasses in `labkit.dto`
(`CreateProductInput`, `CreateUserInput`, `GetJWTInput`); a body of the
wrong shape raises `DTOError`.

### What the API does not do

- It always stores its data in the SQLite file given by `--database`. The
  `DB_*` settings are read into `Config` but not used to choose or reach
  a database.
- It serves no API documentation pages.

## The currency quote service

```
labkit-quote-server --source-url URL
```

starts a server on port 8080 whose `/cotacao` endpoint fetches a quote
from `URL`, records it in a SQLite database and returns it as JSON. The
server has no built-in source: `--source-url` is required and must answer
with a document of the form `{"USDBRL": {"code": ..., "bid": ..., ...}}`.
Other options: `--database` (default `./requests.db`), `--host` (default
`0.0.0.0`) and `--port` (default `8080`).

Fetching the quote has a 0.2 second timeout; a failure gives a 500
response. Saving it runs under a 10 millisecond deadline; missing it gives
408 (or 500 if the statement was cut short). Any other path answers 404.

```
labkit-quote-client
```

asks that server for the quote, prints the response body and saves the
quote, indented, to a text file. Options: `--url` (default
`http://localhost:8080/cotacao`), `--output` (default `cotacao.txt`) and
`--timeout` in seconds (default `0.5`).

The same pieces are available as functions: `fetch_quote(url, timeout)`,
`init_db(path)`, `persist_quote(connection, quote)`,
`create_quote_app(connection, fetcher)` and
`fetch_and_store(url, output, timeout)`. Quotes are `Quote` dataclasses
(`Quote.from_dict`, `Quote.to_dict`); failures raise `QuoteError`.

## Events

```python
from labkit.events import Event, EventDispatcher, EventHandler

class PrintHandler(EventHandler):
    def handle(self, event):
        print(event.name, event.payload)

dispatcher = EventDispatcher()
handler = PrintHandler()
dispatcher.register("order.created", handler)
dispatcher.has("order.created", handler)    # True
dispatcher.dispatch(Event("order.created", {"id": 1}))
```

Registering the same handler twice under one name raises
`HandlerAlreadyRegisteredError`. All handlers for an event run
concurrently in threads, and `dispatch` returns once every one has
finished; an exception from a handler is raised from `dispatch`.
`remove` drops one handler (unknown ones are ignored), `handlers_for`
returns a copy of the handlers for a name in registration order, and
`clear` forgets them all.

## Tax rules

```python
from labkit.tax import calculate_tax, calculate_tax_checked, InvalidAmountError

calculate_tax(500.0)     # 5.0
calculate_tax(1000.0)    # 10.0
calculate_tax(20000.0)   # 20.0
calculate_tax(0)         # 0.0

calculate_tax_checked(0) # raises InvalidAmountError
```

`calculate_tax_slow` is a slower two-bracket variant meant for
benchmarking. `calculate_tax_and_save(amount, repository)` computes the
tax with `calculate_tax` and hands it to the repository's `save_tax`;
any object with that method satisfies the `TaxRepository` protocol.