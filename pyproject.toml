[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "labkit"
version = "0.1.0"
description = "A small product catalogue API with JWT authentication, an event dispatcher, tax rules and a currency quote service"
requires-python = ">=3.10"
keywords = ["wsgi", "rest", "jwt", "sqlite", "events", "products", "currency"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Typing :: Typed",
]
dependencies = [
    "bcrypt>=4.0",
    "pyjwt>=2.6",
    "werkzeug>=2.3",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
labkit-api = "labkit.server:main"
labkit-quote-server = "labkit.quotes:server_main"
labkit-quote-client = "labkit.quotes:client_main"

[tool.hatch.build.targets.wheel]
packages = ["labkit"]

[tool.hatch.build.targets.sdist]
include = ["labkit", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
