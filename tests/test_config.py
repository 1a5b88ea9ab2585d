import time

import jwt
import pytest

from labkit.config import Config, TokenAuth, TokenError, load_config

_ENV_KEYS = [
    "DB_DRIVER",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "WEB_SERVER_PORT",
    "JWT_SECRET",
    "JWT_EXPIRESIN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_env(directory, lines):
    (directory / ".env").write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_load_config_reads_env_file(tmp_path):
    _write_env(
        tmp_path,
        [
            "DB_DRIVER=mysql",
            "DB_HOST=localhost",
            "DB_PORT=3306",
            "DB_USER=root",
            "DB_PASSWORD=password",
            "DB_NAME=goexpert",
            "WEB_SERVER_PORT=8000",
            "JWT_SECRET=secret",
            "JWT_EXPIRESIN=300",
        ],
    )
    cfg = load_config(tmp_path)
    assert cfg.db_driver == "mysql"
    assert cfg.db_host == "localhost"
    assert cfg.db_port == "3306"
    assert cfg.db_user == "root"
    assert cfg.db_name == "goexpert"
    assert cfg.web_server_port == "8000"
    assert cfg.jwt_expires_in == 300


def test_environment_overrides_file(tmp_path, monkeypatch):
    _write_env(tmp_path, ["DB_HOST=localhost", "JWT_EXPIRESIN=300"])
    monkeypatch.setenv("DB_HOST", "db.example.com")
    monkeypatch.setenv("JWT_EXPIRESIN", "60")
    cfg = load_config(tmp_path)
    assert cfg.db_host == "db.example.com"
    assert cfg.jwt_expires_in == 60


def test_missing_keys_take_zero_values(tmp_path):
    _write_env(tmp_path, ["DB_HOST=localhost"])
    cfg = load_config(tmp_path)
    assert cfg.db_port == ""
    assert cfg.jwt_expires_in == 0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path)


def test_bad_expiry_raises(tmp_path):
    _write_env(tmp_path, ["JWT_EXPIRESIN=soon"])
    with pytest.raises(ValueError, match="JWT_EXPIRESIN"):
        load_config(tmp_path)


def test_config_token_auth_uses_secret(tmp_path):
    _write_env(tmp_path, ["JWT_SECRET=secret", "JWT_EXPIRESIN=300"])
    cfg = load_config(tmp_path)
    token_string = cfg.token_auth.encode({"sub": "abc"})
    assert TokenAuth("secret").decode(token_string) == {"sub": "abc"}


def test_token_uses_hs256():
    auth = Config(jwt_secret="secret").token_auth
    token_string = auth.encode({"sub": "abc"})
    assert jwt.get_unverified_header(token_string)["alg"] == "HS256"


def test_token_round_trip_with_expiry():
    auth = TokenAuth("secret")
    expires = int(time.time()) + 300
    claims = auth.decode(auth.encode({"sub": "abc", "exp": expires}))
    assert claims == {"sub": "abc", "exp": expires}


def test_expired_token_is_rejected():
    auth = TokenAuth("secret")
    token_string = auth.encode({"sub": "abc", "exp": int(time.time()) - 10})
    with pytest.raises(TokenError):
        auth.decode(token_string)


def test_token_signed_with_other_secret_is_rejected():
    token_string = TokenAuth("secret").encode({"sub": "abc"})
    with pytest.raises(TokenError):
        TokenAuth("placeholder").decode(token_string)


def test_garbage_token_is_rejected():
    with pytest.raises(TokenError):
        TokenAuth("secret").decode("not-a-jwt")