import pytest

from labkit.dto import (
    CreateProductInput,
    CreateUserInput,
    DTOError,
    GetJWTInput,
    GetJWTOutput,
)


def test_create_product_input_from_dict():
    result = CreateProductInput.from_dict({"name": "Product 1", "price": 10})
    assert result == CreateProductInput(name="Product 1", price=10.0)
    assert isinstance(result.price, float)


def test_create_product_input_missing_fields_take_zero_values():
    assert CreateProductInput.from_dict({}) == CreateProductInput(name="", price=0.0)


def test_create_product_input_null_is_zero_value():
    assert CreateProductInput.from_dict({"name": None, "price": None}) == CreateProductInput()


def test_create_product_input_ignores_unknown_fields():
    result = CreateProductInput.from_dict({"name": "Product 1", "price": 2.5, "extra": 1})
    assert result.name == "Product 1"
    assert result.price == 2.5


@pytest.mark.parametrize(
    "body",
    [{"name": 5}, {"price": "10"}, {"price": True}, [], "text", None],
)
def test_create_product_input_rejects_bad_bodies(body):
    with pytest.raises(DTOError):
        CreateProductInput.from_dict(body)


def test_create_user_input_from_dict():
    password = "password"
    body = {"name": "John", "email": "john@example.com", "password": password}
    result = CreateUserInput.from_dict(body)
    assert result.name == "John"
    assert result.email == "john@example.com"
    assert result.password == password


def test_create_user_input_rejects_non_string_email():
    with pytest.raises(DTOError):
        CreateUserInput.from_dict({"email": 1})


def test_get_jwt_input_from_dict():
    password = "password"
    result = GetJWTInput.from_dict({"email": "john@example.com", "password": password})
    assert result == GetJWTInput(email="john@example.com", password=password)


def test_get_jwt_input_missing_fields():
    assert GetJWTInput.from_dict({}) == GetJWTInput(email="", password="")


def test_get_jwt_input_rejects_list():
    with pytest.raises(DTOError):
        GetJWTInput.from_dict(["john@example.com"])


def test_get_jwt_output_to_dict():
    assert GetJWTOutput(access_token="token").to_dict() == {"access_token": "token"}