import uuid

import pytest

from labkit.ids import new_id, parse_id


def test_new_id_round_trip():
    identifier = new_id()
    assert parse_id(str(identifier)) == identifier


def test_new_id_is_random_version():
    assert new_id().version == 4


def test_new_ids_are_unique():
    ids = {new_id() for _ in range(50)}
    assert len(ids) == 50


def test_parse_nil_uuid():
    assert parse_id("00000000-0000-0000-0000-000000000000") == uuid.UUID(int=0)


def test_parse_accepts_urn_form():
    identifier = new_id()
    assert parse_id(identifier.urn) == identifier


@pytest.mark.parametrize("text", ["", "not-a-uuid", "1234", "zzzzzzzz-zzzz-zzzz-zzzz-zzzzzzzzzzzz"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_id(text)


def test_parse_non_string():
    with pytest.raises(ValueError):
        parse_id(None)