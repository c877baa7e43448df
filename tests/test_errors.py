import uuid

import pytest

from wooridb.errors import (
    DuplicatedUniqueError,
    EntityAlreadyCreatedError,
    EntityNotCreatedError,
    FailedMatchConditionError,
    KeyTxTimeNotAllowedError,
    LockDataError,
    QueryFormatError,
    SelectBadRequestError,
    UpdateContentEncryptKeysError,
    UuidNotCreatedForEntityError,
    error_response,
)
from wooridb.types import Kind, Value


def test_select_bad_request():
    status, body = error_response(SelectBadRequestError())
    assert 400 <= status < 500
    assert body == (
        "(\n error_type: \"SelectBadRequest\",\n error_message: \"SELECT expressions "
        "are handled by `/wql/query` endpoint\",\n)"
    )


def test_entity_already_created():
    status, body = error_response(EntityAlreadyCreatedError("test_ok"))
    assert status == 422
    assert body == (
        "(\n error_type: \"EntityAlreadyCreated\",\n error_message: "
        "\"Entity `test_ok` already created\",\n)"
    )


def test_query_format():
    status, body = error_response(QueryFormatError("Symbol `DO` not implemented"))
    assert status == 400
    assert body == (
        "(\n error_type: \"QueryFormat\",\n error_message: "
        "\"\\\"Symbol `DO` not implemented\\\"\",\n)"
    )


def test_duplicated_unique():
    err = DuplicatedUniqueError("test_insert_unique", "id", Value(Kind.INTEGER, 123))
    assert err.to_ron() == (
        "(\n error_type: \"DuplicatedUnique\",\n error_message: \"key `id` in entity "
        "`test_insert_unique` already contains value `Integer(123)`\",\n)"
    )


def test_entity_not_created():
    assert EntityNotCreatedError("missing").to_ron() == (
        "(\n error_type: \"EntityNotCreated\",\n error_message: "
        "\"Entity `missing` not created\",\n)"
    )


def test_uuid_not_created():
    ident = uuid.uuid4()
    assert UuidNotCreatedForEntityError("test_evict_id", ident).to_ron() == (
        "(\n error_type: \"UuidNotCreatedForEntity\",\n error_message: "
        f"\"Uuid {ident} not created for entity test_evict_id\",\n)"
    )


def test_update_content_encrypt_keys():
    assert UpdateContentEncryptKeysError(["pswd"]).to_ron() == (
        "(\n error_type: \"UpdateContentEncryptKeys\",\n error_message: "
        "\"Encrypted keys cannont be updated with UPDATE CONTENT: [\\\"pswd\\\"]\",\n)"
    )


def test_failed_match_condition():
    status, body = error_response(FailedMatchConditionError())
    assert status == 412
    assert body == (
        "(\n error_type: \"FailedMatchCondition\",\n error_message: "
        "\"One or more MATCH CONDITIONS failed\",\n)"
    )


@pytest.mark.parametrize(
    "error, status",
    [(LockDataError(), 503), (KeyTxTimeNotAllowedError(), 400)],
)
def test_statuses(error, status):
    assert error_response(error)[0] == status


def test_entity_not_created_response():
    status, body = error_response(EntityNotCreatedError("x"))
    assert status == 400
    assert body == (
        "(\n error_type: \"EntityNotCreated\",\n error_message: "
        "\"Entity `x` not created\",\n)"
    )