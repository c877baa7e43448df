"""Errors raised by the database and their HTTP rendering."""

from __future__ import annotations

import uuid

from wooridb.ron import RonStruct, to_ron
from wooridb.types import Value, quote


def _debug_list(items: list[str]) -> str:
    return "[" + ", ".join(quote(item) for item in items) + "]"


class WooriError(Exception):
    """Base error; carries an error type, a message and an HTTP status."""

    error_type = "Unknown"
    status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_ron(self) -> str:
        """The error as the pretty RON body sent to clients."""
        body = RonStruct(None, {"error_type": self.error_type, "error_message": self.message})
        return to_ron(body, pretty=True)

    def __str__(self) -> str:
        return self.to_ron()


class StorageIOError(WooriError):
    error_type = "IO"
    status = 500

    def __init__(self, cause: object) -> None:
        super().__init__(repr(cause))
        self.cause = cause


class QueryFormatError(WooriError):
    error_type = "QueryFormat"
    status = 400

    def __init__(self, detail: str) -> None:
        super().__init__(quote(detail))
        self.detail = detail


class InvalidQueryError(WooriError):
    error_type = "InvalidQuery"
    status = 400

    def __init__(self) -> None:
        super().__init__(
            "Only single value queries are allowed, so key `ID` is required "
            "and keys `WHEN AT` are optional"
        )


class EntityAlreadyCreatedError(WooriError):
    error_type = "EntityAlreadyCreated"
    status = 422

    def __init__(self, entity: str) -> None:
        super().__init__(f"Entity `{entity}` already created")
        self.entity = entity


class EntityNotCreatedError(WooriError):
    error_type = "EntityNotCreated"
    status = 400

    def __init__(self, entity: str) -> None:
        super().__init__(f"Entity `{entity}` not created")
        self.entity = entity


class UuidNotCreatedForEntityError(WooriError):
    error_type = "UuidNotCreatedForEntity"
    status = 400

    def __init__(self, entity: str, entity_id: uuid.UUID) -> None:
        super().__init__(f"Uuid {entity_id} not created for entity {entity}")
        self.entity = entity
        self.entity_id = entity_id


class FailedToParseStateError(WooriError):
    error_type = "FailedToParseState"
    status = 500

    def __init__(self) -> None:
        super().__init__("Failed to parse state")


class DuplicatedUniqueError(WooriError):
    error_type = "DuplicatedUnique"
    status = 400

    def __init__(self, entity: str, key: str, value: Value) -> None:
        super().__init__(f"key `{key}` in entity `{entity}` already contains value `{value}`")
        self.entity = entity
        self.key = key
        self.value = value


class FailedMatchConditionError(WooriError):
    error_type = "FailedMatchCondition"
    status = 412

    def __init__(self) -> None:
        super().__init__("One or more MATCH CONDITIONS failed")


class SelectBadRequestError(WooriError):
    error_type = "SelectBadRequest"
    status = 405

    def __init__(self) -> None:
        super().__init__("SELECT expressions are handled by `/wql/query` endpoint")


class NonSelectQueryError(WooriError):
    error_type = "NonSelectQuery"
    status = 405

    def __init__(self) -> None:
        super().__init__("Non-SELECT expressions are handled by `/wql/tx` endpoint")


class LockDataError(WooriError):
    error_type = "LockData"
    status = 503

    def __init__(self) -> None:
        super().__init__("System was not able to get a lock on data")


class KeyTxTimeNotAllowedError(WooriError):
    error_type = "KeyTxTimeNotAllowed"
    status = 400

    def __init__(self) -> None:
        super().__init__("Key `tx_time` is not allowed")


class UpdateContentEncryptKeysError(WooriError):
    error_type = "UpdateContentEncryptKeys"
    status = 400

    def __init__(self, keys: list[str]) -> None:
        super().__init__(
            f"Encrypted keys cannont be updated with UPDATE CONTENT: {_debug_list(keys)}"
        )
        self.keys = list(keys)


class CheckNonEncryptedKeysError(WooriError):
    error_type = "CheckNonEncryptedKeys"
    status = 400

    def __init__(self, keys: list[str]) -> None:
        super().__init__(f"CHECK can only verify encrypted keys: {_debug_list(keys)}")
        self.keys = list(keys)


def error_response(error: WooriError) -> tuple[int, str]:
    """The HTTP status and body for an error."""
    return error.status, error.to_ron()