"""Registry records, sessions and transaction timing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from wooridb.errors import KeyTxTimeNotAllowedError
from wooridb.ron import RonStruct


@dataclass
class DataRegister:
    """Where a log entry lives: file, byte offset and length."""

    file_name: str
    offset: int
    bytes_length: int

    def log_file_name(self) -> str:
        """The plain log file name, even if the register names an archive."""
        if self.file_name.endswith(".zst"):
            return self.file_name[: -len(".zst")] + ".log"
        return self.file_name

    def archive_file_name(self) -> str:
        """The compressed archive that replaces the log once it is packed."""
        return self.file_name.replace(".log", ".zst")

    @staticmethod
    def daily_log_name(moment: datetime) -> str:
        return moment.strftime("data/%Y_%m_%d.log")

    def as_ron(self) -> RonStruct:
        return RonStruct(
            None,
            {"file_name": self.file_name, "offset": self.offset, "bytes_length": self.bytes_length},
        )

    @classmethod
    def from_ron_struct(cls, struct: RonStruct) -> DataRegister:
        fields = struct.fields
        return cls(str(fields["file_name"]), int(fields["offset"]), int(fields["bytes_length"]))


@dataclass
class SessionInfo:
    """A user session: when it expires and which roles it holds."""

    expiration: datetime
    roles: list[Any] = field(default_factory=list)

    def is_valid_role(self, roles) -> bool:
        return any(role in self.roles for role in roles)

    def is_valid_date(self) -> bool:
        return self.expiration > datetime.now(timezone.utc)


def tx_time(content: dict[str, Any]) -> datetime:
    """The transaction time; content may not set `tx_time` itself."""
    if "tx_time" in content:
        raise KeyTxTimeNotAllowedError()
    return datetime.now(timezone.utc)