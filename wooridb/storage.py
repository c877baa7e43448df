"""On-disk files of the database: daily logs, archives and state snapshots."""

from __future__ import annotations

import io
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

import zstandard

from wooridb.errors import FailedToParseStateError, StorageIOError
from wooridb.model import DataRegister
from wooridb.ron import RonStruct, from_ron

_UNIQUES = "uniques.log"
_ENCRYPTS = "encrypt.log"
_LOCAL_DATA = "local_data.log"
_UNIQUE_DATA = "unique_data.log"
_OFFSET = "offset_counter.log"
_UNSIGNED = re.compile(r"\+?[0-9]+")
_PARSE_FAILURES = (ValueError, KeyError, TypeError, AttributeError)


class DataDir:
    """The data directory holding the logs and state files."""

    def __init__(self, root="data") -> None:
        self.root = Path(root)

    def _resolve(self, file_name: str) -> Path:
        path = Path(file_name)
        return path if path.is_absolute() else self.root / path.name

    def _daily_log_path(self) -> Path:
        return self.root / datetime.now(timezone.utc).strftime("%Y_%m_%d.log")

    def _append(self, path: Path, log: str) -> int:
        data = log.encode("utf-8")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with path.open("ab") as file:
                file.write(data)
        except OSError as exc:
            raise StorageIOError(exc) from exc
        return len(data)

    def _overwrite(self, name: str, text: str) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with (self.root / name).open("wb") as file:
                file.write(text.encode("utf-8"))
        except OSError as exc:
            raise StorageIOError(exc) from exc

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageIOError(exc) from exc

    @staticmethod
    def _decompress(path: Path) -> str:
        try:
            raw = path.read_bytes()
            decompressor = zstandard.ZstdDecompressor()
            with decompressor.stream_reader(io.BytesIO(raw), read_across_frames=True) as reader:
                data = reader.readall()
        except (OSError, zstandard.ZstdError) as exc:
            raise StorageIOError(exc) from exc
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return ""

    def write_to_log(self, log: str) -> tuple:
        """Append to today's log; returns bytes written and whether it is a new file."""
        path = self._daily_log_path()
        is_empty = not path.exists()
        return self._append(path, log), is_empty

    def write_to_uniques(self, log: str) -> None:
        self._append(self.root / _UNIQUES, log)

    def write_to_encrypts(self, log: str) -> None:
        self._append(self.root / _ENCRYPTS, log)

    def write_local_data(self, log: str) -> None:
        self._overwrite(_LOCAL_DATA, log)

    def write_unique_data(self, log: str) -> None:
        self._overwrite(_UNIQUE_DATA, log)

    def write_offset_counter(self, offset: int) -> None:
        self._overwrite(_OFFSET, str(offset))

    def read_log(self, register: DataRegister) -> str:
        """The text a register points at, from the log or its compressed archive."""
        path = self._resolve(register.file_name)
        try:
            file = path.open("rb")
        except OSError:
            archive = self._resolve(register.file_name.replace(".log", ".zst"))
            text = self._decompress(archive)
            return text[register.offset : register.offset + register.bytes_length]
        try:
            with file:
                file.seek(register.offset)
                data = file.read(register.bytes_length)
            return data.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageIOError(exc) from exc

    def read_date_log(self, date_log: str) -> str:
        """The whole content of a daily log, from the log or its archive."""
        path = self._resolve(date_log)
        try:
            file = path.open("rb")
        except OSError:
            return self._decompress(self._resolve(date_log.replace(".log", ".zst")))
        try:
            with file:
                return file.read().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageIOError(exc) from exc

    def offset(self) -> int:
        """The saved write offset of today's log."""
        text = self._read_text(self.root / _OFFSET)
        if not _UNSIGNED.fullmatch(text):
            raise FailedToParseStateError()
        return int(text)

    def local_data(self) -> dict:
        """Entity name to {id: (register, encoded state)}."""
        text = self._read_text(self.root / _LOCAL_DATA)
        try:
            parsed = from_ron(text)
            context = {}
            for entity, registries in parsed.items():
                entries = {}
                for entity_id, (register, state) in registries.items():
                    if not isinstance(register, RonStruct):
                        raise TypeError("register is not a struct")
                    entries[uuid.UUID(str(entity_id))] = (
                        DataRegister.from_ron_struct(register),
                        bytes(state),
                    )
                context[str(entity)] = dict(sorted(entries.items()))
        except _PARSE_FAILURES as exc:
            raise FailedToParseStateError() from exc
        return dict(sorted(context.items()))

    def unique_data(self) -> dict:
        """Entity name to {unique key: set of values already taken}."""
        text = self._read_text(self.root / _UNIQUE_DATA)
        try:
            parsed = from_ron(text)
            data = {
                str(entity): {str(key): {str(v) for v in values} for key, values in keys.items()}
                for entity, keys in parsed.items()
            }
        except _PARSE_FAILURES as exc:
            raise FailedToParseStateError() from exc
        return dict(sorted(data.items()))

    def encryption(self) -> dict:
        """Entity name to the set of keys it encrypts."""
        text = "[" + self._read_text(self.root / _ENCRYPTS) + "]"
        text = text.replace(")(", "),(")
        try:
            parsed = from_ron(text)
            data = {}
            for record in parsed:
                if not isinstance(record, RonStruct):
                    raise TypeError("encryption record is not a struct")
                data[str(record.fields["entity"])] = {str(k) for k in record.fields["encrypts"]}
        except _PARSE_FAILURES as exc:
            raise FailedToParseStateError() from exc
        return dict(sorted(data.items()))