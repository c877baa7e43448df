# wooridb

The storage and query core of a time-travel document database. Every
transaction becomes a line in an append-only, date-stamped log file. Registers
record where the latest state of each entity record sits in those logs.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `wooridb.types` holds the values a record can hold: `Value`, a `Kind`
  together with its data. `Value.is_hash()` tells hashed values apart, and
  `Value.default_value()` gives the neutral value of a kind. The module also
  holds the log actions (`Action`, and `parse_action`, which maps unknown names
  to `Action.ERROR`). The argument records `InsertArgs`, `UpdateArgs` and
  `MatchUpdateArgs` live here too.
- `wooridb.ron` is a small serializer and parser for the RON notation
  (`to_ron(value, pretty=False)`, `from_ron(text)`, `RonStruct`). Log lines and
  response bodies use this notation. Bad input raises `RonParseError`.
- `wooridb.errors` holds the `WooriError` hierarchy, for example
  `EntityNotCreatedError`, `DuplicatedUniqueError` and
  `KeyTxTimeNotAllowedError`. Each error has an `error_type` and an HTTP
  `status`. `WooriError.to_ron()` renders the body sent to clients, and
  `error_response(error)` returns `(status, body)`.
- `wooridb.model` holds `DataRegister`, which points at a slice of a log file
  by file name, offset and length, and `SessionInfo`, with `is_valid_role` and
  `is_valid_date`. `tx_time(content)` returns the current UTC time. It raises
  `KeyTxTimeNotAllowedError` if the content sets `tx_time` itself.
- `wooridb.logs` builds log lines for entity creation, insert, UPDATE SET,
  UPDATE CONTENT, delete and eviction. `update_content_state(state, key, value)`
  folds an UPDATE CONTENT value into a state in place. Numbers are added,
  strings concatenated, vectors appended and maps merged. Hashes are left
  alone. Any other kind replaces the old value.
- `wooridb.storage.DataDir(root="data")` reads and writes the files of a data
  directory:
  - the daily log `YYYY_MM_DD.log`;
  - `uniques.log` and `encrypt.log`;
  - the snapshots `local_data.log` and `unique_data.log`;
  - `offset_counter.log`.

  `read_log` and `read_date_log` fall back to the zstd-compressed `.zst`
  archive when the `.log` file is gone. Failures raise `StorageIOError` or
  `FailedToParseStateError`.
- `wooridb.query` shapes query results.
  - The `functions` mapping takes the keys `"LIMIT"`, `"OFFSET"`, `"COUNT"`,
    `"DEDUP"`, `"GROUP"` and `"ORDER"`, with the values `Limit`, `Offset`,
    `Count`, `Dedup`, `GroupBy` and `OrderBy`.
  - The functions are `get_limit_offset_count`, `registries_to_states`,
    `filter_keys_and_hash`, `dedup_states`, `dedup_option_states`,
    `get_result_after_manipulation` and
    `get_result_after_manipulation_for_options`.
  - Counted results come back as a `CountResponse`.
  - `get_registries(entity, local_data)` raises `EntityNotCreatedError` for an
    unknown entity.
- `wooridb.relation` provides `intersect`, `difference` and `union` of two
  record states. They compare by key (`RelationType.KEY`) or by key and value
  (`RelationType.KEY_VALUE`). Inputs that are not mappings raise
  `InvalidQueryError`.

## Example

```python
from wooridb.logs import create_entity
from wooridb.storage import DataDir

data = DataDir("data")
written, is_new_file = data.write_to_log(create_entity("users"))
data.write_offset_counter(written)
assert data.offset() == written
```

Relations between two record states:

```python
from wooridb.relation import RelationType, union
from wooridb.types import Kind, Value

a = {"a": Value(Kind.INTEGER, 123), "b": Value(Kind.INTEGER, 234)}
b = {"a": Value(Kind.INTEGER, 123), "b": Value(Kind.INTEGER, 432)}
merged = union(a, b, RelationType.KEY_VALUE)
# merged holds "a", "b" and "b:duplicated" (Integer(432))
```

## What this package does not do

This is a library of building blocks. It has no HTTP server and no command to
start one. It has no parser for the WQL query language, and it does not carry
out transactions or queries end to end. It does not encrypt values and does not
enforce unique keys. Callers combine the log builders, `DataDir`, the query
helpers and the relations themselves.