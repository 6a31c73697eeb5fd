# kvtoolkit

Building blocks for key-value store tooling. The package is pure Python
and has no runtime dependencies.

## Modules

- `kvtoolkit.hashstring`
  - `HashString` is an immutable string key. It carries a precomputed
    64-bit SDBM hash (`hash_value`) and its UTF-8 byte length (`len()`).
  - Two `HashString` objects are compared by hash first, then by content.
  - `sdbm_hash(value)` hashes a `str` (as UTF-8) or `bytes`.
- `kvtoolkit.hashtables`: string-keyed tables that share the
  `StringHashtable` interface:
  - `get(key)`
  - `insert(key, value)`
  - `update(key, value)`
  - `remove(key)`
  - `entries(key=None, n=None)`
  - `len()`

  `get`, `update` and `remove` return `None` when the key is missing.
  `insert` returns `False` when the key is `None` or already present.
  `entries` returns up to `n` `(key, value)` pairs in table order. It
  starts at `key`, or at the beginning when no key is given.

  The tables are:
  - `StlHashtable`: a plain, unsynchronised table.
  - `LockStlHashtable`: the same table, with every operation holding one
    lock.
  - `RandHashtable`: a reader/writer-locked table. Only `entries` takes
    the exclusive lock.
  - `ScanHashtable`: a reader/writer-locked table. `update` and `remove`
    take the exclusive lock, and scans share the lock.
- `kvtoolkit.reader`: `ReplyReader` is an incremental parser for RESP2
  replies.
  - `feed(data)` appends bytes to the reader's input.
  - `get_reply()` returns the next complete `Reply`, or `None` when more
    input is needed.
  - Replies are built by a `ReplyFactory`. With `factory=None`, each
    reply is reported as its `ReplyType` only.
  - Malformed input raises `ReaderError`, which has an `ErrorKind` in
    `kind`. This happens for an unknown type byte and for nesting deeper
    than 7 levels. After such an error, every later call raises the same
    error again.
  - `describe_byte` renders a byte the way those error messages show it.
- `kvtoolkit.sds`: `Sds` is a binary-safe mutable byte string. It keeps
  track of its used length and its free space (`avail()`,
  `make_room_for`, `incr_len`, `remove_free_space`, `alloc_size`). It
  offers:
  - appending and replacing: `cat`, `copy_from`, `grow_zero`
  - editing: `trim`, `range`, `clear`, `update_len`, `to_lower`,
    `to_upper`, `map_chars`
  - comparison: `compare`
  - printf-style appends: `cat_printf` and the reduced-format `cat_fmt`
    (`%s %S %i %I %u %U %T %%`)
- `kvtoolkit.sdsutil`: helpers that return or extend `Sds` objects:
  - `split_len`: split on a separator
  - `split_args`: split a line into quoted arguments
  - `cat_repr`: escaped, quoted rendering
  - `join`
  - `from_long_long`, `ll2str`, `ull2str`
  - `is_hex_digit`, `hex_digit_to_int`

## Installing

Install the project directory with pip. The `test` extra adds pytest,
which runs the suite in `tests/`.

## Examples

```python
from kvtoolkit.hashtables import LockStlHashtable

table = LockStlHashtable()
table.insert("user1", 42)       # True
table.get("user1")              # 42
table.update("user1", 43)       # 42, the old value
table.entries("user1", 10)      # [("user1", 43)]
```

```python
from kvtoolkit.reader import ReplyReader, ReplyType

reader = ReplyReader()
reader.feed(b"*2\r\n$3\r\nfoo\r\n:7\r\n")
reply = reader.get_reply()
reply.type                      # ReplyType.ARRAY
reply.elements[0].string        # b"foo"
reply.elements[1].integer       # 7
```

```python
from kvtoolkit.sds import Sds
from kvtoolkit.sdsutil import split_args

s = Sds(b"xxciaoyyy")
s.trim(b"xy")
bytes(s)                        # b"ciao"

args = split_args('set key "hello\\nworld"')
[bytes(a) for a in args]        # [b"set", b"key", b"hello\nworld"]
```

## What it does not do

This is a library of data structures and a parser, nothing more.

- It opens no network connections and talks to no server. `ReplyReader`
  only parses the bytes you feed it.
- It has no code for formatting or sending commands.
- It provides no command-line tool and no benchmark runner.
- It stores no data on disk.