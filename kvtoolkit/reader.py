"""Incremental parser for the Redis serialization protocol (RESP2 replies)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

READER_MAX_BUF = 1024 * 16
_MAX_DEPTH = 8
_COMPACT_THRESHOLD = 1024
_ERRSTR_MAX = 127


class ReplyType(IntEnum):
    """Kinds of replies the protocol can carry."""

    STRING = 1
    ARRAY = 2
    INTEGER = 3
    NIL = 4
    STATUS = 5
    ERROR = 6


class ErrorKind(IntEnum):
    """Categories of reader and connection errors."""

    IO = 1
    OTHER = 2
    EOF = 3
    PROTOCOL = 4
    OOM = 5


class ReaderError(Exception):
    """Raised when the reader meets malformed input or cannot build a reply."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass
class Reply:
    """A parsed reply: bulk/status/error text, an integer, or nested elements."""

    type: ReplyType
    string: bytes | None = None
    integer: int = 0
    elements: list[Any] = field(default_factory=list)


@dataclass
class ReadTask:
    """Parser state for one (possibly nested) reply item."""

    type: ReplyType | None = None
    elements: int = -1
    idx: int = -1
    obj: Any = None
    parent: ReadTask | None = None
    privdata: Any = None


class ReplyFactory:
    """Builds :class:`Reply` objects and links them into their parent array."""

    @staticmethod
    def _attach(task: ReadTask, reply: Reply) -> Reply:
        if task.parent is not None:
            task.parent.obj.elements[task.idx] = reply
        return reply

    def create_string(self, task: ReadTask, data: bytes) -> Any:
        return self._attach(task, Reply(type=task.type, string=data))

    def create_array(self, task: ReadTask, elements: int) -> Any:
        reply = Reply(type=ReplyType.ARRAY, elements=[None] * max(elements, 0))
        return self._attach(task, reply)

    def create_integer(self, task: ReadTask, value: int) -> Any:
        return self._attach(task, Reply(type=ReplyType.INTEGER, integer=value))

    def create_nil(self, task: ReadTask) -> Any:
        return self._attach(task, Reply(type=ReplyType.NIL))


_TYPE_BYTES = {
    ord("-"): ReplyType.ERROR,
    ord("+"): ReplyType.STATUS,
    ord(":"): ReplyType.INTEGER,
    ord("$"): ReplyType.STRING,
    ord("*"): ReplyType.ARRAY,
}

_ESCAPES = {
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
    0x07: "\\a",
    0x08: "\\b",
}


def describe_byte(byte: int | bytes) -> str:
    """Return a quoted, escaped rendering of a single byte for messages."""
    if isinstance(byte, (bytes, bytearray)):
        if len(byte) != 1:
            raise ValueError("expected exactly one byte")
        byte = byte[0]
    if not 0 <= byte <= 0xFF:
        raise ValueError("byte out of range")
    if byte in (ord("\\"), ord('"')):
        return f'"\\{chr(byte)}"'
    if byte in _ESCAPES:
        return f'"{_ESCAPES[byte]}"'
    if 0x20 <= byte <= 0x7E:
        return f'"{chr(byte)}"'
    return f'"\\x{byte:02x}"'


def _read_long_long(line: bytes) -> int:
    """Parse a signed decimal; ambiguously returns -1 on unexpected input."""
    mult = 1
    if line[:1] == b"-":
        mult, line = -1, line[1:]
    elif line[:1] == b"+":
        line = line[1:]
    value = 0
    for c in line:
        digit = c - 48
        if not 0 <= digit < 10:
            return -1
        value = value * 10 + digit
    return mult * value


_DEFAULT_FACTORY: Any = object()


class ReplyReader:
    """Feed raw bytes in, take complete replies out.

    With ``factory=None`` no objects are built and each reply is reported
    by its :class:`ReplyType` alone.
    """

    def __init__(
        self, factory: ReplyFactory | None = _DEFAULT_FACTORY,
        max_buffer: int = READER_MAX_BUF,
    ) -> None:
        self.factory = ReplyFactory() if factory is _DEFAULT_FACTORY else factory
        self.max_buffer = max_buffer
        self.privdata: Any = None
        self._buf = bytearray()
        self._pos = 0
        self._stack = [ReadTask() for _ in range(_MAX_DEPTH + 1)]
        self._ridx = -1
        self._reply: Any = None
        self._error: tuple[ErrorKind, str] | None = None

    @property
    def error(self) -> ReaderError | None:
        """The error that stopped this reader, if any."""
        if self._error is None:
            return None
        return ReaderError(*self._error)

    def _raise_stored(self) -> None:
        assert self._error is not None
        raise ReaderError(*self._error)

    def _fail(self, kind: ErrorKind, message: str) -> None:
        self._reply = None
        self._buf = bytearray()
        self._pos = 0
        self._ridx = -1
        self._error = (kind, message[:_ERRSTR_MAX])
        self._raise_stored()

    def feed(self, data: bytes) -> None:
        """Append bytes to the input buffer."""
        if self._error is not None:
            self._raise_stored()
        if not data:
            return
        if (
            self._pos >= len(self._buf)
            and self.max_buffer
            and len(self._buf) > self.max_buffer
        ):
            self._buf = bytearray()
            self._pos = 0
        self._buf.extend(data)

    def get_reply(self) -> Any:
        """Return the next complete reply, or None if more input is needed."""
        if self._error is not None:
            self._raise_stored()
        if not self._buf:
            return None
        if self._ridx == -1:
            root = self._stack[0]
            root.type = None
            root.elements = -1
            root.idx = -1
            root.obj = None
            root.parent = None
            root.privdata = self.privdata
            self._ridx = 0
        while self._ridx >= 0:
            if not self._process_item():
                break
        if self._pos >= _COMPACT_THRESHOLD:
            del self._buf[: self._pos]
            self._pos = 0
        if self._ridx == -1:
            reply, self._reply = self._reply, None
            return reply
        return None

    def _check(self, obj: Any) -> Any:
        if obj is None:
            self._fail(ErrorKind.OOM, "Out of memory")
        return obj

    def _read_line(self) -> bytes | None:
        end = self._buf.find(b"\r\n", self._pos)
        if end < 0:
            return None
        line = bytes(self._buf[self._pos:end])
        self._pos = end + 2
        return line

    def _move_to_next_task(self) -> None:
        while self._ridx >= 0:
            if self._ridx == 0:
                self._ridx -= 1
                return
            cur = self._stack[self._ridx]
            prv = self._stack[self._ridx - 1]
            if cur.idx == prv.elements - 1:
                self._ridx -= 1
            else:
                cur.type = None
                cur.elements = -1
                cur.idx += 1
                return

    def _process_item(self) -> bool:
        cur = self._stack[self._ridx]
        if cur.type is None:
            if self._pos >= len(self._buf):
                return False
            byte = self._buf[self._pos]
            self._pos += 1
            kind = _TYPE_BYTES.get(byte)
            if kind is None:
                self._fail(
                    ErrorKind.PROTOCOL,
                    f"Protocol error, got {describe_byte(byte)} as reply type byte",
                )
            cur.type = kind
        if cur.type in (ReplyType.ERROR, ReplyType.STATUS, ReplyType.INTEGER):
            return self._process_line_item(cur)
        if cur.type is ReplyType.STRING:
            return self._process_bulk_item(cur)
        return self._process_multi_bulk_item(cur)

    def _process_line_item(self, cur: ReadTask) -> bool:
        line = self._read_line()
        if line is None:
            return False
        if cur.type is ReplyType.INTEGER:
            value = _read_long_long(line)
            obj = (self.factory.create_integer(cur, value)
                   if self.factory else ReplyType.INTEGER)
        else:
            obj = self.factory.create_string(cur, line) if self.factory else cur.type
        self._check(obj)
        if self._ridx == 0:
            self._reply = obj
        self._move_to_next_task()
        return True

    def _process_bulk_item(self, cur: ReadTask) -> bool:
        end = self._buf.find(b"\r\n", self._pos)
        if end < 0:
            return False
        length = _read_long_long(bytes(self._buf[self._pos:end]))
        bytelen = end - self._pos + 2
        if length < 0:
            obj = self.factory.create_nil(cur) if self.factory else ReplyType.NIL
        else:
            bytelen += length + 2
            if self._pos + bytelen > len(self._buf):
                return False
            data = bytes(self._buf[end + 2:end + 2 + length])
            obj = (self.factory.create_string(cur, data)
                   if self.factory else ReplyType.STRING)
        self._check(obj)
        self._pos += bytelen
        if self._ridx == 0:
            self._reply = obj
        self._move_to_next_task()
        return True

    def _process_multi_bulk_item(self, cur: ReadTask) -> bool:
        if self._ridx == _MAX_DEPTH:
            self._fail(
                ErrorKind.PROTOCOL,
                "No support for nested multi bulk replies with depth > 7",
            )
        line = self._read_line()
        if line is None:
            return False
        elements = _read_long_long(line)
        root = self._ridx == 0
        if elements == -1:
            obj = self._check(
                self.factory.create_nil(cur) if self.factory else ReplyType.NIL
            )
            self._move_to_next_task()
        else:
            obj = self._check(
                self.factory.create_array(cur, elements)
                if self.factory else ReplyType.ARRAY
            )
            if elements > 0:
                cur.elements = elements
                cur.obj = obj
                self._ridx += 1
                child = self._stack[self._ridx]
                child.type = None
                child.elements = -1
                child.idx = 0
                child.obj = None
                child.parent = cur
                child.privdata = self.privdata
            else:
                self._move_to_next_task()
        if root:
            self._reply = obj
        return True