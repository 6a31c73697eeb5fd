"""Binary-safe dynamic strings that track their length and spare capacity."""

from __future__ import annotations

import re
from typing import Any

MAX_PREALLOC = 1024 * 1024
HEADER_SIZE = 8  # two 32-bit fields: used length and free space

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1
_LENGTH_MODIFIERS = re.compile(r"(%[-+ #0]*(?:\d+|\*)?(?:\.(?:\d+|\*))?)(?:hh|ll|h|l|j|z|t|L|q)")
_LENGTH_MODIFIERS_B = re.compile(
    rb"(%[-+ #0]*(?:\d+|\*)?(?:\.(?:\d+|\*))?)(?:hh|ll|h|l|j|z|t|L|q)"
)


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, Sds):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes, str or Sds, not {type(data).__name__}")


def _signed(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


class Sds:
    """A mutable byte string with separate used length and free capacity."""

    HEADER_SIZE = HEADER_SIZE

    def __init__(self, init: Any = None, length: int | None = None) -> None:
        if init is None:
            data = bytes(length or 0)
        else:
            raw = _as_bytes(init)
            if length is None:
                length = len(raw)
            if length < 0:
                raise ValueError("length must not be negative")
            if length > len(raw):
                raise ValueError("length exceeds the initial data")
            data = raw[:length]
        self._buf = bytearray(data)
        self._len = len(data)
        self._free = 0

    @classmethod
    def empty(cls) -> Sds:
        """Return a new zero-length string."""
        return cls(b"")

    def __len__(self) -> int:
        return self._len

    def __bytes__(self) -> bytes:
        return bytes(self._buf[: self._len])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sds):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray)):
            return bytes(self) == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Sds({bytes(self)!r})"

    def avail(self) -> int:
        """Bytes that can be appended without growing the allocation."""
        return self._free

    def dup(self) -> Sds:
        """Return an independent copy holding the same bytes."""
        return Sds(bytes(self))

    def _set_capacity(self) -> None:
        total = self._len + self._free
        if len(self._buf) < total:
            self._buf.extend(bytes(total - len(self._buf)))
        elif len(self._buf) > total:
            del self._buf[total:]

    def make_room_for(self, addlen: int) -> Sds:
        """Ensure at least ``addlen`` free bytes, preallocating generously."""
        if addlen < 0:
            raise ValueError("addlen must not be negative")
        if self._free >= addlen:
            return self
        newlen = self._len + addlen
        if newlen < MAX_PREALLOC:
            newlen *= 2
        else:
            newlen += MAX_PREALLOC
        self._free = newlen - self._len
        self._set_capacity()
        return self

    def cat(self, data: Any) -> Sds:
        """Append ``data`` to the end of the string."""
        raw = _as_bytes(data)
        self.make_room_for(len(raw))
        end = self._len + len(raw)
        self._buf[self._len:end] = raw
        self._len = end
        self._free -= len(raw)
        return self

    def copy_from(self, data: Any) -> Sds:
        """Replace the contents with ``data``, reusing the allocation."""
        raw = _as_bytes(data)
        total = self._free + self._len
        if total < len(raw):
            self.make_room_for(len(raw) - self._len)
            total = self._free + self._len
        self._buf[: len(raw)] = raw
        self._len = len(raw)
        self._free = total - len(raw)
        self._set_capacity()
        return self

    def incr_len(self, incr: int) -> None:
        """Move the end of the string by ``incr`` bytes into or out of free space."""
        if self._free < incr:
            raise ValueError("not enough free space")
        if self._len + incr < 0:
            raise ValueError("length would become negative")
        self._len += incr
        self._free -= incr

    def set_byte(self, index: int, value: int | bytes | str) -> None:
        """Write one byte anywhere in the allocation, including free space."""
        if isinstance(value, (bytes, bytearray, str)):
            raw = _as_bytes(value)
            if len(raw) != 1:
                raise ValueError("expected a single byte")
            value = raw[0]
        if not 0 <= value <= 0xFF:
            raise ValueError("byte out of range")
        if not 0 <= index < self._len + self._free:
            raise IndexError("index outside the allocation")
        self._buf[index] = value

    def grow_zero(self, length: int) -> Sds:
        """Extend to ``length`` bytes, filling the new part with zeros."""
        if length <= self._len:
            return self
        self.make_room_for(length - self._len)
        self._buf[self._len:length] = bytes(length - self._len)
        total = self._len + self._free
        self._len = length
        self._free = total - length
        return self

    def remove_free_space(self) -> Sds:
        """Drop all spare capacity."""
        self._free = 0
        self._set_capacity()
        return self

    def alloc_size(self) -> int:
        """Total allocation: header, content, free space and terminator."""
        return HEADER_SIZE + self._len + self._free + 1

    def clear(self) -> None:
        """Make the string empty while keeping its allocation as free space."""
        self._free += self._len
        self._len = 0

    def update_len(self) -> None:
        """Cut the length at the first zero byte in the content."""
        zero = self._buf.find(0, 0, self._len)
        reallen = self._len if zero < 0 else zero
        self._free += self._len - reallen
        self._len = reallen

    def _replace_content(self, content: bytes) -> None:
        self._buf[: len(content)] = content
        self._free += self._len - len(content)
        self._len = len(content)

    def trim(self, cset: Any) -> None:
        """Strip bytes in ``cset`` (and zero bytes) from both ends."""
        chars = _as_bytes(cset) + b"\0"
        self._replace_content(bytes(self).strip(chars))

    def range(self, start: int, end: int) -> None:
        """Keep only the inclusive slice ``start..end``; negatives count from the end."""
        length = self._len
        if length == 0:
            return
        if start < 0:
            start = max(length + start, 0)
        if end < 0:
            end = max(length + end, 0)
        newlen = 0 if start > end else end - start + 1
        if newlen != 0:
            if start >= length:
                newlen = 0
            elif end >= length:
                end = length - 1
                newlen = 0 if start > end else end - start + 1
        else:
            start = 0
        self._replace_content(bytes(self._buf[start:start + newlen]))

    def to_lower(self) -> None:
        """Lower-case ASCII letters in place."""
        self._buf[: self._len] = bytes(self).lower()

    def to_upper(self) -> None:
        """Upper-case ASCII letters in place."""
        self._buf[: self._len] = bytes(self).upper()

    def compare(self, other: Any) -> int:
        """Compare bytewise: negative, zero or positive like memcmp."""
        a, b = bytes(self), _as_bytes(other)
        n = min(len(a), len(b))
        if a[:n] == b[:n]:
            return len(a) - len(b)
        return -1 if a[:n] < b[:n] else 1

    def map_chars(self, source: Any, target: Any) -> Sds:
        """Replace each byte found in ``source`` by the byte at the same place in ``target``."""
        src, dst = _as_bytes(source), _as_bytes(target)
        if len(src) != len(dst):
            raise ValueError("source and target must have the same length")
        mapping: dict[int, int] = {}
        for s, d in zip(src, dst):
            mapping.setdefault(s, d)
        self._buf[: self._len] = bytes(mapping.get(c, c) for c in bytes(self))
        return self

    def cat_printf(self, fmt: str | bytes, *args: Any) -> Sds:
        """Append text produced by a printf-style format."""
        if isinstance(fmt, str):
            text = _LENGTH_MODIFIERS.sub(r"\1", fmt) % args
            return self.cat(text)
        data = _LENGTH_MODIFIERS_B.sub(rb"\1", bytes(fmt)) % args
        return self.cat(data)

    def cat_fmt(self, fmt: str | bytes, *args: Any) -> Sds:
        """Append text using the reduced format set %s %S %i %I %u %U %T %%."""
        spec = _as_bytes(fmt)
        remaining = iter(args)

        def take() -> Any:
            try:
                return next(remaining)
            except StopIteration:
                raise ValueError("not enough arguments for format") from None

        pos = 0
        while pos < len(spec):
            if self._free == 0:
                self.make_room_for(1)
            byte = spec[pos]
            if byte != ord("%"):
                self.cat(bytes([byte]))
                pos += 1
                continue
            if pos + 1 >= len(spec):
                raise ValueError("format ends with a lone '%'")
            code = chr(spec[pos + 1])
            pos += 2
            if code == "s":
                self.cat(_as_bytes(take()))
            elif code == "S":
                value = take()
                if not isinstance(value, Sds):
                    raise TypeError("%S needs an Sds argument")
                self.cat(bytes(value))
            elif code in "iI":
                value = int(take())
                value = _signed(value, 32 if code == "i" else 64)
                self.cat(str(value))
            elif code in "uUT":
                value = int(take())
                value &= _MASK32 if code == "u" else _MASK64
                self.cat(str(value))
            else:
                self.cat(code.encode("latin-1"))
        return self