"""Helpers around dynamic strings: number formatting, splitting, quoting and joining."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from kvtoolkit.sds import Sds

_LLONG_MIN = -(1 << 63)
_LLONG_MAX = (1 << 63) - 1
_ULLONG_MAX = (1 << 64) - 1

_SPACE_BYTES = frozenset(b" \t\n\v\f\r")
_TOKEN_END = frozenset(b" \n\r\t\0")
_REPR_ESCAPES = {
    ord("\n"): b"\\n",
    ord("\r"): b"\\r",
    ord("\t"): b"\\t",
    0x07: b"\\a",
    0x08: b"\\b",
}
_ARG_ESCAPES = {
    ord("n"): ord("\n"),
    ord("r"): ord("\r"),
    ord("t"): ord("\t"),
    ord("b"): 0x08,
    ord("a"): 0x07,
}
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


def _to_bytes(data: Any) -> bytes:
    if isinstance(data, Sds):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes, str or Sds, not {type(data).__name__}")


def _to_byte(c: int | str | bytes) -> int:
    if isinstance(c, int):
        if not 0 <= c <= 0xFF:
            raise ValueError("byte out of range")
        return c
    raw = _to_bytes(c)
    if len(raw) != 1:
        raise ValueError("expected a single character")
    return raw[0]


def ll2str(value: int) -> bytes:
    """Return the decimal text of a signed 64-bit integer."""
    if not _LLONG_MIN <= value <= _LLONG_MAX:
        raise OverflowError("value does not fit in a signed 64-bit integer")
    return str(value).encode("ascii")


def ull2str(value: int) -> bytes:
    """Return the decimal text of an unsigned 64-bit integer."""
    if not 0 <= value <= _ULLONG_MAX:
        raise OverflowError("value does not fit in an unsigned 64-bit integer")
    return str(value).encode("ascii")


def from_long_long(value: int) -> Sds:
    """Return a new string holding the decimal text of ``value``."""
    return Sds(ll2str(value))


def split_len(data: Any, sep: Any) -> list[Sds]:
    """Split ``data`` on the (possibly multi-byte) separator ``sep``.

    An empty input gives an empty list; an empty separator is an error.
    """
    raw = _to_bytes(data)
    separator = _to_bytes(sep)
    if not separator:
        raise ValueError("separator must not be empty")
    if not raw:
        return []
    return [Sds(part) for part in raw.split(separator)]


def cat_repr(target: Sds, data: Any) -> Sds:
    """Append a double-quoted, escaped rendering of ``data`` to ``target``."""
    out = bytearray(b'"')
    for byte in _to_bytes(data):
        if byte in (ord("\\"), ord('"')):
            out += b"\\" + bytes([byte])
        elif byte in _REPR_ESCAPES:
            out += _REPR_ESCAPES[byte]
        elif 0x20 <= byte <= 0x7E:
            out.append(byte)
        else:
            out += b"\\x%02x" % byte
    out += b'"'
    return target.cat(bytes(out))


def is_hex_digit(c: int | str | bytes) -> bool:
    """Tell whether ``c`` is a hexadecimal digit."""
    return _to_byte(c) in _HEX_DIGITS


def hex_digit_to_int(c: int | str | bytes) -> int:
    """Return the value of a hex digit, or 0 for anything else."""
    byte = _to_byte(c)
    if byte not in _HEX_DIGITS:
        return 0
    return int(chr(byte), 16)


def split_args(line: Any) -> list[Sds]:
    """Split a line into arguments, honouring double and single quotes.

    Double-quoted arguments understand ``\\xHH`` and the usual backslash
    escapes. Unbalanced quotes, or a closing quote followed by anything
    but whitespace, raise :class:`ValueError`.
    """
    raw = _to_bytes(line)
    nul = raw.find(b"\0")
    if nul >= 0:
        raw = raw[:nul]

    def at(i: int) -> int:
        return raw[i] if i < len(raw) else 0

    tokens: list[Sds] = []
    p = 0
    while True:
        while at(p) and at(p) in _SPACE_BYTES:
            p += 1
        if not at(p):
            return tokens
        in_double = in_single = done = False
        current = bytearray()
        while not done:
            c = at(p)
            if in_double:
                if (
                    c == ord("\\")
                    and at(p + 1) == ord("x")
                    and at(p + 2) in _HEX_DIGITS
                    and at(p + 3) in _HEX_DIGITS
                ):
                    current.append(
                        hex_digit_to_int(at(p + 2)) * 16 + hex_digit_to_int(at(p + 3))
                    )
                    p += 3
                elif c == ord("\\") and at(p + 1):
                    p += 1
                    current.append(_ARG_ESCAPES.get(at(p), at(p)))
                elif c == ord('"'):
                    if at(p + 1) and at(p + 1) not in _SPACE_BYTES:
                        raise ValueError("closing quote must be followed by a space")
                    done = True
                elif not c:
                    raise ValueError("unterminated double quotes")
                else:
                    current.append(c)
            elif in_single:
                if c == ord("\\") and at(p + 1) == ord("'"):
                    p += 1
                    current.append(ord("'"))
                elif c == ord("'"):
                    if at(p + 1) and at(p + 1) not in _SPACE_BYTES:
                        raise ValueError("closing quote must be followed by a space")
                    done = True
                elif not c:
                    raise ValueError("unterminated single quotes")
                else:
                    current.append(c)
            elif c in _TOKEN_END:
                done = True
            elif c == ord('"'):
                in_double = True
            elif c == ord("'"):
                in_single = True
            else:
                current.append(c)
            if at(p):
                p += 1
        tokens.append(Sds(bytes(current)))


def join(parts: Iterable[Any], sep: Any) -> Sds:
    """Join strings with ``sep`` between them into a new string."""
    return Sds(_to_bytes(sep).join(_to_bytes(part) for part in parts))