"""Strings that carry a precomputed SDBM hash, for use as hashtable keys."""

from __future__ import annotations

_MASK64 = (1 << 64) - 1


def sdbm_hash(value: str | bytes) -> int:
    """Return the 64-bit SDBM hash of ``value`` (text is hashed as UTF-8)."""
    if isinstance(value, str):
        data = value.encode("utf-8")
    elif isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    else:
        raise TypeError(f"cannot hash {type(value).__name__}")
    result = 0
    for byte in data:
        result = (byte + (result << 6) + (result << 16) - result) & _MASK64
    return result


class HashString:
    """An immutable string key that caches its SDBM hash and byte length."""

    __slots__ = ("_value", "_hash", "_length")

    def __init__(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(
                f"HashString needs a str, not {type(value).__name__}"
            )
        encoded = value.encode("utf-8")
        self._value = value
        self._length = len(encoded)
        self._hash = sdbm_hash(encoded)

    @property
    def value(self) -> str:
        """The wrapped string."""
        return self._value

    @property
    def hash_value(self) -> int:
        """The full 64-bit SDBM hash of the string."""
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashString):
            return NotImplemented
        if self._hash != other._hash:
            return False
        return self._value == other._value

    def __hash__(self) -> int:
        return self._hash

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"HashString({self._value!r})"

    def __str__(self) -> str:
        return self._value