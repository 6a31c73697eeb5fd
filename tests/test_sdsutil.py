import pytest

from kvtoolkit.sds import Sds
from kvtoolkit.sdsutil import (
    cat_repr,
    from_long_long,
    hex_digit_to_int,
    is_hex_digit,
    join,
    ll2str,
    split_args,
    split_len,
    ull2str,
)


def test_ll2str_extremes():
    assert ll2str(0) == b"0"
    assert ll2str(-9223372036854775808) == b"-9223372036854775808"
    assert ll2str(9223372036854775807) == b"9223372036854775807"


def test_ll2str_overflow():
    with pytest.raises(OverflowError):
        ll2str(9223372036854775808)


def test_ull2str_max_and_negative():
    assert ull2str(18446744073709551615) == b"18446744073709551615"
    with pytest.raises(OverflowError):
        ull2str(-1)


def test_from_long_long_round_trip():
    for value in (-42, 0, 7, 1234567890123):
        s = from_long_long(value)
        assert int(bytes(s)) == value
        assert len(s) == len(bytes(s))


def test_split_len_multichar_separator():
    parts = split_len(b"foo_-_bar", b"_-_")
    assert [bytes(p) for p in parts] == [b"foo", b"bar"]


def test_split_len_empty_input():
    assert split_len(b"", b",") == []


def test_split_len_empty_separator_rejected():
    with pytest.raises(ValueError):
        split_len(b"abc", b"")


def test_split_len_keeps_empty_fields():
    parts = split_len(b"a,,b,", b",")
    assert [bytes(p) for p in parts] == [b"a", b"", b"b", b""]


@pytest.mark.parametrize("data", [b"x", b"one two  three", b"  lead", b"trail  "])
def test_split_then_join_round_trip(data):
    assert bytes(join(split_len(data, b" "), b" ")) == data


def test_cat_repr_source_case():
    x = Sds(b"\a\n\0foo\r", 7)
    y = cat_repr(Sds.empty(), x)
    assert bytes(y) == b'"\\a\\n\\x00foo\\r"'


def test_cat_repr_appends_to_target():
    target = Sds(b"v=")
    result = cat_repr(target, b'q"\\')
    assert bytes(result) == b'v="q\\"\\\\"'


def test_cat_repr_split_args_round_trip_all_bytes():
    data = bytes(range(256))
    quoted = bytes(cat_repr(Sds.empty(), data))
    parsed = split_args(quoted)
    assert len(parsed) == 1
    assert bytes(parsed[0]) == data


def test_is_hex_digit():
    assert is_hex_digit("a")
    assert is_hex_digit("F")
    assert is_hex_digit(ord("9"))
    assert not is_hex_digit("g")
    assert not is_hex_digit(" ")


def test_hex_digit_to_int():
    assert hex_digit_to_int("f") == 15
    assert hex_digit_to_int("A") == 10
    assert hex_digit_to_int("0") == 0
    assert hex_digit_to_int("z") == 0


def test_split_args_plain_words():
    args = split_args("set  key\tvalue")
    assert [bytes(a) for a in args] == [b"set", b"key", b"value"]


def test_split_args_source_example():
    args = split_args(r'foo bar "newline are supported\n" and "\xff\x00otherstuff"')
    assert [bytes(a) for a in args] == [
        b"foo",
        b"bar",
        b"newline are supported\n",
        b"and",
        b"\xff\x00otherstuff",
    ]


def test_split_args_single_quotes():
    args = split_args("'it\\'s here' x")
    assert [bytes(a) for a in args] == [b"it's here", b"x"]


def test_split_args_empty_line():
    assert split_args("   ") == []
    assert split_args("") == []


@pytest.mark.parametrize("line", ['"open', "'open", '"foo"bar', "'foo'bar"])
def test_split_args_rejects_bad_quoting(line):
    with pytest.raises(ValueError):
        split_args(line)


def test_join_mixed_inputs():
    joined = join([b"a", "b", Sds(b"c")], ", ")
    assert bytes(joined) == b"a, b, c"
    assert bytes(join([], b"-")) == b""