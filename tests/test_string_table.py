from kingfisher.string_table import BytesTable, Symbol


def test_simple_roundtrip():
    table = BytesTable()
    s1 = table.get_or_intern(b"foo")
    s1a = table.get_or_intern(b"foo")
    assert s1 == s1a

    s2 = table.get_or_intern(b"bar")
    assert s1 != s2
    assert table.resolve(s1) == b"foo"
    assert table.resolve(s2) == b"bar"


def test_symbols_are_contiguous_ranges():
    table = BytesTable()
    a = table.get_or_intern(b"ab")
    b = table.get_or_intern(b"cde")
    assert a == Symbol(0, 2)
    assert b == Symbol(2, 5)
    assert list(b.to_range()) == [2, 3, 4]


def test_duplicates_not_stored_twice():
    table = BytesTable()
    for value in [b"x", b"y", b"x", b"y", b"x"]:
        table.get_or_intern(value)
    assert len(table) == 2


def test_empty_value():
    table = BytesTable()
    sym = table.get_or_intern(b"")
    assert table.resolve(sym) == b""
    assert sym.start == sym.end


def test_accepts_bytearray():
    table = BytesTable()
    assert table.get_or_intern(bytearray(b"q")) == table.get_or_intern(b"q")