from rvelf.container import Symbol
from rvelf.resolve import NameResolver


def test_symbol_wins_over_label():
    resolver = NameResolver([Symbol("main", 0x1000)], {0x1000: "LOC_000001"})
    assert resolver.resolve(0x1000) == "main"


def test_label_used_when_no_symbol():
    resolver = NameResolver([Symbol("main", 0x1000)], {0x1010: "LOC_000001"})
    assert resolver.resolve(0x1010) == "LOC_000001"


def test_unknown_address_is_none():
    resolver = NameResolver([Symbol("main", 0x1000)], {0x1010: "LOC_000001"})
    assert resolver.resolve(0x2000) is None


def test_first_symbol_in_table_order_wins():
    symbols = [Symbol("", 0x1000), Symbol("_start", 0x1000), Symbol("entry", 0x1000)]
    assert NameResolver(symbols, {}).resolve(0x1000) == "_start"


def test_label_table_is_a_snapshot():
    labels = {0x10: "LOC_000001"}
    resolver = NameResolver([], labels)
    labels[0x20] = "LOC_000002"
    assert resolver.resolve(0x20) is None
