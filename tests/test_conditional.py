from __future__ import annotations

import pytest

from markov_huffman.core.alphabet import DEFAULT_ALPHABET, Alphabet, symbols_from_text
from markov_huffman.core.code_table import CodeTable, extract_code_table
from markov_huffman.core.frequency import (
    ConditionalFrequencyModel,
    FrequencyModel,
    build_conditional_frequency_model,
    build_frequency_model,
)
from markov_huffman.core.huffman_tree import build_huffman_tree
from markov_huffman.errors import DegenerateDistribution, MalformedStream, SymbolNotInTable
from markov_huffman.markov.conditional import (
    build_conditional_code_tables,
    decode_order1,
    encode_order1,
)

ABCD = Alphabet(("A", "B", "C", "D"))

# A -> B twice; B -> A, B once and C twice; C and D never observed as contexts.
COUNTS = (
    (0, 2, 0, 0),
    (1, 1, 2, 0),
    (0, 0, 0, 0),
    (0, 0, 0, 0),
)


def _cond() -> ConditionalFrequencyModel:
    return ConditionalFrequencyModel(alphabet=ABCD, counts=COUNTS)


def test_per_context_tables_and_metrics() -> None:
    cc = build_conditional_code_tables(_cond())

    ra = cc.result_for("A")
    assert ra.observations == 2
    assert dict(ra.table) == {"B": "0"}
    assert ra.metrics.entropy == 0.0
    assert ra.metrics.average_length == pytest.approx(1.0)
    assert ra.metrics.efficiency == 0.0

    rb = cc.result_for("B")
    assert dict(rb.table) == {"C": "0", "A": "10", "B": "11"}
    assert rb.metrics.entropy == pytest.approx(1.5)
    assert rb.metrics.average_length == pytest.approx(1.5)
    assert rb.metrics.efficiency == pytest.approx(100.0)


def test_unobserved_contexts_are_isolated() -> None:
    cc = build_conditional_code_tables(_cond())

    for ctx in ("C", "D"):
        r = cc.result_for(ctx)
        assert not r.observed
        assert r.table is None
        assert r.metrics is None
        assert isinstance(r.error, DegenerateDistribution)

    assert sorted(cc.tables) == ["A", "B"]
    with pytest.raises(SymbolNotInTable):
        cc.table_for("C")


def test_means_use_observed_contexts_only() -> None:
    cc = build_conditional_code_tables(_cond())

    assert cc.mean_average_length == pytest.approx(1.25)
    assert cc.mean_entropy == pytest.approx(0.75)
    # mean entropy / mean length, not the mean of the efficiencies (which would be 50 %)
    assert cc.mean_efficiency == pytest.approx(60.0)


def test_uniform_fallback_for_empty_contexts() -> None:
    cc = build_conditional_code_tables(_cond(), empty_context="uniform")

    r = cc.result_for("D")
    assert r.fallback == "uniform"
    assert r.metrics is None
    assert r.table is not None
    assert set(r.table.lengths().values()) == {2}
    # fallback tables never enter the means
    assert cc.mean_efficiency == pytest.approx(60.0)


def test_order0_fallback_uses_column_sums_without_order0_model() -> None:
    cc = build_conditional_code_tables(_cond(), empty_context="order0")

    # column sums: A:1 B:3 C:2 D:0
    assert dict(cc.result_for("C").table) == {"B": "0", "A": "10", "C": "11"}
    assert cc.result_for("C").fallback == "order0"


def test_order0_fallback_uses_given_model() -> None:
    order0 = FrequencyModel(alphabet=ABCD, counts=(0, 0, 0, 5))
    cc = build_conditional_code_tables(_cond(), empty_context="order0", order0=order0)
    assert dict(cc.result_for("D").table) == {"D": "0"}


def test_unknown_empty_context_policy() -> None:
    with pytest.raises(ValueError, match="empty_context"):
        build_conditional_code_tables(_cond(), empty_context="guess")  # type: ignore[arg-type]


def test_parallel_jobs_match_sequential() -> None:
    symbols = symbols_from_text("THE QUICK BROWN FOX JUMPS OVER THE LAZY DOG 0123456789 " * 5)
    cond = build_conditional_frequency_model(symbols, DEFAULT_ALPHABET)

    seq = build_conditional_code_tables(cond, jobs=1)
    par = build_conditional_code_tables(cond, jobs=4)

    assert [r.context for r in par.results] == list(DEFAULT_ALPHABET.symbols)
    assert seq.tables == par.tables
    assert [r.metrics for r in seq.results] == [r.metrics for r in par.results]


def _order1_setup(text: str):
    symbols = symbols_from_text(text)
    order0 = build_frequency_model(symbols, DEFAULT_ALPHABET)
    first, _ = extract_code_table(build_huffman_tree(order0))
    cond = build_conditional_frequency_model(symbols, DEFAULT_ALPHABET)
    return symbols, first, build_conditional_code_tables(cond, order0=order0)


def test_order1_roundtrip() -> None:
    symbols, first, cc = _order1_setup("THE CAT SAT ON THE MAT WITH 2 HATS AND 10 RATS")
    bits = encode_order1(symbols, cc, first)
    assert decode_order1(bits, cc, first, len(symbols)) == symbols
    assert decode_order1(bits, cc, first, 0) == []


def test_order1_beats_order0_on_repetitive_text() -> None:
    from markov_huffman.core.bitstream import encode

    symbols, first, cc = _order1_setup("ABCD" * 50)
    bits1 = encode_order1(symbols, cc, first)
    bits0 = encode(symbols, first)
    # every context has exactly one successor: 1 bit per symbol after the first
    assert len(bits1) == len(first[symbols[0]]) + (len(symbols) - 1)
    assert len(bits1) < len(bits0)


def test_order1_missing_context_table() -> None:
    symbols, first, cc = _order1_setup("ABAB")
    uniform = FrequencyModel(alphabet=DEFAULT_ALPHABET, counts=(1,) * DEFAULT_ALPHABET.size)
    first_all, _ = extract_code_table(build_huffman_tree(uniform))

    with pytest.raises(SymbolNotInTable, match="'C'"):
        encode_order1(["C", "A"], cc, first_all)
    # context A only knows B
    with pytest.raises(SymbolNotInTable, match="'A'"):
        encode_order1(["A", "A"], cc, first)


def test_order1_truncated_stream() -> None:
    symbols, first, cc = _order1_setup("THE CAT SAT ON THE MAT")
    bits = encode_order1(symbols, cc, first)
    with pytest.raises(MalformedStream):
        decode_order1(bits[:-1], cc, first, len(symbols))


def test_single_table_instance_is_reused_for_decoding() -> None:
    table = CodeTable({"A": "0", "B": "1"})
    assert table.trie is table.trie
