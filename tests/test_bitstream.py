from __future__ import annotations

import pytest

from markov_huffman.core.alphabet import Alphabet
from markov_huffman.core.bitstream import decode, encode, pack_bits, unpack_bits
from markov_huffman.core.code_table import CodeTable, extract_code_table
from markov_huffman.core.frequency import FrequencyModel
from markov_huffman.core.huffman_tree import build_huffman_tree
from markov_huffman.errors import InvalidCodeTable, MalformedStream, SymbolNotInTable

TABLE = CodeTable({"A": "0", "B": "10", "C": "110", "D": "111"})
MSG = ["A", "B", "C", "D", "A"]
MSG_BITS = "0101101110"


def test_encode_concatenates_codewords() -> None:
    assert encode(MSG, TABLE) == MSG_BITS
    assert encode([], TABLE) == ""


def test_decode_exact_count() -> None:
    assert decode(MSG_BITS, TABLE, 5) == MSG
    assert decode(MSG_BITS, TABLE, 0) == []


def test_decode_stops_at_expected_count() -> None:
    # trailing padding is never read
    assert decode(MSG_BITS + "1101", TABLE, 5) == MSG
    assert decode(MSG_BITS, TABLE, 2) == ["A", "B"]


def test_encode_symbol_not_in_table() -> None:
    with pytest.raises(SymbolNotInTable, match="'E'") as ei:
        encode(["A", "E"], TABLE)
    assert ei.value.symbol == "E"


def test_decode_truncated_mid_codeword() -> None:
    with pytest.raises(MalformedStream, match="troncato"):
        decode(MSG_BITS[:8], TABLE, 5)


def test_decode_exhausted_between_codewords() -> None:
    with pytest.raises(MalformedStream, match="attesi 5 simboli"):
        decode(MSG_BITS[:9], TABLE, 5)


def test_decode_invalid_bit() -> None:
    with pytest.raises(MalformedStream, match="bit non valido"):
        decode("01x", TABLE, 3)


def test_decode_dead_branch_on_single_symbol_table() -> None:
    table = CodeTable({"Z": "0"})
    assert decode("000", table, 3) == ["Z", "Z", "Z"]
    with pytest.raises(MalformedStream, match="non porta"):
        decode("01", table, 2)


def test_decode_rejects_non_prefix_free_table() -> None:
    with pytest.raises(InvalidCodeTable):
        decode("0", CodeTable({"A": "0", "B": "01"}), 1)
    with pytest.raises(InvalidCodeTable):
        decode("0", CodeTable({"B": "01", "A": "0"}), 1)


def test_roundtrip_with_built_table() -> None:
    alphabet = Alphabet(tuple("ABCDEFG"))
    msg = list("ABBACADAEAFAGGGGGGGG")
    model = FrequencyModel(
        alphabet=alphabet, counts=tuple(msg.count(s) for s in alphabet.symbols)
    )
    table, _ = extract_code_table(build_huffman_tree(model))
    bits = encode(msg, table)
    assert decode(bits, table, len(msg)) == msg


# Golden vectors (bit level)
#
# MSB-first; lastbits = valid bits in the last byte (1..8), 0 only when empty.
def test_pack_bits_golden() -> None:
    assert pack_bits("") == (b"", 0)
    assert pack_bits("10110") == (b"\xb0", 5)
    assert pack_bits("11111111") == (b"\xff", 8)
    assert pack_bits("111111110") == (b"\xff\x00", 1)
    assert pack_bits(MSG_BITS) == (bytes([0b01011011, 0b10000000]), 2)


def test_unpack_bits_golden() -> None:
    assert unpack_bits(b"", 0) == ""
    assert unpack_bits(b"\xb0", 5) == "10110"
    assert unpack_bits(b"\xff\x00", 1) == "111111110"
    data, lastbits = pack_bits(MSG_BITS)
    assert unpack_bits(data, lastbits) == MSG_BITS


def test_unpack_bits_errors() -> None:
    with pytest.raises(MalformedStream, match="lastbits"):
        unpack_bits(b"\x00", 0)
    with pytest.raises(MalformedStream, match="lastbits"):
        unpack_bits(b"\x00", 9)
    with pytest.raises(MalformedStream, match="nessun byte"):
        unpack_bits(b"", 3)
    with pytest.raises(MalformedStream, match="bit non valido"):
        pack_bits("0120")
