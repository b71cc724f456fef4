from __future__ import annotations

from collections.abc import Iterable, Sequence

from markov_huffman.core.code_table import BIT_LEFT, CodeTable, TrieNode
from markov_huffman.errors import MalformedStream, SymbolNotInTable

# A bit sequence is a str of '0'/'1'. No padding or framing at this level:
# the decoder is told how many symbols to produce.


def encode(symbols: Iterable[str], table: CodeTable) -> str:
    """Concatenate, in input order, the codeword of each symbol."""
    parts: list[str] = []
    for sym in symbols:
        code = table.get(sym)
        if code is None:
            raise SymbolNotInTable(sym)
        parts.append(code)
    return "".join(parts)


def decode_from(
    bits: str, pos: int, root: TrieNode, *, where: str = "decode"
) -> tuple[str, int]:
    """Walk the trie from ``root`` starting at bits[pos]; return (symbol, next_pos)."""
    node = root
    start = pos
    n = len(bits)
    while not node.is_leaf:
        if pos >= n:
            raise MalformedStream(
                f"{where}: bitstream troncato (codeword iniziata al bit {start} non completa)"
            )
        bit = bits[pos]
        if bit == BIT_LEFT:
            nxt = node.children[0]
        elif bit == "1":
            nxt = node.children[1]
        else:
            raise MalformedStream(f"{where}: bit non valido {bit!r} in posizione {pos}")
        if nxt is None:
            raise MalformedStream(f"{where}: bit {bit} in posizione {pos} non porta a nessun nodo")
        node = nxt
        pos += 1
    return node.symbol, pos  # type: ignore[return-value]


def decode(bits: str, table: CodeTable, expected_count: int) -> list[str]:
    """
    Decode exactly ``expected_count`` symbols from ``bits``.

    Bits left over after the last symbol are not read.
    """
    if expected_count < 0:
        raise ValueError(f"decode: expected_count negativo: {expected_count}")
    if expected_count == 0:
        return []

    root = table.trie
    out: list[str] = []
    pos = 0
    while len(out) < expected_count:
        if pos >= len(bits):
            raise MalformedStream(
                f"decode: attesi {expected_count} simboli, bitstream finito dopo {len(out)}"
            )
        sym, pos = decode_from(bits, pos, root)
        out.append(sym)
    return out


# -------------------
# Bit packing (MSB-first)
# -------------------


def pack_bits(bits: str) -> tuple[bytes, int]:
    """
    bits -> (data, lastbits)
    lastbits = numero di bit validi nell'ultimo byte (1..8) oppure 0 se bits vuoto.
    """
    if not bits:
        return b"", 0

    out_bytes = bytearray()
    current_byte = 0
    bit_count = 0

    for pos, bit in enumerate(bits):
        if bit not in "01":
            raise MalformedStream(f"pack_bits: bit non valido {bit!r} in posizione {pos}")
        current_byte = (current_byte << 1) | (bit == "1")
        bit_count += 1
        if bit_count == 8:
            out_bytes.append(current_byte)
            current_byte = 0
            bit_count = 0

    if bit_count > 0:
        current_byte = current_byte << (8 - bit_count)
        out_bytes.append(current_byte)
        lastbits = bit_count
    else:
        lastbits = 8  # tutti i byte pieni

    return bytes(out_bytes), lastbits


def unpack_bits(data: bytes | Sequence[int], lastbits: int) -> str:
    total_bytes = len(data)
    if total_bytes == 0:
        if lastbits != 0:
            raise MalformedStream(f"unpack_bits: lastbits={lastbits} ma nessun byte")
        return ""
    if not (1 <= lastbits <= 8):
        raise MalformedStream(f"unpack_bits: lastbits fuori range (1..8): {lastbits}")

    parts: list[str] = []
    for i, byte in enumerate(data):
        bits_in_this_byte = lastbits if i == total_bytes - 1 else 8
        for bit_index in range(bits_in_this_byte):
            parts.append("1" if (byte >> (7 - bit_index)) & 1 else "0")
    return "".join(parts)
