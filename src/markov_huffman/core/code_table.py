"""Code tables: symbol -> codeword (a string of '0'/'1').

Bit convention: left descent = '0', right descent = '1'. The encoder uses the
table directly, the decoder walks a trie rebuilt from the same table, so a
given table instance is the only thing both sides need.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Optional

from markov_huffman.core.frequency import FrequencyModel
from markov_huffman.core.huffman_tree import HuffmanNode
from markov_huffman.errors import InvalidCodeTable

BIT_LEFT = "0"
BIT_RIGHT = "1"


@dataclass
class TrieNode:
    symbol: Optional[str] = None
    children: list[Optional["TrieNode"]] = field(default_factory=lambda: [None, None])

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None


@dataclass(frozen=True)
class CodeTable(Mapping[str, str]):
    codes: Mapping[str, str]

    def __post_init__(self) -> None:
        codes = dict(self.codes)
        for sym, code in codes.items():
            if not code or any(b not in "01" for b in code):
                raise InvalidCodeTable(f"code table: codeword non valida per {sym!r}: {code!r}")
        # read-only view: the cached trie must stay in sync with the codewords
        object.__setattr__(self, "codes", MappingProxyType(codes))

    def __getitem__(self, symbol: str) -> str:
        return self.codes[symbol]

    def __iter__(self) -> Iterator[str]:
        return iter(self.codes)

    def __len__(self) -> int:
        return len(self.codes)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.codes.items())))

    def lengths(self) -> dict[str, int]:
        return {s: len(c) for s, c in self.codes.items()}

    def kraft_sum(self) -> float:
        return sum(2.0 ** -len(c) for c in self.codes.values())

    def is_prefix_free(self) -> bool:
        # sorted lexicographically, a prefix is always immediately followed by an extension
        words = sorted(self.codes.values())
        return all(not b.startswith(a) for a, b in zip(words, words[1:]))

    def average_length(self, model: FrequencyModel) -> float:
        """Sum of p(s) * len(code(s)) over the symbols of ``model`` with p(s) > 0."""
        total = 0.0
        for sym, p in model.distribution().items():
            if p <= 0:
                continue
            code = self.codes.get(sym)
            if code is None:
                raise InvalidCodeTable(
                    f"code table: nessuna codeword per {sym!r} (probabilita' {p:.6g})"
                )
            total += p * len(code)
        return total

    @cached_property
    def trie(self) -> TrieNode:
        """Decode trie rebuilt from the codewords (validates the prefix property)."""
        if not self.codes:
            raise InvalidCodeTable("code table vuota")

        root = TrieNode()
        for sym, code in self.codes.items():
            node = root
            for bit in code:
                if node.is_leaf:
                    raise InvalidCodeTable(
                        f"code table non prefix-free: la codeword di {node.symbol!r} "
                        f"e' prefisso di quella di {sym!r}"
                    )
                b = 0 if bit == BIT_LEFT else 1
                nxt = node.children[b]
                if nxt is None:
                    nxt = TrieNode()
                    node.children[b] = nxt
                node = nxt
            if node.is_leaf or node.children != [None, None]:
                raise InvalidCodeTable(f"code table non prefix-free: conflitto su {sym!r}")
            node.symbol = sym
        return root


def extract_code_table(root: HuffmanNode) -> tuple[CodeTable, float]:
    """
    Depth-first walk from ``root``: '0' on left descent, '1' on right descent.

    Returns the table and the average codeword length, with probabilities
    taken from the leaf weights (weight / root weight).
    """
    codes: dict[str, str] = {}

    # explicit stack: skewed trees can be deeper than the recursion limit
    stack: list[tuple[HuffmanNode, str]] = [(root, "")]
    while stack:
        node, path = stack.pop()
        # Foglia
        if node.is_leaf:
            codes[node.symbol] = path if path else BIT_LEFT  # type: ignore[index]
            continue
        if node.left is None or node.right is None:
            raise InvalidCodeTable("albero Huffman non completo (nodo interno con un solo figlio)")
        stack.append((node.right, path + BIT_RIGHT))
        stack.append((node.left, path + BIT_LEFT))

    avg = 0.0
    if root.weight > 0:
        for leaf in root.leaves():
            avg += (leaf.weight / root.weight) * len(codes[leaf.symbol])  # type: ignore[index]

    return CodeTable(codes), avg
