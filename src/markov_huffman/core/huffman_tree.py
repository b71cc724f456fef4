from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal, Optional

from markov_huffman.core.frequency import FrequencyModel
from markov_huffman.errors import DegenerateDistribution

VariancePolicy = Literal["min", "max"]
VARIANCE_POLICIES: tuple[str, ...] = ("min", "max")


# -------------------
# Strutture di base Huffman
# -------------------
@dataclass(frozen=True)
class HuffmanNode:
    """
    Leaf: ``symbol`` set, no children.
    Internal: ``symbol`` None, exactly two children, weight = left + right.

    ``order`` is the alphabet index for leaves and the creation serial for
    internal nodes (1, 2, ... in merge order).
    """

    weight: float
    symbol: Optional[str] = None
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None
    height: int = 0
    order: int = 0

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None and self.left is None and self.right is None

    def leaves(self) -> Iterator["HuffmanNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
                continue
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)


def _merge_key(node: HuffmanNode, variance: str) -> tuple:
    """
    Deterministic comparator for the working set.

    min: weight, then shallower subtree first, then newest internal node
         (leaves: alphabet order).
    max: weight, then deeper subtree first, then oldest internal node
         (leaves: alphabet order).
    """
    if variance == "min":
        tie = node.order if node.is_leaf else -node.order
        return (node.weight, node.height, tie)
    return (node.weight, -node.height, node.order)


def build_huffman_tree(model: FrequencyModel, variance: VariancePolicy = "min") -> HuffmanNode:
    """
    Build a Huffman tree from ``model``: repeatedly merge the two lightest
    nodes until one is left.

    Zero-weight symbols are not part of the tree. With a single used symbol
    the root is that leaf (the code table gives it the 1-bit codeword "0").
    """
    if variance not in VARIANCE_POLICIES:
        raise ValueError(f"variance policy non supportata: {variance!r}")

    heap: list[tuple[tuple, int, HuffmanNode]] = []
    counter = itertools.count()

    for idx, (sym, w) in enumerate(zip(model.alphabet.symbols, model.counts)):
        if w > 0:
            node = HuffmanNode(weight=w, symbol=sym, order=idx)
            heapq.heappush(heap, (_merge_key(node, variance), next(counter), node))

    if not heap:
        raise DegenerateDistribution("build_huffman_tree: tutte le probabilita' sono zero")

    serial = itertools.count(1)
    while len(heap) > 1:
        _, _, n1 = heapq.heappop(heap)
        _, _, n2 = heapq.heappop(heap)
        parent = HuffmanNode(
            weight=n1.weight + n2.weight,
            left=n1,
            right=n2,
            height=max(n1.height, n2.height) + 1,
            order=next(serial),
        )
        heapq.heappush(heap, (_merge_key(parent, variance), next(counter), parent))

    return heap[0][2]
