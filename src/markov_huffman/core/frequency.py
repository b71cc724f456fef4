"""Frequency models (order-0 and order-1).

Both models are explicit accumulators returned by pure build functions:
once built they are immutable.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from markov_huffman.core.alphabet import Alphabet
from markov_huffman.errors import InvalidInput

PROB_EPS = 1e-9


@dataclass(frozen=True)
class FrequencyModel:
    """
    Weight per alphabet symbol (same order as ``alphabet.symbols``).

    Weights are usually integer counts; ``from_probabilities`` builds a model
    straight from a distribution (weights = probabilities).
    """

    alphabet: Alphabet
    counts: tuple[float, ...]

    def __post_init__(self) -> None:
        counts = tuple(self.counts)
        if len(counts) != self.alphabet.size:
            raise InvalidInput(
                f"frequency: attesi {self.alphabet.size} conteggi, ricevuti {len(counts)}"
            )
        for sym, c in zip(self.alphabet.symbols, counts):
            if not math.isfinite(c) or c < 0:
                raise InvalidInput(f"frequency: peso non valido per {sym!r}: {c!r}")
        object.__setattr__(self, "counts", counts)

    @classmethod
    def from_probabilities(
        cls, alphabet: Alphabet, probabilities: Sequence[float] | dict[str, float]
    ) -> FrequencyModel:
        if isinstance(probabilities, dict):
            for s in probabilities:
                alphabet.index(s)
            weights = tuple(float(probabilities.get(s, 0.0)) for s in alphabet.symbols)
        else:
            weights = tuple(float(p) for p in probabilities)
        return cls(alphabet=alphabet, counts=weights)

    @property
    def total(self) -> float:
        return sum(self.counts)

    def count(self, symbol: str) -> float:
        return self.counts[self.alphabet.index(symbol)]

    def probability(self, symbol: str) -> float:
        total = self.total
        if total <= 0:
            return 0.0
        return self.count(symbol) / total

    def probabilities(self) -> tuple[float, ...]:
        total = self.total
        if total <= 0:
            return tuple(0.0 for _ in self.counts)
        return tuple(c / total for c in self.counts)

    def distribution(self) -> dict[str, float]:
        return dict(zip(self.alphabet.symbols, self.probabilities()))

    def used_symbols(self) -> list[str]:
        """Symbols with a positive weight, alphabet order."""
        return [s for s, c in zip(self.alphabet.symbols, self.counts) if c > 0]

    def is_empty(self) -> bool:
        return self.total <= 0

    def check_normalized(self, eps: float = PROB_EPS) -> bool:
        if self.is_empty():
            return True
        return abs(sum(self.probabilities()) - 1.0) <= eps


@dataclass(frozen=True)
class ConditionalFrequencyModel:
    """
    Counts of (context, symbol) observations: ``counts[i][j]`` is how many
    times alphabet symbol j followed alphabet symbol i.
    """

    alphabet: Alphabet
    counts: tuple[tuple[int, ...], ...]

    def __post_init__(self) -> None:
        n = self.alphabet.size
        rows = tuple(tuple(r) for r in self.counts)
        if len(rows) != n or any(len(r) != n for r in rows):
            raise InvalidInput(f"conditional: attesa matrice {n}x{n}")
        object.__setattr__(self, "counts", rows)

    @property
    def total(self) -> int:
        return sum(sum(r) for r in self.counts)

    def context_total(self, context: str) -> int:
        return sum(self.counts[self.alphabet.index(context)])

    def context_model(self, context: str) -> FrequencyModel:
        """Order-0 model restricted to the symbols following ``context`` (may be empty)."""
        row = self.counts[self.alphabet.index(context)]
        return FrequencyModel(alphabet=self.alphabet, counts=row)

    def probability(self, context: str, symbol: str) -> float:
        """P(symbol | context); 0.0 when the context was never observed."""
        return self.context_model(context).probability(symbol)

    def observed_contexts(self) -> list[str]:
        return [c for c, row in zip(self.alphabet.symbols, self.counts) if sum(row) > 0]

    def row_sums(self) -> dict[str, float]:
        """Sum of conditional probabilities per context: 1 if observed, 0 otherwise."""
        out: dict[str, float] = {}
        for c in self.alphabet.symbols:
            out[c] = sum(self.context_model(c).probabilities())
        return out


def _require_symbols(symbols: Sequence[str], alphabet: Alphabet, where: str) -> None:
    if len(symbols) == 0:
        raise InvalidInput(f"{where}: sequenza vuota")
    alphabet.check(symbols)


def build_frequency_model(symbols: Sequence[str], alphabet: Alphabet) -> FrequencyModel:
    _require_symbols(symbols, alphabet, "build_frequency_model")

    counts = [0] * alphabet.size
    for s in symbols:
        counts[alphabet.index(s)] += 1
    return FrequencyModel(alphabet=alphabet, counts=tuple(counts))


def build_conditional_frequency_model(
    symbols: Sequence[str], alphabet: Alphabet
) -> ConditionalFrequencyModel:
    """
    Slide a window of size 2 over ``symbols``: each adjacent pair
    (s[i], s[i+1]) is one observation with context s[i].
    """
    _require_symbols(symbols, alphabet, "build_conditional_frequency_model")

    n = alphabet.size
    counts = [[0] * n for _ in range(n)]
    idx = [alphabet.index(s) for s in symbols]
    for a, b in zip(idx, idx[1:]):
        counts[a][b] += 1
    return ConditionalFrequencyModel(
        alphabet=alphabet, counts=tuple(tuple(r) for r in counts)
    )
