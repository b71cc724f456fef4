"""Information-theoretic metrics: pure functions over a model/table pair."""

from __future__ import annotations

import math
from dataclasses import dataclass

from markov_huffman.core.alphabet import Alphabet
from markov_huffman.core.code_table import CodeTable
from markov_huffman.core.frequency import FrequencyModel
from markov_huffman.errors import UndefinedMetric


def entropy_of(probabilities) -> float:
    # 0 * log2(0) := 0; "+ 0.0" turns -0.0 into 0.0
    return -sum(p * math.log2(p) for p in probabilities if p > 0) + 0.0


def entropy(model: FrequencyModel) -> float:
    return entropy_of(model.probabilities())


def entropy_iid(alphabet: Alphabet) -> float:
    """Reference entropy of a uniform distribution over the alphabet."""
    return math.log2(alphabet.size)


def average_length(model: FrequencyModel, table: CodeTable) -> float:
    return table.average_length(model)


def efficiency_from(entropy_bits: float, avg_len: float) -> float:
    if avg_len <= 0:
        raise UndefinedMetric("efficiency: lunghezza media zero")
    return entropy_bits / avg_len * 100.0


def efficiency(model: FrequencyModel, table: CodeTable) -> float:
    """entropy / average length * 100. Raises UndefinedMetric when the average length is 0."""
    return efficiency_from(entropy(model), average_length(model, table))


def length_variance(model: FrequencyModel, table: CodeTable) -> float:
    avg = average_length(model, table)
    var = 0.0
    for sym, p in model.distribution().items():
        if p > 0:
            var += p * (len(table[sym]) - avg) ** 2
    return var


@dataclass(frozen=True)
class CodeMetrics:
    entropy: float
    average_length: float
    efficiency: float | None  # None = N/A
    redundancy: float
    length_variance: float

    def to_dict(self) -> dict[str, float | None]:
        return {
            "entropy": self.entropy,
            "average_length": self.average_length,
            "efficiency": self.efficiency,
            "redundancy": self.redundancy,
            "length_variance": self.length_variance,
        }


def compute_metrics(model: FrequencyModel, table: CodeTable) -> CodeMetrics:
    h = entropy(model)
    avg = average_length(model, table)
    try:
        eff: float | None = efficiency_from(h, avg)
    except UndefinedMetric:
        eff = None
    return CodeMetrics(
        entropy=h,
        average_length=avg,
        efficiency=eff,
        redundancy=avg - h,
        length_variance=length_variance(model, table),
    )
