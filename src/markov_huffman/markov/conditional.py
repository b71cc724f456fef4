"""Order-1 (first-order Markov) extension.

One independent Huffman code per context symbol (the preceding symbol in the
stream). Contexts are processed independently: a failure in one context is
stored in its ContextResult and never aborts the others.

Empty-context policy (context never observed in the data):
  - "skip":    no table, the context's error is DegenerateDistribution
  - "order0":  table built from the order-0 distribution
  - "uniform": table built from a uniform distribution over the alphabet
Whatever the policy, only observed contexts enter the aggregate means.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from markov_huffman.core.bitstream import decode_from, encode
from markov_huffman.core.code_table import CodeTable, extract_code_table
from markov_huffman.core.frequency import ConditionalFrequencyModel, FrequencyModel
from markov_huffman.core.huffman_tree import VariancePolicy, build_huffman_tree
from markov_huffman.core.metrics import CodeMetrics, compute_metrics
from markov_huffman.errors import (
    DegenerateDistribution,
    MalformedStream,
    MarkovHuffmanError,
    SymbolNotInTable,
)

EmptyContextPolicy = Literal["skip", "order0", "uniform"]
EMPTY_CONTEXT_POLICIES: tuple[str, ...] = ("skip", "order0", "uniform")


@dataclass(frozen=True)
class ContextResult:
    context: str
    observations: int
    model: FrequencyModel
    table: CodeTable | None = None
    metrics: CodeMetrics | None = None
    fallback: str | None = None
    error: MarkovHuffmanError | None = None

    @property
    def observed(self) -> bool:
        return self.observations > 0


@dataclass(frozen=True)
class ConditionalCodeTable:
    """Context symbol -> CodeTable, plus the per-context results and means."""

    results: tuple[ContextResult, ...]
    empty_context: str = "skip"

    @property
    def tables(self) -> dict[str, CodeTable]:
        return {r.context: r.table for r in self.results if r.table is not None}

    def table_for(self, context: str) -> CodeTable:
        t = self.tables.get(context)
        if t is None:
            raise SymbolNotInTable(context, where="order-1: contesto senza code table")
        return t

    def result_for(self, context: str) -> ContextResult:
        for r in self.results:
            if r.context == context:
                return r
        raise KeyError(context)

    def observed_results(self) -> list[ContextResult]:
        return [r for r in self.results if r.observed and r.metrics is not None]

    @property
    def mean_average_length(self) -> float | None:
        rs = self.observed_results()
        if not rs:
            return None
        return sum(r.metrics.average_length for r in rs) / len(rs)  # type: ignore[union-attr]

    @property
    def mean_entropy(self) -> float | None:
        rs = self.observed_results()
        if not rs:
            return None
        return sum(r.metrics.entropy for r in rs) / len(rs)  # type: ignore[union-attr]

    @property
    def mean_efficiency(self) -> float | None:
        """mean_entropy / mean_average_length * 100 (not the mean of the efficiencies)."""
        h = self.mean_entropy
        avg = self.mean_average_length
        if h is None or avg is None or avg <= 0:
            return None
        return h / avg * 100.0


def _fallback_model(
    cond: ConditionalFrequencyModel, policy: str, order0: FrequencyModel | None
) -> FrequencyModel | None:
    if policy == "skip":
        return None
    if policy == "uniform":
        return FrequencyModel(alphabet=cond.alphabet, counts=(1,) * cond.alphabet.size)
    if order0 is not None:
        return order0
    # column sums: every symbol that followed some context
    n = cond.alphabet.size
    return FrequencyModel(
        alphabet=cond.alphabet,
        counts=tuple(sum(cond.counts[i][j] for i in range(n)) for j in range(n)),
    )


def _build_context(
    cond: ConditionalFrequencyModel,
    context: str,
    variance: VariancePolicy,
    policy: str,
    fallback: FrequencyModel | None,
) -> ContextResult:
    model = cond.context_model(context)
    observations = int(model.total)

    if observations == 0:
        err = DegenerateDistribution(f"contesto {context!r}: nessuna osservazione")
        if fallback is None:
            return ContextResult(context=context, observations=0, model=model, error=err)
        try:
            table, _ = extract_code_table(build_huffman_tree(fallback, variance))
        except MarkovHuffmanError as e:
            return ContextResult(context=context, observations=0, model=model, error=e)
        return ContextResult(
            context=context, observations=0, model=model, table=table, fallback=policy, error=err
        )

    try:
        table, _ = extract_code_table(build_huffman_tree(model, variance))
        metrics = compute_metrics(model, table)
    except MarkovHuffmanError as e:
        return ContextResult(context=context, observations=observations, model=model, error=e)
    return ContextResult(
        context=context, observations=observations, model=model, table=table, metrics=metrics
    )


def build_conditional_code_tables(
    cond: ConditionalFrequencyModel,
    *,
    variance: VariancePolicy = "min",
    empty_context: EmptyContextPolicy = "skip",
    order0: FrequencyModel | None = None,
    jobs: int = 1,
) -> ConditionalCodeTable:
    """
    Run tree construction + code extraction + metrics once per context, in
    alphabet order. With jobs > 1 contexts are spread over a thread pool;
    each worker owns one context and results keep alphabet order.
    """
    if empty_context not in EMPTY_CONTEXT_POLICIES:
        raise ValueError(f"empty_context policy non supportata: {empty_context!r}")
    jobs = max(1, int(jobs))

    fallback = _fallback_model(cond, empty_context, order0)
    contexts = list(cond.alphabet.symbols)

    def work(c: str) -> ContextResult:
        return _build_context(cond, c, variance, empty_context, fallback)

    if jobs > 1 and len(contexts) > 1:
        from concurrent.futures import ThreadPoolExecutor

        with ThreadPoolExecutor(max_workers=jobs) as ex:
            results = list(ex.map(work, contexts))
    else:
        results = [work(c) for c in contexts]

    return ConditionalCodeTable(results=tuple(results), empty_context=empty_context)


# -------------------
# Order-1 stream coding
# -------------------


def encode_order1(
    symbols: Sequence[str], cond: ConditionalCodeTable, first_table: CodeTable
) -> str:
    """First symbol with ``first_table`` (order-0), every next one with the table of its predecessor."""
    if len(symbols) == 0:
        return ""
    tables = cond.tables
    parts = [encode(symbols[:1], first_table)]
    for prev, sym in zip(symbols, symbols[1:]):
        table = tables.get(prev)
        if table is None:
            raise SymbolNotInTable(prev, where="encode_order1: contesto senza code table")
        parts.append(encode((sym,), table))
    return "".join(parts)


def decode_order1(
    bits: str, cond: ConditionalCodeTable, first_table: CodeTable, expected_count: int
) -> list[str]:
    if expected_count < 0:
        raise ValueError(f"decode_order1: expected_count negativo: {expected_count}")
    if expected_count == 0:
        return []

    tables = cond.tables
    out: list[str] = []
    pos = 0
    table = first_table
    while len(out) < expected_count:
        if pos >= len(bits):
            raise MalformedStream(
                f"decode_order1: attesi {expected_count} simboli, bitstream finito dopo {len(out)}"
            )
        sym, pos = decode_from(bits, pos, table.trie, where="decode_order1")
        out.append(sym)
        nxt = tables.get(sym)
        if nxt is None and len(out) < expected_count:
            raise SymbolNotInTable(sym, where="decode_order1: contesto senza code table")
        table = nxt  # type: ignore[assignment]
    return out
