"""Analysis pipeline (Layer 3).

text -> symbols -> order-0 model/tree/table/metrics + round trip
                -> order-1 tables/per-context metrics/means + round trip
                -> byte-compressor baselines
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from markov_huffman.analysis_spec import AnalysisSpec, default_analysis_spec
from markov_huffman.core.alphabet import symbols_from_text
from markov_huffman.core.baselines import BaselineResult, run_baseline
from markov_huffman.core.bitstream import decode, encode, pack_bits
from markov_huffman.core.code_table import CodeTable, extract_code_table
from markov_huffman.core.frequency import (
    ConditionalFrequencyModel,
    FrequencyModel,
    build_conditional_frequency_model,
    build_frequency_model,
)
from markov_huffman.core.huffman_tree import build_huffman_tree
from markov_huffman.core.metrics import CodeMetrics, compute_metrics, entropy_iid
from markov_huffman.markov.conditional import (
    ConditionalCodeTable,
    build_conditional_code_tables,
    decode_order1,
    encode_order1,
)


@dataclass(frozen=True)
class Order0Result:
    model: FrequencyModel
    table: CodeTable
    metrics: CodeMetrics
    entropy_iid: float
    encoded_bits: int
    packed_bytes: int
    roundtrip_ok: bool


@dataclass(frozen=True)
class Order1Result:
    model: ConditionalFrequencyModel
    tables: ConditionalCodeTable
    encoded_bits: int
    packed_bytes: int
    roundtrip_ok: bool


@dataclass(frozen=True)
class AnalysisReport:
    spec: AnalysisSpec
    n_symbols: int
    order0: Order0Result
    order1: Order1Result
    baselines: tuple[BaselineResult, ...] = ()


def analyze_order0(symbols: Sequence[str], spec: AnalysisSpec) -> Order0Result:
    model = build_frequency_model(symbols, spec.alphabet)
    root = build_huffman_tree(model, spec.variance)  # type: ignore[arg-type]
    table, _ = extract_code_table(root)
    metrics = compute_metrics(model, table)

    bits = encode(symbols, table)
    back = decode(bits, table, len(symbols))
    packed, _ = pack_bits(bits)

    return Order0Result(
        model=model,
        table=table,
        metrics=metrics,
        entropy_iid=entropy_iid(spec.alphabet),
        encoded_bits=len(bits),
        packed_bytes=len(packed),
        roundtrip_ok=list(back) == list(symbols),
    )


def analyze_order1(
    symbols: Sequence[str], spec: AnalysisSpec, order0: Order0Result, *, jobs: int | None = None
) -> Order1Result:
    cond = build_conditional_frequency_model(symbols, spec.alphabet)
    tables = build_conditional_code_tables(
        cond,
        variance=spec.variance,  # type: ignore[arg-type]
        empty_context=spec.empty_context,  # type: ignore[arg-type]
        order0=order0.model,
        jobs=spec.jobs if jobs is None else jobs,
    )

    bits = encode_order1(symbols, tables, order0.table)
    back = decode_order1(bits, tables, order0.table, len(symbols))
    packed, _ = pack_bits(bits)

    return Order1Result(
        model=cond,
        tables=tables,
        encoded_bits=len(bits),
        packed_bytes=len(packed),
        roundtrip_ok=list(back) == list(symbols),
    )


def analyze_symbols(
    symbols: Sequence[str], spec: AnalysisSpec | None = None, *, jobs: int | None = None
) -> AnalysisReport:
    spec = spec or default_analysis_spec()
    o0 = analyze_order0(symbols, spec)
    o1 = analyze_order1(symbols, spec, o0, jobs=jobs)
    baselines = tuple(run_baseline(b, list(symbols)) for b in spec.baselines)
    return AnalysisReport(spec=spec, n_symbols=len(symbols), order0=o0, order1=o1, baselines=baselines)


def analyze_text(text: str, spec: AnalysisSpec | None = None, *, jobs: int | None = None) -> AnalysisReport:
    spec = spec or default_analysis_spec()
    symbols = symbols_from_text(
        text, spec.alphabet, case_fold=spec.case_fold, unknown=spec.unknown  # type: ignore[arg-type]
    )
    return analyze_symbols(symbols, spec, jobs=jobs)


def read_symbols(path: Path, spec: AnalysisSpec) -> list[str]:
    text = path.read_text(encoding="utf-8")
    return symbols_from_text(
        text, spec.alphabet, case_fold=spec.case_fold, unknown=spec.unknown  # type: ignore[arg-type]
    )
