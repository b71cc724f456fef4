"""Rendering of an AnalysisReport (JSON + plain text).

Determinism note: the JSON report carries no timestamps and no paths, so the
same input text always produces byte-identical output.
"""

from __future__ import annotations

import json
from typing import Any

from markov_huffman.analysis import AnalysisReport
from markov_huffman.core.alphabet import Alphabet
from markov_huffman.core.code_table import CodeTable
from markov_huffman.markov.conditional import ConditionalCodeTable

REPORT_SCHEMA = "markov-huffman.report.v1"

_RULE = "-" * 61


def _r(x: float | None, nd: int = 6) -> float | None:
    return None if x is None else round(float(x), nd)


def _pct(x: float | None) -> str:
    return "N/A" if x is None else f"{x:.3f} %"


def code_table_rows(table: CodeTable, alphabet: Alphabet) -> list[tuple[str, str]]:
    """(label, codeword) in alphabet order; symbols without a codeword are skipped."""
    return [(alphabet.label(s), table[s]) for s in alphabet.symbols if s in table]


def conditional_to_dict(cond: ConditionalCodeTable, alphabet: Alphabet) -> dict[str, Any]:
    contexts: list[dict[str, Any]] = []
    for r in cond.results:
        m = r.metrics
        contexts.append(
            {
                "context": alphabet.label(r.context),
                "observations": r.observations,
                "average_length": _r(m.average_length) if m else None,
                "entropy": _r(m.entropy) if m else None,
                "efficiency": _r(m.efficiency) if m else None,
                "fallback": r.fallback,
                "error": None if r.error is None else str(r.error),
                "codes": dict(code_table_rows(r.table, alphabet)) if r.table is not None else None,
            }
        )
    return {
        "empty_context": cond.empty_context,
        "contexts": contexts,
        "mean": {
            "average_length": _r(cond.mean_average_length),
            "entropy": _r(cond.mean_entropy),
            "efficiency": _r(cond.mean_efficiency),
        },
    }


def report_to_dict(rep: AnalysisReport) -> dict[str, Any]:
    a = rep.spec.alphabet
    o0 = rep.order0
    o1 = rep.order1
    return {
        "schema": REPORT_SCHEMA,
        "spec": rep.spec.to_dict(),
        "n_symbols": rep.n_symbols,
        "order0": {
            "entropy_iid": _r(o0.entropy_iid),
            "entropy": _r(o0.metrics.entropy),
            "average_length": _r(o0.metrics.average_length),
            "efficiency": _r(o0.metrics.efficiency),
            "redundancy": _r(o0.metrics.redundancy),
            "length_variance": _r(o0.metrics.length_variance),
            "histogram": {a.label(s): int(c) for s, c in zip(a.symbols, o0.model.counts)},
            "codes": dict(code_table_rows(o0.table, a)),
            "encoded_bits": o0.encoded_bits,
            "packed_bytes": o0.packed_bytes,
            "roundtrip_ok": o0.roundtrip_ok,
        },
        "order1": {
            **conditional_to_dict(o1.tables, a),
            "encoded_bits": o1.encoded_bits,
            "packed_bytes": o1.packed_bytes,
            "roundtrip_ok": o1.roundtrip_ok,
        },
        "baselines": [b.to_dict() for b in rep.baselines],
    }


def report_to_json(rep: AnalysisReport) -> str:
    return json.dumps(report_to_dict(rep), ensure_ascii=False, sort_keys=True, indent=2)


def render_code_table(table: CodeTable, alphabet: Alphabet) -> list[str]:
    return [f"'{label}': {code}" for label, code in code_table_rows(table, alphabet)]


def render_context_table(cond: ConditionalCodeTable, alphabet: Alphabet) -> list[str]:
    lines = ["     | Average codeword length |   Entropy   | Efficiency"]
    for r in cond.results:
        if r.metrics is None:
            lines.append(f" '{r.context}' |           N/A           |     N/A     | N/A")
            continue
        m = r.metrics
        lines.append(
            f" '{r.context}' |       {m.average_length:.4f} bits       "
            f"| {m.entropy:.4f} bits | {_pct(m.efficiency)}"
        )
    avg = cond.mean_average_length
    h = cond.mean_entropy
    lines.append(
        f"Mean |       {'N/A' if avg is None else f'{avg:.4f} bits'}       "
        f"| {'N/A' if h is None else f'{h:.4f} bits'} | {_pct(cond.mean_efficiency)}"
    )
    return lines


def render_text(rep: AnalysisReport) -> str:
    a = rep.spec.alphabet
    o0 = rep.order0
    o1 = rep.order1
    lines: list[str] = []
    lines.append(_RULE)
    lines.append(f"Analysis: {rep.spec.name} ({rep.n_symbols} symbols)")
    lines.append(_RULE)
    lines.append(f"Entropy in case of i.i.d.: {o0.entropy_iid:.4f} bits.")
    lines.append(f"Entropy: {o0.metrics.entropy:.4f} bits.")
    lines.append(f"Average codeword length: {o0.metrics.average_length:.4f} bits.")
    lines.append(f"Efficiency: {_pct(o0.metrics.efficiency)}.")
    if o0.roundtrip_ok:
        lines.append("Successful encoding and decoding. The Huffman codes are:")
        lines.extend(render_code_table(o0.table, a))
    else:
        lines.append("Error occured after encoding and decoding.")
    lines.append(_RULE)
    lines.append("1st order Markov model analysis:")
    lines.extend(render_context_table(o1.tables, a))
    lines.append(
        f"Order-1 round trip: {'OK' if o1.roundtrip_ok else 'FAILED'} "
        f"({o1.encoded_bits} bits vs {o0.encoded_bits} bits order-0)"
    )
    if rep.baselines:
        lines.append(_RULE)
        for b in rep.baselines:
            lines.append(
                f"Baseline {b.codec_id}: {b.compressed_bytes} bytes, "
                f"{b.bits_per_symbol:.4f} bits/symbol"
            )
    lines.append(_RULE)
    return "\n".join(lines) + "\n"
