"""markov-huffman CLI.

This is the stable CLI entrypoint (console-script: ``markov-huffman``).

Commands:
  - analyze        order-0 + order-1 Huffman analysis of a text file
  - codes          print a code table (order-0, or one order-1 context)
  - roundtrip      encode + decode a text file, fail if it does not match
  - spec-validate  validate an analysis spec (v1)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from markov_huffman.analysis_spec import (
    AnalysisSpec,
    AnalysisSpecError,
    default_analysis_spec,
    parse_analysis_spec,
)
from markov_huffman.errors import EXIT_GENERIC, EXIT_USAGE, MarkovHuffmanError, UsageError


def _pkg_version() -> str:
    try:
        from importlib.metadata import PackageNotFoundError, version

        try:
            return version("markov-huffman")
        except PackageNotFoundError:
            return "0+unknown"
    except Exception:
        return "0+unknown"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--spec",
        default=None,
        help="Analysis spec (JSON). Use '@file.json' to load from file, or pass JSON inline.",
    )
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _read_spec_arg(spec_arg: str) -> tuple[str, str]:
    """'@file.json' or inline JSON -> (json text, label for error messages)."""
    s = spec_arg.strip()
    if not s.startswith("@"):
        return s, "inline"
    p = Path(s[1:]).expanduser()
    if not p.is_file():
        raise AnalysisSpecError(f"spec: file non trovato: {p}")
    return p.read_text(encoding="utf-8"), f"in {p}"


def _load_spec(spec_arg: str | None) -> AnalysisSpec:
    if spec_arg is None:
        return default_analysis_spec()
    raw, source = _read_spec_arg(spec_arg)
    return parse_analysis_spec(raw, source=source)


def _cmd_analyze(input_path: Path, spec_arg: str | None, *, as_json: bool, jobs: int | None) -> int:
    from markov_huffman.analysis import analyze_symbols, read_symbols
    from markov_huffman.report import render_text, report_to_json

    spec = _load_spec(spec_arg)
    rep = analyze_symbols(read_symbols(input_path, spec), spec, jobs=jobs)
    if as_json:
        print(report_to_json(rep))
    else:
        sys.stdout.write(render_text(rep))
    return 0 if (rep.order0.roundtrip_ok and rep.order1.roundtrip_ok) else EXIT_GENERIC


def _cmd_codes(input_path: Path, spec_arg: str | None, *, context: str | None) -> int:
    from markov_huffman.analysis import read_symbols
    from markov_huffman.core.code_table import extract_code_table
    from markov_huffman.core.frequency import (
        build_conditional_frequency_model,
        build_frequency_model,
    )
    from markov_huffman.core.huffman_tree import build_huffman_tree
    from markov_huffman.report import render_code_table

    spec = _load_spec(spec_arg)
    symbols = read_symbols(input_path, spec)
    a = spec.alphabet

    if context is None:
        model = build_frequency_model(symbols, a)
    else:
        ctx = " " if context == "blank" else context
        if spec.case_fold:
            ctx = ctx.upper()
        if ctx not in a:
            raise UsageError(f"codes: contesto fuori alfabeto: {context!r}")
        model = build_conditional_frequency_model(symbols, a).context_model(ctx)

    table, avg = extract_code_table(build_huffman_tree(model, spec.variance))  # type: ignore[arg-type]
    for line in render_code_table(table, a):
        print(line)
    print(f"Average codeword length: {avg:.4f} bits.")
    return 0


def _cmd_roundtrip(input_path: Path, spec_arg: str | None, *, order: int) -> int:
    from markov_huffman.analysis import analyze_order0, analyze_order1, read_symbols

    spec = _load_spec(spec_arg)
    symbols = read_symbols(input_path, spec)
    o0 = analyze_order0(symbols, spec)
    if order == 0:
        ok, bits = o0.roundtrip_ok, o0.encoded_bits
    else:
        o1 = analyze_order1(symbols, spec, o0)
        ok, bits = o1.roundtrip_ok, o1.encoded_bits
    if not ok:
        print(f"[markov-huffman] order-{order}: round trip FALLITO", file=sys.stderr)
        return EXIT_GENERIC
    print(f"OK order-{order}: {len(symbols)} symbols, {bits} bits")
    return 0


def _cmd_spec_validate(spec_arg: str) -> int:
    # load is the validation
    _load_spec(spec_arg)
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="markov-huffman",
        description="Order-0 / order-1 minimum-variance Huffman coding analysis",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {_pkg_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_a = sub.add_parser("analyze", help="Entropy, code tables and efficiency (order-0 + order-1)")
    p_a.add_argument("input", type=Path)
    p_a.add_argument("--json", action="store_true", help="Print the report as JSON")
    p_a.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Parallel jobs for the per-context loop (default: spec.jobs or 1)",
    )
    _add_common_args(p_a)

    p_c = sub.add_parser("codes", help="Print a code table")
    p_c.add_argument("input", type=Path)
    p_c.add_argument(
        "--context",
        default=None,
        help="Order-1 context symbol ('blank' for the space). Default: order-0 table.",
    )
    _add_common_args(p_c)

    p_r = sub.add_parser("roundtrip", help="Encode + decode and compare")
    p_r.add_argument("input", type=Path)
    p_r.add_argument("--order", type=int, choices=[0, 1], default=0)
    _add_common_args(p_r)

    p_v = sub.add_parser("spec-validate", help="Validate an analysis spec (v1)")
    p_v.add_argument("spec", help="Analysis spec JSON (@file.json or inline JSON)")
    p_v.add_argument("--debug", action="store_true", help="Show stack traces on errors")

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "analyze":
            if ns.jobs is not None and ns.jobs < 1:
                raise UsageError("analyze: --jobs deve essere >= 1")
            return _cmd_analyze(ns.input, ns.spec, as_json=bool(ns.json), jobs=ns.jobs)
        if ns.cmd == "codes":
            return _cmd_codes(ns.input, ns.spec, context=ns.context)
        if ns.cmd == "roundtrip":
            return _cmd_roundtrip(ns.input, ns.spec, order=int(ns.order))
        if ns.cmd == "spec-validate":
            return _cmd_spec_validate(str(ns.spec))
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except AnalysisSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[markov-huffman] {e}", file=sys.stderr)
        return EXIT_USAGE
    except MarkovHuffmanError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[markov-huffman] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[markov-huffman] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
