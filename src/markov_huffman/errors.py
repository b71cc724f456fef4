"""Typed errors for markov-huffman.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Library code raises; the CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_INVALID_INPUT = 20
EXIT_DEGENERATE_DISTRIBUTION = 21
EXIT_SYMBOL_NOT_IN_TABLE = 22
EXIT_MALFORMED_STREAM = 23
EXIT_UNDEFINED_METRIC = 24


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid analysis spec, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(
        EXIT_INVALID_INPUT, "INVALID_INPUT", "Empty symbol sequence or symbol outside the alphabet"
    ),
    ExitCodeInfo(
        EXIT_DEGENERATE_DISTRIBUTION,
        "DEGENERATE_DISTRIBUTION",
        "All probabilities are zero (nothing to encode)",
    ),
    ExitCodeInfo(
        EXIT_SYMBOL_NOT_IN_TABLE, "SYMBOL_NOT_IN_TABLE", "Encode-time lookup miss in the code table"
    ),
    ExitCodeInfo(
        EXIT_MALFORMED_STREAM,
        "MALFORMED_STREAM",
        "Truncated or corrupt bit stream, or a code table that is not prefix-free",
    ),
    ExitCodeInfo(
        EXIT_UNDEFINED_METRIC, "UNDEFINED_METRIC", "Metric not computable (e.g. zero average length)"
    ),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_NAME: dict[str, int] = {e.name: e.code for e in EXIT_CODES}
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def exit_code_by_name(name: str) -> int | None:
    return _EXIT_CODE_BY_NAME.get(name.strip().upper())


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/markov_huffman/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every library error extends `MarkovHuffmanError` and carries an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append("- `analyze --json` prints the report as JSON on stdout.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class MarkovHuffmanError(Exception):
    """Base error for markov-huffman."""

    exit_code: int = EXIT_GENERIC


class UsageError(MarkovHuffmanError):
    exit_code = EXIT_USAGE


class InvalidInput(MarkovHuffmanError, ValueError):
    """Empty sequence, or a symbol that is not part of the alphabet."""

    exit_code = EXIT_INVALID_INPUT


class DegenerateDistribution(MarkovHuffmanError, ValueError):
    """All weights are zero: there is no tree to build."""

    exit_code = EXIT_DEGENERATE_DISTRIBUTION


class SymbolNotInTable(MarkovHuffmanError, KeyError):
    exit_code = EXIT_SYMBOL_NOT_IN_TABLE

    def __init__(self, symbol: str, where: str = "encode") -> None:
        super().__init__(f"{where}: simbolo {symbol!r} assente dalla code table")
        self.symbol = symbol

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class MalformedStream(MarkovHuffmanError):
    exit_code = EXIT_MALFORMED_STREAM


class InvalidCodeTable(MalformedStream):
    """The code table cannot be turned into a decode trie (not prefix-free, empty codeword...)."""


class UndefinedMetric(MarkovHuffmanError):
    exit_code = EXIT_UNDEFINED_METRIC
