#!/usr/bin/env python3
"""Write docs/exit_codes.md from the EXIT_CODES table in markov_huffman.errors."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    repo = Path(__file__).resolve().parents[1]
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("--check", action="store_true", help="fail if docs/exit_codes.md is stale")
    args = ap.parse_args(argv)

    sys.path.insert(0, str(repo / "src"))
    from markov_huffman import errors  # noqa: E402

    out = repo / "docs" / "exit_codes.md"
    text = errors.render_exit_codes_markdown()

    if args.check:
        current = out.read_text(encoding="utf-8") if out.is_file() else ""
        if current != text:
            print(f"[markov-huffman] {out} non aggiornato: rigenera", file=sys.stderr)
            return 1
        print(f"[markov-huffman] {out} OK")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    print(f"[markov-huffman] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
