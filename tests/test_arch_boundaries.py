from __future__ import annotations

import ast
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
PKG = SRC / "markov_huffman"

# Layer 3: text in, report out. Everything else is the coding library.
ORCH = {"markov_huffman.cli", "markov_huffman.analysis", "markov_huffman.report"}


def _module_name(py: Path) -> str:
    parts = py.relative_to(SRC).with_suffix("").parts
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def _imported_modules(py: Path) -> list[tuple[int, str]]:
    tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
    out: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            out.extend((node.lineno, a.name) for a in node.names)
        elif isinstance(node, ast.ImportFrom):
            # the package only uses absolute imports
            assert node.level == 0, f"{py}:{node.lineno}: import relativo"
            out.append((node.lineno, node.module or ""))
    return out


def _is_orch(mod: str) -> bool:
    return any(mod == o or mod.startswith(o + ".") for o in ORCH)


def _library_modules() -> list[Path]:
    return sorted(p for p in PKG.rglob("*.py") if not _is_orch(_module_name(p)))


def test_layers_split_as_expected() -> None:
    names = {_module_name(p) for p in PKG.rglob("*.py")}
    assert ORCH <= names
    assert "markov_huffman.analysis_spec" in names
    assert not _is_orch("markov_huffman.analysis_spec")


@pytest.mark.parametrize("py", _library_modules(), ids=lambda p: _module_name(p))
def test_library_never_imports_orchestrator(py: Path) -> None:
    bad = [f"{py.name}:{ln} -> {mod}" for ln, mod in _imported_modules(py) if _is_orch(mod)]
    assert not bad, "LOW -> ORCH: " + ", ".join(bad)
