from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from markov_huffman.errors import InvalidInput

UnknownPolicy = Literal["error", "drop"]

# Ordine fisso: blank, cifre, lettere maiuscole.
DEFAULT_SYMBOLS: tuple[str, ...] = (" ",) + tuple("0123456789") + tuple("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

_LABEL_OVERRIDES = {" ": "blank"}


@dataclass(frozen=True)
class Alphabet:
    """
    Fixed, ordered set of symbols.

    The order is only used for deterministic tie-breaking and for reporting,
    it carries no probability meaning.
    """

    symbols: tuple[str, ...]
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        syms = tuple(self.symbols)
        if not syms:
            raise InvalidInput("alphabet: nessun simbolo")
        index: dict[str, int] = {}
        for i, s in enumerate(syms):
            if not isinstance(s, str) or not s:
                raise InvalidInput(f"alphabet: simbolo non valido alla posizione {i}: {s!r}")
            if s in index:
                raise InvalidInput(f"alphabet: simbolo duplicato {s!r}")
            index[s] = i
        object.__setattr__(self, "symbols", syms)
        object.__setattr__(self, "_index", index)

    @property
    def size(self) -> int:
        return len(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self):
        return iter(self.symbols)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._index

    def index(self, symbol: str) -> int:
        try:
            return self._index[symbol]
        except KeyError:
            raise InvalidInput(f"alphabet: simbolo fuori alfabeto: {symbol!r}") from None

    def label(self, symbol: str) -> str:
        """Human label used by reports ('blank' for the space)."""
        self.index(symbol)
        return _LABEL_OVERRIDES.get(symbol, symbol)

    def check(self, symbols: Iterable[str]) -> None:
        """Raise InvalidInput on the first symbol outside the alphabet."""
        for pos, s in enumerate(symbols):
            if s not in self._index:
                raise InvalidInput(f"alphabet: simbolo fuori alfabeto {s!r} in posizione {pos}")


DEFAULT_ALPHABET = Alphabet(DEFAULT_SYMBOLS)


def symbols_from_text(
    text: str,
    alphabet: Alphabet = DEFAULT_ALPHABET,
    *,
    case_fold: bool = True,
    unknown: UnknownPolicy = "error",
) -> list[str]:
    """
    Map raw text onto single-character alphabet symbols.

    Line terminators are dropped. With unknown="drop" characters outside the
    alphabet are skipped, with unknown="error" they raise InvalidInput.
    """
    if unknown not in ("error", "drop"):
        raise ValueError(f"unknown policy non supportata: {unknown!r}")

    out: list[str] = []
    for pos, ch in enumerate(text):
        if ch in "\r\n":
            continue
        if case_fold:
            ch = ch.upper()
        if ch in alphabet:
            out.append(ch)
        elif unknown == "error":
            raise InvalidInput(f"text: carattere fuori alfabeto {ch!r} in posizione {pos}")
    return out


def alphabet_from_spec(value: str | Sequence[str]) -> Alphabet:
    if isinstance(value, str):
        if value != "default":
            raise InvalidInput(f"alphabet: preset sconosciuto {value!r}")
        return DEFAULT_ALPHABET
    return Alphabet(tuple(value))
