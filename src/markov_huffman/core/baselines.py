"""Byte-compressor baselines.

Reference numbers for the Huffman models: how many bits per symbol a general
purpose compressor needs for the same symbol stream (one byte per symbol).
"""

from __future__ import annotations

import zlib
from dataclasses import dataclass

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None

BASELINE_IDS: tuple[str, ...] = ("zlib", "zstd")


@dataclass(frozen=True)
class BaselineResult:
    codec_id: str
    compressed_bytes: int
    bits_per_symbol: float

    def to_dict(self) -> dict[str, object]:
        return {
            "codec": self.codec_id,
            "compressed_bytes": self.compressed_bytes,
            "bits_per_symbol": self.bits_per_symbol,
        }


@dataclass
class BaselineZlib:
    """zlib/DEFLATE (no external deps)."""

    level: int = 9
    codec_id: str = "zlib"

    def __post_init__(self) -> None:
        if not (0 <= self.level <= 9):
            raise ValueError(f"zlib level must be 0..9, got {self.level}")

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(bytes(data), self.level)


@dataclass
class BaselineZstd:
    """
    zstd, "tight" frame: no content size, no checksum, so the size is as
    close as possible to the raw compressed block.
    """

    level: int = 19
    codec_id: str = "zstd"

    def _require(self) -> None:
        if zstd is None:
            raise RuntimeError(
                "Modulo 'zstandard' non disponibile. Installa con: python3 -m pip install zstandard"
            )

    def compress(self, data: bytes) -> bytes:
        self._require()
        c = zstd.ZstdCompressor(
            level=int(self.level),
            write_content_size=False,
            write_checksum=False,
        )
        return c.compress(bytes(data))


def have_zstd() -> bool:
    return zstd is not None


def get_baseline(codec_id: str) -> BaselineZlib | BaselineZstd:
    cid = codec_id.strip().lower()
    if cid == "zlib":
        return BaselineZlib()
    if cid == "zstd":
        return BaselineZstd()
    raise ValueError(f"baseline sconosciuta: {codec_id!r} (attese: {', '.join(BASELINE_IDS)})")


def run_baseline(codec_id: str, symbols: list[str]) -> BaselineResult:
    data = "".join(symbols).encode("utf-8")
    comp = get_baseline(codec_id).compress(data)
    bps = (len(comp) * 8 / len(symbols)) if symbols else 0.0
    return BaselineResult(codec_id=codec_id, compressed_bytes=len(comp), bits_per_symbol=bps)
