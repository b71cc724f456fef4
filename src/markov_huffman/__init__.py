"""markov-huffman: minimum-variance Huffman codes, order-0 and order-1 (per-context) models."""

from __future__ import annotations

from markov_huffman.core.alphabet import DEFAULT_ALPHABET, Alphabet, symbols_from_text
from markov_huffman.core.bitstream import decode, encode, pack_bits, unpack_bits
from markov_huffman.core.code_table import CodeTable, extract_code_table
from markov_huffman.core.frequency import (
    ConditionalFrequencyModel,
    FrequencyModel,
    build_conditional_frequency_model,
    build_frequency_model,
)
from markov_huffman.core.huffman_tree import HuffmanNode, build_huffman_tree
from markov_huffman.core.metrics import average_length, efficiency, entropy, entropy_iid
from markov_huffman.markov.conditional import (
    ConditionalCodeTable,
    build_conditional_code_tables,
    decode_order1,
    encode_order1,
)

__all__ = [
    "DEFAULT_ALPHABET",
    "Alphabet",
    "CodeTable",
    "ConditionalCodeTable",
    "ConditionalFrequencyModel",
    "FrequencyModel",
    "HuffmanNode",
    "average_length",
    "build_conditional_code_tables",
    "build_conditional_frequency_model",
    "build_frequency_model",
    "build_huffman_tree",
    "decode",
    "decode_order1",
    "efficiency",
    "encode",
    "encode_order1",
    "entropy",
    "entropy_iid",
    "extract_code_table",
    "pack_bits",
    "symbols_from_text",
    "unpack_bits",
]
