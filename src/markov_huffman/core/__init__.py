"""Pure coding core: alphabet, frequency models, Huffman trees, code tables, bit streams, metrics."""
