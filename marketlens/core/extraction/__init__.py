"""Extraction of typed values from fetched documents."""

from marketlens.core.extraction.decoding import decode_formatted_number, to_typed_value
from marketlens.core.extraction.dom import DomIndex
from marketlens.core.extraction.extractor import DEFAULT_PLAUSIBILITY, EmbeddedValueExtractor, extract_array
from marketlens.core.extraction.json_fragments import extract_values, find_fragments

__all__ = [
    "DEFAULT_PLAUSIBILITY",
    "DomIndex",
    "EmbeddedValueExtractor",
    "decode_formatted_number",
    "extract_array",
    "extract_values",
    "find_fragments",
    "to_typed_value",
]
