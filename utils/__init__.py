"""Utility helpers shared across Streamlit app modules."""

from utils.io import file_fetcher, read_resource_text
from utils.numeric import format2, format_signed2, round2, safe_number
from utils.persistence import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "file_fetcher",
    "read_resource_text",
    "format2",
    "format_signed2",
    "round2",
    "safe_number",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
