"""Scraper utilities."""

from .hashing import compute_content_hash, compute_raw_html_hash
from .text_parsing import (
    convert_to_minutes,
    extract_year,
    parse_french_date,
    parse_info_block,
    parse_rarity,
    split_list,
)

__all__ = [
    "compute_content_hash",
    "compute_raw_html_hash",
    "convert_to_minutes",
    "extract_year",
    "parse_french_date",
    "parse_info_block",
    "parse_rarity",
    "split_list",
]
