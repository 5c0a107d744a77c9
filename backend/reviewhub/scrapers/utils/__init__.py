"""Scraper utilities for header rotation, extraction and normalization."""

from .user_agents import get_random_user_agent, get_browser_headers, USER_AGENTS
from .normalizer import (
    DateNormalizer,
    LanguageDetector,
    RatingNormalizer,
    clean_text,
    make_review_id,
    parse_count,
    LANGUAGE_HINTS,
)
from .extraction import (
    extract_callback_data,
    extract_json_ld,
    find_nested,
    get_path,
    parse_batchexecute,
    select_all,
    select_attr,
    select_first,
    select_text,
    unwrap_xssi,
)


__all__ = [
    # User agents
    "get_random_user_agent",
    "get_browser_headers",
    "USER_AGENTS",
    # Normalization
    "DateNormalizer",
    "LanguageDetector",
    "RatingNormalizer",
    "clean_text",
    "make_review_id",
    "parse_count",
    "LANGUAGE_HINTS",
    # Extraction
    "extract_callback_data",
    "extract_json_ld",
    "find_nested",
    "get_path",
    "parse_batchexecute",
    "select_all",
    "select_attr",
    "select_first",
    "select_text",
    "unwrap_xssi",
]
