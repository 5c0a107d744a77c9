"""Data normalization utilities for ratings, dates, counts and review language."""

import hashlib
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

logger = structlog.get_logger()


# Character and common-word hints used to guess the language of a review
LANGUAGE_HINTS = {
    "tr": {
        "chars": "çğıöşüÇĞİÖŞÜ",
        "words": [
            "ve", "bir", "bu", "için", "ile", "den", "var", "yok", "çok",
            "iyi", "kötü", "güzel", "uygulama", "oyun", "ama", "değil",
        ],
    },
    "de": {
        "chars": "äöüßÄÖÜ",
        "words": [
            "und", "nicht", "das", "ist", "sehr", "gut", "schlecht", "mit",
            "für", "leider", "funktioniert",
        ],
    },
    "es": {
        "chars": "ñáéíóúÑ¿¡",
        "words": [
            "que", "muy", "pero", "bien", "para", "una", "aplicación", "malo",
            "bueno", "funciona",
        ],
    },
    "fr": {
        "chars": "àâçéèêëîïôûùœÀÇÉ",
        "words": [
            "et", "est", "pas", "très", "bien", "avec", "pour", "une",
            "application", "mais",
        ],
    },
    "en": {
        "chars": "",
        "words": [
            "the", "and", "is", "app", "not", "very", "good", "bad", "great",
            "with", "this", "but",
        ],
    },
}

# Storefront countries where every review is assumed to be in the language
LANGUAGE_COUNTRIES = {
    "tr": {"tr"},
    "de": {"de", "at"},
    "es": {"es", "mx", "ar", "co", "cl"},
    "fr": {"fr"},
    "en": {"us", "gb", "au", "ca", "nz", "ie"},
}

# Month names seen in localized storefront dates
MONTHS = {
    # English
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
    # Turkish
    "ocak": 1, "şubat": 2, "mart": 3, "nisan": 4, "mayıs": 5, "haziran": 6,
    "temmuz": 7, "ağustos": 8, "eylül": 9, "ekim": 10, "kasım": 11, "aralık": 12,
    "oca": 1, "şub": 2, "nis": 4, "haz": 6, "tem": 7, "ağu": 8, "eyl": 9,
    "eki": 10, "kas": 11, "ara": 12,
}

RATING_PATTERNS = [
    re.compile(r"rated\s+(\d(?:[.,]\d+)?)", re.IGNORECASE),
    re.compile(r"(\d(?:[.,]\d+)?)\s+(?:yıldız|stars?)\s+(?:aldı|verdi)", re.IGNORECASE),
    re.compile(r"üzerinden\s+(\d(?:[.,]\d+)?)", re.IGNORECASE),
    re.compile(r"(\d(?:[.,]\d+)?)\s*(?:out of|/|von|sur|de)\s*5", re.IGNORECASE),
    re.compile(r"(\d(?:[.,]\d+)?)"),
]

_DAY_MONTH_YEAR = re.compile(r"^(\d{1,2})\.?\s+([^\W\d_]+)\.?,?\s+(\d{4})$")
_MONTH_DAY_YEAR = re.compile(r"^([^\W\d_]+)\.?\s+(\d{1,2}),?\s+(\d{4})$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[./](\d{1,2})[./](\d{4})$")

_COUNT_SUFFIXES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}


def clean_text(value: Any) -> str:
    """Collapse whitespace and strip a text value. None becomes an empty string."""
    if value is None:
        return ""
    return " ".join(str(value).split())


def make_review_id(prefix: str, *parts: Any) -> str:
    """Build a best-effort review id from whatever identifying parts are available.

    Not guaranteed unique or stable: the parts come from scraped text.
    """
    raw = "|".join(clean_text(p) for p in parts)
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]
    return f"{prefix}_{digest}"


class RatingNormalizer:
    """Star rating parsing. 0 means unknown."""

    @staticmethod
    def parse(value: Any) -> int:
        """Parse a rating from an int, float or label such as "Rated 4 stars out of five".

        Returns:
            Integer rating 1..5, or 0 if unknown/out of range
        """
        if value is None or isinstance(value, bool):
            return 0

        if isinstance(value, (int, float)):
            rating = int(value)
        else:
            text = clean_text(value)
            rating = 0
            for pattern in RATING_PATTERNS:
                match = pattern.search(text)
                if match:
                    rating = int(float(match.group(1).replace(",", ".")))
                    break

        if 1 <= rating <= 5:
            return rating
        return 0


class DateNormalizer:
    """Normalizes storefront dates to ISO-8601 strings when possible."""

    @staticmethod
    def parse(value: Any) -> Optional[datetime]:
        """Parse a date from a datetime, epoch seconds or text.

        Naive results are assumed to be UTC.

        Returns:
            Timezone-aware datetime, or None if the value can't be parsed
        """
        if value is None or value == "":
            return None

        parsed: Optional[datetime] = None

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                parsed = datetime.fromtimestamp(value, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None
        else:
            parsed = DateNormalizer._parse_text(clean_text(value))

        if parsed is None:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def _parse_text(text: str) -> Optional[datetime]:
        if not text:
            return None

        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass

        lowered = text.lower()

        match = _DAY_MONTH_YEAR.match(lowered)
        if match:
            day, month_name, year = match.groups()
            return DateNormalizer._build(year, MONTHS.get(month_name), day)

        match = _MONTH_DAY_YEAR.match(lowered)
        if match:
            month_name, day, year = match.groups()
            return DateNormalizer._build(year, MONTHS.get(month_name), day)

        match = _NUMERIC_DATE.match(lowered)
        if match:
            day, month, year = match.groups()
            return DateNormalizer._build(year, int(month), day)

        return None

    @staticmethod
    def _build(year: str, month: Optional[int], day: str) -> Optional[datetime]:
        if not month:
            return None
        try:
            return datetime(int(year), month, int(day))
        except ValueError:
            return None

    @staticmethod
    def to_iso(value: Any) -> str:
        """Return an ISO-8601 string, the raw text if unparseable, or "" for nothing."""
        parsed = DateNormalizer.parse(value)
        if parsed is not None:
            return parsed.isoformat()
        return clean_text(value) if isinstance(value, str) else ""


def parse_count(value: Any) -> Optional[int]:
    """Parse a count such as "1,234", "1.234", "10K+" or 42.

    Returns:
        Integer count, or None if no number is found
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    text = clean_text(value).lower().replace("+", "")
    match = re.search(r"(\d+(?:[.,]\d+)*)\s*([kmb])?\b", text)
    if not match:
        return None

    number, suffix = match.groups()
    if suffix:
        try:
            return int(float(number.replace(",", ".")) * _COUNT_SUFFIXES[suffix])
        except ValueError:
            return None

    digits = re.sub(r"[.,]", "", number)
    return int(digits) if digits else None


class LanguageDetector:
    """Heuristic review language filter based on characters and common words."""

    @staticmethod
    def matches(text: str, language: str) -> bool:
        """Check whether text looks like the given language.

        Returns:
            True if a hint matches, False otherwise (also for unknown languages)
        """
        hints = LANGUAGE_HINTS.get(language.lower())
        if not hints or not text:
            return False

        if hints["chars"] and any(ch in text for ch in hints["chars"]):
            return True

        words = set(re.findall(r"\w+", text.lower()))
        return any(word in words for word in hints["words"])

    @staticmethod
    def should_keep(text: str, language: str, country: str) -> bool:
        """Decide whether a review belongs in a feed for the configured language.

        Reviews are kept when the storefront country is a home country of the
        language, when the text looks like the language, or when there is no
        heuristic for the language at all.
        """
        language = language.lower()
        if language not in LANGUAGE_HINTS:
            return True
        if country.lower() in LANGUAGE_COUNTRIES.get(language, set()):
            return True
        return LanguageDetector.matches(text, language)
