"""Helpers for pulling data out of semi-structured storefront responses.

Covers the three shapes Google Play hands back:
- RPC responses guarded by the ")]}'" anti-XSSI prefix
- HTML pages whose class names change every few months
- JSON arrays embedded in AF_initDataCallback(...) script blocks
"""

import json
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)


XSSI_PREFIX = ")]}'"

_CALLBACK_PATTERN = re.compile(
    r"AF_initDataCallback\(\s*\{\s*key:\s*'(?P<key>[^']+)'.*?data:\s*(?P<data>\[.*?\])\s*,\s*sideChannel:\s*\{\s*\}\s*\}\s*\)\s*;",
    re.DOTALL,
)


def unwrap_xssi(text: str) -> str:
    """Strip the anti-XSSI prefix from a response body."""
    text = text.lstrip()
    if text.startswith(XSSI_PREFIX):
        text = text[len(XSSI_PREFIX):]
    return text.lstrip()


def _iter_json_chunks(body: str) -> Iterator[Any]:
    """Yield every JSON value found in a batchexecute body.

    The body is either a single JSON document or a sequence of
    length-prefixed chunks, one per line.
    """
    try:
        yield json.loads(body)
        return
    except ValueError:
        pass

    for line in body.splitlines():
        line = line.strip()
        if not line.startswith("["):
            continue
        try:
            yield json.loads(line)
        except ValueError:
            continue


def parse_batchexecute(text: str, rpc_id: str) -> Optional[Any]:
    """Decode the payload for one RPC from a batchexecute response.

    The envelope looks like [["wrb.fr", "<rpc_id>", "<json string>", ...], ...]
    and the payload itself is a JSON document serialized into a string.

    Returns:
        Decoded payload, or None if no envelope for rpc_id carries one
    """
    body = unwrap_xssi(text or "")

    for chunk in _iter_json_chunks(body):
        if not isinstance(chunk, list):
            continue
        for envelope in chunk:
            if (
                isinstance(envelope, list)
                and len(envelope) > 2
                and envelope[0] == "wrb.fr"
                and envelope[1] == rpc_id
            ):
                payload = envelope[2]
                if not isinstance(payload, str):
                    return None
                try:
                    return json.loads(payload)
                except ValueError:
                    logger.warning("batchexecute_payload_invalid", rpc_id=rpc_id)
                    return None
    return None


def get_path(data: Any, path: Sequence[Any], default: Any = None) -> Any:
    """Safely index into nested lists/dicts, returning default on any miss."""
    current = data
    for key in path:
        try:
            current = current[key]
        except (IndexError, KeyError, TypeError):
            return default
    return current


def find_nested(data: Any, predicate: Callable[[Any], bool], max_depth: int = 12) -> List[Any]:
    """Collect every nested value matching predicate, outermost first.

    Matching values are not searched further.
    """
    found: List[Any] = []

    def _walk(node: Any, depth: int) -> None:
        if depth > max_depth:
            return
        if predicate(node):
            found.append(node)
            return
        if isinstance(node, list):
            for child in node:
                _walk(child, depth + 1)
        elif isinstance(node, dict):
            for child in node.values():
                _walk(child, depth + 1)

    _walk(data, 0)
    return found


def extract_callback_data(html: str) -> Dict[str, Any]:
    """Decode the AF_initDataCallback data blocks embedded in a page.

    Returns:
        Mapping of block key (e.g., "ds:5") to decoded data; undecodable blocks are skipped
    """
    blocks: Dict[str, Any] = {}
    for match in _CALLBACK_PATTERN.finditer(html or ""):
        key = match.group("key")
        try:
            blocks[key] = json.loads(match.group("data"))
        except ValueError:
            logger.debug("callback_block_undecodable", key=key)
    return blocks


def extract_json_ld(soup: BeautifulSoup) -> List[Dict[str, Any]]:
    """Decode all JSON-LD objects on a page, flattening top-level lists and @graph."""
    objects: List[Dict[str, Any]] = []
    for script in soup.select("script[type='application/ld+json']"):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if isinstance(item, dict) and isinstance(item.get("@graph"), list):
                objects.extend(i for i in item["@graph"] if isinstance(i, dict))
            elif isinstance(item, dict):
                objects.append(item)
    return objects


def select_first(node: Tag, selectors: Sequence[str]) -> Optional[Tag]:
    """Return the first element matched by any selector, trying them in order."""
    for selector in selectors:
        element = node.select_one(selector)
        if element is not None:
            return element
    return None


def select_all(node: Tag, selectors: Sequence[str]) -> List[Tag]:
    """Return the matches of the first selector that matches anything."""
    for selector in selectors:
        elements = node.select(selector)
        if elements:
            return elements
    return []


def select_text(node: Tag, selectors: Sequence[str]) -> str:
    """Return the whitespace-collapsed text of the first non-empty match."""
    for selector in selectors:
        for element in node.select(selector):
            text = " ".join(element.get_text(" ", strip=True).split())
            if text:
                return text
    return ""


def select_attr(node: Tag, selectors: Sequence[str], attr: str) -> str:
    """Return the first non-empty attribute value among the matches."""
    for selector in selectors:
        for element in node.select(selector):
            value = element.get(attr)
            if value:
                return str(value).strip()
    return ""


def search_patterns(text: str, patterns: Sequence[re.Pattern]) -> Optional[str]:
    """Return group 1 of the first pattern that matches text."""
    for pattern in patterns:
        match = pattern.search(text or "")
        if match:
            return match.group(1).strip()
    return None
