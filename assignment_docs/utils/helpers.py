"""
Common utility functions and helpers.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Mapping, Optional


_MARKDOWN_HEADER_RE = re.compile(r"^#{2,}\s*")


def coerce_str(value: Any) -> str:
    """
    Coerce a loosely-typed scalar to a stripped string.

    Args:
        value: Any value; ``None`` becomes the empty string

    Returns:
        String form of the value
    """
    if value is None:
        return ""
    return str(value).strip()


def first_present(data: Mapping[str, Any], *keys: str) -> str:
    """
    Return the first non-empty value among ``keys`` as a string.

    Args:
        data: Mapping to read from
        keys: Candidate keys, highest priority first

    Returns:
        The coerced value, or "" when no key holds a non-empty value
    """
    for key in keys:
        value = coerce_str(data.get(key))
        if value:
            return value
    return ""


def format_date(value: Any) -> str:
    """
    Format a submission date as DD/MM/YYYY.

    Args:
        value: date, datetime or ISO-8601 string

    Returns:
        Formatted date; unparseable strings are returned unchanged
    """
    if value is None or value == "":
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")

    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    return parsed.strftime("%d/%m/%Y")


def format_reference(reference: Mapping[str, Any]) -> str:
    """
    Render one reference record as a single citation line.

    Args:
        reference: Record with authors/author, year, title, source and url

    Returns:
        ``"{author}. ({year}). {title}. {source}[. Retrieved from {url}]."``
    """
    author = ""
    for key in ("authors", "author"):
        value = reference.get(key)
        if isinstance(value, (list, tuple)):
            value = ", ".join(s for s in (coerce_str(v) for v in value) if s)
        author = coerce_str(value)
        if author:
            break
    author = author or "Unknown"
    year = coerce_str(reference.get("year")) or "n.d."
    title = coerce_str(reference.get("title"))
    source = coerce_str(reference.get("source"))
    url = coerce_str(reference.get("url"))

    retrieved = f". Retrieved from {url}" if url else ""
    return f"{author}. ({year}). {title}. {source}{retrieved}."


def clean_content(content: Optional[str]) -> str:
    """
    Normalize generated prose for templating: drop blank lines, strip
    markdown ``##`` header prefixes, one paragraph per remaining line.

    Args:
        content: Free text, possibly markdown-flavoured

    Returns:
        Lines joined by blank lines
    """
    if not content:
        return ""

    paragraphs = []
    for line in content.split("\n"):
        trimmed = _MARKDOWN_HEADER_RE.sub("", line.strip())
        if trimmed:
            paragraphs.append(trimmed)
    return "\n\n".join(paragraphs)
