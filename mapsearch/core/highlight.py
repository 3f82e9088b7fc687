"""Query highlighting for candidate labels."""
import re
from typing import List, Tuple


def highlight_segments(text: str, query: str) -> List[Tuple[str, bool]]:
    """
    Split text around case-insensitive occurrences of the query.

    Args:
        text: Label to split (display name or postcode)
        query: Raw search text, matched literally

    Returns:
        List of (segment, matched) pairs that concatenate back to text
    """
    if not text:
        return []
    if not query or not query.strip():
        return [(text, False)]

    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    needle = query.lower()
    return [
        (part, part.lower() == needle)
        for part in pattern.split(text)
        if part
    ]


_MARKDOWN_SPECIALS = re.compile(r"([\\`*_\[\]<>#~|])")


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIALS.sub(r"\\\1", text)


def highlight_markdown(text: str, query: str) -> str:
    """
    Render matched segments in bold for Markdown output.

    Segments are escaped, and whitespace at the edges of a match is kept
    outside the ** markers so the emphasis still renders.
    """
    rendered = []
    for part, matched in highlight_segments(text, query):
        part = escape_markdown(part)
        core = part.strip()
        if not matched or not core:
            rendered.append(part)
            continue
        start = part.index(core)
        rendered.append(f"{part[:start]}**{core}**{part[start + len(core):]}")
    return "".join(rendered)
