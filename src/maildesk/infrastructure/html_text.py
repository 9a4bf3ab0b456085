"""Default HTML to plain-text conversion (BeautifulSoup)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, ParserRejectedMarkup

from maildesk.domain.errors import InvalidInput

_BLANK_LINES = re.compile(r"\n\s*\n+")
_SPACES = re.compile(r"[ \t\r\f\v]+")


def generate_text(html: str) -> str:
    """Convert an HTML body to its plain-text fallback.

    Block content is separated by newlines, runs of whitespace are collapsed
    and non-visible elements are dropped.
    """
    if not html:
        return ""
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise InvalidInput(f"cannot parse html: {e}") from e

    for element in soup(["script", "style", "head", "title"]):
        element.decompose()

    text = soup.get_text(separator="\n")
    lines = [_SPACES.sub(" ", line).strip() for line in text.splitlines()]
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()
