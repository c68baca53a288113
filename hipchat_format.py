"""Turn plain-text HipChat messages into HTML with auto-linked URLs."""

from __future__ import annotations

import html
import re
from typing import List, Tuple

# A trimmed-down take on Gruber's "liberal, accurate" URL regex (v2).  Only a
# single level of nested parentheses is accepted inside a URL, so prose like
# "(you know, http://bit.ly/thing)" keeps its closing paren out of the link.
# Body elements are matched one character at a time so a failed match cannot
# backtrack exponentially (e.g. "http://" followed by a wall of commas).
_URL_CHAR = r"[^\s()<>]"
_BALANCED_PARENS = r"\((?:" + _URL_CHAR + r"|\(" + _URL_CHAR + r"+\))*\)"
_LAST_CHAR = r"[^\s`!()\[\]{};:'\".,<>?«»“”‘’]"

URL_PATTERN = re.compile(
    r"\b("
    r"https?:(?:/{1,3}|[a-z0-9%])"
    r"(?:" + _URL_CHAR + r"|" + _BALANCED_PARENS + r")+"
    r"(?:" + _BALANCED_PARENS + r"|" + _LAST_CHAR + r")"
    r")",
    re.IGNORECASE | re.ASCII,
)

ANCHOR_TEMPLATE = '<a href="{url}">{url}</a>'

# html.escape spells the quotes &quot; and &#x27;; HipChat messages use the
# shorter numeric forms.
_QUOTE_ENTITIES = {"&quot;": "&#34;", "&#x27;": "&#39;"}


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for inclusion in an HTML message body."""

    escaped = html.escape(text, quote=True)
    for entity, numeric in _QUOTE_ENTITIES.items():
        escaped = escaped.replace(entity, numeric)
    return escaped


def find_urls(text: str) -> List[Tuple[int, int]]:
    """Return the ``(start, end)`` spans that would be turned into links."""

    return [match.span() for match in URL_PATTERN.finditer(text)]


def plain_text_to_html(text: str) -> str:
    """HTML-ify a plain text message.

    Everything that is not a recognised URL is escaped exactly once; every
    URL is emitted verbatim as both the link target and the link text.
    """

    out: List[str] = []
    pos = 0
    while True:
        match = URL_PATTERN.search(text, pos)
        if match is None:
            out.append(escape_html(text[pos:]))
            break
        start, end = match.span()
        out.append(escape_html(text[pos:start]))
        out.append(ANCHOR_TEMPLATE.format(url=match.group(0)))
        pos = end
    return "".join(out)


def render_body(text: str, is_html: bool = False) -> str:
    # HipChat always receives HTML; --html only changes how we read the input.
    if is_html:
        return text
    return plain_text_to_html(text)
