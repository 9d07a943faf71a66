"""
Body extraction and cleanup.

Pure functions: choose a single body from the text/HTML parts of an email and
strip residual artifacts (URLs, empty brackets, runs of blank lines).
"""

import re
from typing import Optional

from services.html import html_to_text

URL_PATTERN = re.compile(r'https?://[^\s\]]+')
EMPTY_BRACKETS_PATTERN = re.compile(r'\[\s*\]')
BLANK_LINES_PATTERN = re.compile(r'\n\s*\n\s*\n')


def extract_body(text: Optional[str], html: Optional[str]) -> Optional[str]:
    """
    Select the body of an email.

    Plain text is returned verbatim when present. Otherwise the HTML part is
    converted to text (link targets and images removed).

    Args:
        text: text/plain body, if any
        html: text/html body, if any

    Returns:
        Optional[str]: The body, or None when neither part is usable
    """
    if text:
        return text
    if html:
        return html_to_text(html)
    return None


def clean_body(body: str) -> str:
    """
    Remove leftover artifacts from a body.

    URLs and the empty brackets they leave behind are removed until none
    remain, runs of blank lines collapse to a single blank line and the
    result is trimmed. Cleaning an already clean body returns it unchanged.

    Example:
        >>> clean_body("Check this [https://example.com/x]")
        'Check this'
    """
    while True:
        stripped = EMPTY_BRACKETS_PATTERN.sub('', URL_PATTERN.sub('', body))
        if stripped == body:
            break
        body = stripped

    body = BLANK_LINES_PATTERN.sub('\n\n', body)
    return body.strip()


def parse_content(text: Optional[str], html: Optional[str]) -> Optional[str]:
    """Extract and clean a body; None when nothing was extractable."""
    body = extract_body(text, html)
    if body is None:
        return None
    return clean_body(body)
