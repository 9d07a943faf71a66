"""
HTML to plain text conversion for email bodies.

Anchors are reduced to their visible text and images are dropped, so neither
link targets nor image placeholders end up in the text sent for rewriting.
"""

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Elements that start a new line in the rendered text
BLOCK_TAGS = [
    'address', 'article', 'aside', 'blockquote', 'dd', 'div', 'dl', 'dt',
    'fieldset', 'figcaption', 'figure', 'footer', 'form', 'header', 'hr',
    'li', 'main', 'nav', 'ol', 'pre', 'section', 'table', 'tr', 'ul',
]

# Elements followed by a blank line
PARAGRAPH_TAGS = ['p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# Elements whose content is never rendered
SKIPPED_TAGS = ['head', 'script', 'style', 'template', 'noscript', 'img']

# Break markers inserted into the tree, resolved after whitespace is collapsed
BLOCK_BREAK = '\x00'
PARAGRAPH_BREAK = '\x01'
LINE_BREAK = '\x02'
# Spaces inside <pre>, restored after whitespace is collapsed
PRESERVED_SPACE = '\x03'

_WHITESPACE = re.compile(r'\s+')
_BREAKS = re.compile(r' ?[\x00\x01\x02][\x00\x01\x02 ]*')


def _render_break(match: re.Match) -> str:
    run = match.group()
    if PARAGRAPH_BREAK in run:
        return '\n\n'
    return '\n' * min(2, max(1, run.count(LINE_BREAK)))


def _preserve(text: str) -> str:
    return text.replace('\n', LINE_BREAK).replace(' ', PRESERVED_SPACE).replace('\t', PRESERVED_SPACE)


def html_to_text(html: str) -> str:
    """
    Convert an HTML email body to plain text.

    Source whitespace is collapsed as a browser would. Block elements start a
    new line, paragraphs and headings are separated by a blank line and <br>
    becomes a line break. Text inside <pre> keeps its line breaks and spaces.

    Args:
        html: HTML markup

    Returns:
        str: Plain text

    Example:
        >>> html_to_text('<p>See <a href="https://x.example">docs</a><img src="a.png"></p>')
        'See docs'
    """
    soup = BeautifulSoup(html, 'html.parser')

    for tag in soup.find_all(SKIPPED_TAGS):
        # Children of an already removed element are in the list too
        if not tag.decomposed:
            tag.decompose()

    # Keep the link text, drop the href
    for anchor in soup.find_all('a'):
        anchor.unwrap()

    for br in soup.find_all('br'):
        br.replace_with(LINE_BREAK)

    # Preformatted text keeps its line breaks and indentation
    for pre in soup.find_all('pre'):
        pre.string = _preserve(pre.get_text())

    for tag in soup.find_all('td'):
        tag.insert_after(' ')

    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before(BLOCK_BREAK)
        tag.insert_after(BLOCK_BREAK)

    for tag in soup.find_all(PARAGRAPH_TAGS):
        tag.insert_before(PARAGRAPH_BREAK)
        tag.insert_after(PARAGRAPH_BREAK)

    text = _WHITESPACE.sub(' ', soup.get_text())
    text = _BREAKS.sub(_render_break, text)
    text = text.replace(PRESERVED_SPACE, ' ').strip()

    logger.debug(f"Converted {len(html)} characters of HTML to {len(text)} characters of text")
    return text
