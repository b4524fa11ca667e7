"""
Plain-text layout of extracted document text.

Word text is laid out as paragraphs separated by a blank line. Presentation
text is laid out as "Slide N:" blocks, one paragraph per line, with a blank
line between slides. The split functions are the exact inverses of the join
functions, so segment counts survive a round trip through an external
text generator that keeps the layout.
"""

import re

PARAGRAPH_SEPARATOR = "\n\n"
LINE_SEPARATOR = "\n"
SLIDE_SEPARATOR = "\n\n"
SLIDE_HEADER = "Slide {number}:"

_SLIDE_HEADER_RE = re.compile(r"^Slide \d+:[ \t]*(?:\n|$)", re.MULTILINE)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def join_paragraphs(paragraphs: list[str]) -> str:
    """Lay out Word paragraphs as plain text."""
    return PARAGRAPH_SEPARATOR.join(paragraphs)


def split_paragraphs(text: str) -> list[str]:
    """Split plain text into Word paragraphs (inverse of join_paragraphs)."""
    return normalize_newlines(text).split(PARAGRAPH_SEPARATOR)


def join_slides(slides: list[list[str]]) -> str:
    """Lay out presentation slides, each a list of paragraphs, as plain text."""
    blocks = []
    for number, paragraphs in enumerate(slides, start=1):
        header = SLIDE_HEADER.format(number=number)
        blocks.append(f"{header}\n{LINE_SEPARATOR.join(paragraphs)}")
    return SLIDE_SEPARATOR.join(blocks)


def split_slides(text: str) -> list[list[str]]:
    """Split plain text into slides of paragraphs (inverse of join_slides).

    Text without any "Slide N:" header is treated as a single slide. A slide
    block with no text yields no paragraphs.
    """
    text = normalize_newlines(text)
    pieces = _SLIDE_HEADER_RE.split(text)
    if len(pieces) == 1:
        return [text.split(LINE_SEPARATOR)] if text else [[]]

    preamble, bodies = pieces[0], pieces[1:]
    slides: list[list[str]] = []
    if preamble.strip():
        slides.append(preamble.rstrip("\n").split(LINE_SEPARATOR))

    for position, body in enumerate(bodies):
        if position < len(bodies) - 1 and body.endswith(SLIDE_SEPARATOR):
            body = body[: -len(SLIDE_SEPARATOR)]
        slides.append(body.split(LINE_SEPARATOR) if body else [])
    return slides
