"""
Line and word tokenizers for the version differ.
"""

import re
from typing import List, NamedTuple

# Words, single punctuation marks, and whitespace runs (kept as tokens so
# spacing changes show up in word diffs)
WORD_TOKEN_RE = re.compile(r'\w+|[^\w\s]|\s+')


class LineToken(NamedTuple):
    """A line of text and its 1-based line number."""
    number: int
    text: str


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def split_lines(text: str) -> List[str]:
    """
    Split text into lines for comparison.

    A terminating newline does not produce a trailing empty line, so
    "a\\nb\\n" and "a\\nb" both yield ['a', 'b']. Blank lines inside the
    text are preserved.

    Args:
        text: Field text

    Returns:
        List of lines (empty list for empty text)
    """
    if not text:
        return []

    text = normalize_newlines(text)
    if text.endswith('\n'):
        text = text[:-1]
    return text.split('\n')


def tokenize_lines(text: str) -> List[LineToken]:
    """Split text into numbered line tokens."""
    return [LineToken(number, line) for number, line in enumerate(split_lines(text), start=1)]


def tokenize_words(line: str) -> List[str]:
    """
    Tokenize a line into words, punctuation and whitespace.

    ''.join(tokenize_words(line)) == line for every input.
    """
    return WORD_TOKEN_RE.findall(line)
