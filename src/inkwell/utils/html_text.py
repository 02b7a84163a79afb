"""
Helpers for the editor's HTML content.

The rich-text editor stores documents as a small HTML subset (paragraphs,
headings, lists, blockquotes, bold/italic, line breaks). These helpers turn
that into plain text or Markdown for word counts, exports and AI prompts.
"""

import html
import re

_BLOCK_CLOSE_PATTERN = re.compile(r'</(p|div|h[1-6]|li|blockquote|pre)\s*>', re.IGNORECASE)
_BREAK_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
_TAG_PATTERN = re.compile(r'<[^>]+>')
_HEADING_PATTERN = re.compile(r'<h([1-6])[^>]*>(.*?)</h\1\s*>', re.IGNORECASE | re.DOTALL)
_BOLD_PATTERN = re.compile(r'<(strong|b)(\s[^>]*)?>(.*?)</\1\s*>', re.IGNORECASE | re.DOTALL)
_ITALIC_PATTERN = re.compile(r'<(em|i)(\s[^>]*)?>(.*?)</\1\s*>', re.IGNORECASE | re.DOTALL)
_LIST_ITEM_PATTERN = re.compile(r'<li[^>]*>', re.IGNORECASE)
_BLOCKQUOTE_PATTERN = re.compile(r'<blockquote[^>]*>(.*?)</blockquote\s*>', re.IGNORECASE | re.DOTALL)
_BLANK_LINES_PATTERN = re.compile(r'\n{3,}')
_SPACES_PATTERN = re.compile(r'[ \t]+')


def _tidy(text: str) -> str:
    lines = [_SPACES_PATTERN.sub(' ', line).strip() for line in text.split('\n')]
    text = '\n'.join(lines)
    return _BLANK_LINES_PATTERN.sub('\n\n', text).strip()


def html_to_text(content: str) -> str:
    """
    Convert editor HTML to plain text, one blank line between blocks.

    Args:
        content: HTML string (plain text passes through unchanged)

    Returns:
        Plain text with entities decoded
    """
    if not content:
        return ""
    return _tidy(html.unescape(_strip_tags(content)))


def _strip_tags(content: str) -> str:
    # Leaves entities encoded
    text = _BREAK_PATTERN.sub('\n', content)
    text = _BLOCK_CLOSE_PATTERN.sub('\n\n', text)
    return _TAG_PATTERN.sub('', text)


def html_to_markdown(content: str) -> str:
    """Convert editor HTML to Markdown (headings, emphasis, lists, quotes)."""
    if not content:
        return ""
    text = _HEADING_PATTERN.sub(lambda m: '\n' + '#' * int(m.group(1)) + ' ' + m.group(2) + '\n\n', content)
    text = _BOLD_PATTERN.sub(r'**\3**', text)
    text = _ITALIC_PATTERN.sub(r'*\3*', text)
    text = _BLOCKQUOTE_PATTERN.sub(
        lambda m: '\n'.join('> ' + line for line in _tidy(_strip_tags(m.group(1))).split('\n')) + '\n\n',
        text
    )
    text = _LIST_ITEM_PATTERN.sub('- ', text)
    return html_to_text(text)


def count_words(content: str) -> int:
    """
    Count words in editor HTML.

    Args:
        content: HTML or plain text

    Returns:
        Word count as integer
    """
    if not content or not isinstance(content, str):
        return 0
    return len(html_to_text(content).split())
