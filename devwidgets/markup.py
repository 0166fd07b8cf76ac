"""Markdown <-> HTML conversion by ordered pattern substitution.

This is not a parser. Each direction is a fixed list of (pattern,
replacement) rules run in sequence, so nested or overlapping constructs
convert lossily.
"""

import re
from enum import Enum
from typing import Callable, Iterator, List, Tuple, Union

Replacement = Union[str, Callable[[re.Match], str]]
Rule = Tuple[re.Pattern, Replacement]


class Direction(Enum):
    MARKDOWN_TO_HTML = "md2html"
    HTML_TO_MARKDOWN = "html2md"


DEFAULT_CSS = """\
/* Add your custom CSS here */
body {
  font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
  line-height: 1.5;
}

blockquote {
  border-left: 3px solid #ccc;
  padding-left: 1rem;
  color: #666;
}"""

_TAG = re.compile(r"</?[^>]+>")


def _strip_tags(text: str) -> str:
    return _TAG.sub("", text)


# ─────────────────────────────────────────────────────────────────────────────
# Markdown -> HTML
# ─────────────────────────────────────────────────────────────────────────────

_UNORDERED_ITEM = re.compile(r"^[ \t]*[*-] ")
_ORDERED_ITEM = re.compile(r"^[ \t]*\d+\. ")
_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
_FENCE = re.compile(r"^```\w*\n(.*?)\n```[ \t]*$", re.M | re.S)

# Fenced code is cut out before these run, so code text is never rewritten.
MARKDOWN_TO_HTML_RULES: List[Rule] = [
    (re.compile(r"^### (.*)$", re.M), r"<h3>\1</h3>"),
    (re.compile(r"^## (.*)$", re.M), r"<h2>\1</h2>"),
    (re.compile(r"^# (.*)$", re.M), r"<h1>\1</h1>"),
    (re.compile(r"^> ?(.*)$", re.M), r"<blockquote>\1</blockquote>"),
    (re.compile(r"^[ \t]*[*-] (.*)$", re.M), r"<li>\1</li>"),
    (re.compile(r"^[ \t]*\d+\. (.*)$", re.M), r"<li>\1</li>"),
    (re.compile(r"!\[(.*?)\]\((.*?)\)"), r'<img src="\2" alt="\1">'),
    (re.compile(r"\[(.*?)\]\((.*?)\)"), r'<a href="\2">\1</a>'),
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"(?<!\w)__(.+?)__(?!\w)"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"(?<!\w)_(.+?)_(?!\w)"), r"<em>\1</em>"),
    (re.compile(r"~~(.+?)~~"), r"<del>\1</del>"),
    (re.compile(r"`([^`]+)`"), r"<code>\1</code>"),
]


def _wrap_block(source: str, html: str) -> str:
    """Wrap one converted block according to what the source block was."""
    if _ORDERED_ITEM.match(source):
        return f"<ol>\n{html}\n</ol>"
    if _UNORDERED_ITEM.match(source):
        return f"<ul>\n{html}\n</ul>"
    if html.startswith(("<h1", "<h2", "<h3", "<blockquote")):
        return html
    return f"<p>{html}</p>"


def _split_blocks(text: str) -> Iterator[str]:
    """Split on blank lines, keeping each fenced code block whole."""
    pos = 0
    for fence in _FENCE.finditer(text):
        yield from _BLOCK_SEPARATOR.split(text[pos:fence.start()])
        yield fence.group(0)
        pos = fence.end()
    yield from _BLOCK_SEPARATOR.split(text[pos:])


def _markdown_to_html(text: str) -> str:
    blocks = []
    for block in _split_blocks(text.strip()):
        block = block.strip("\n")
        if not block.strip():
            continue
        fence = _FENCE.fullmatch(block)
        if fence:
            blocks.append(f"<pre><code>{fence.group(1)}</code></pre>")
            continue
        html = apply_rules(block, MARKDOWN_TO_HTML_RULES)
        blocks.append(_wrap_block(block, html))
    return "\n".join(blocks)


# ─────────────────────────────────────────────────────────────────────────────
# HTML -> Markdown
# ─────────────────────────────────────────────────────────────────────────────

_LIST_ITEM = re.compile(r"<li[^>]*>(.*?)</li>", re.S | re.I)
_ATTR = r'\b{}\s*=\s*"([^"]*)"'


def _heading(match: re.Match) -> str:
    level = int(match.group(1))
    return "#" * level + " " + match.group(2).strip() + "\n\n"


def _image(match: re.Match) -> str:
    tag = match.group(0)
    src = re.search(_ATTR.format("src"), tag)
    alt = re.search(_ATTR.format("alt"), tag)
    return f"![{alt.group(1) if alt else ''}]({src.group(1) if src else ''})"


def _unordered_list(match: re.Match) -> str:
    items = _LIST_ITEM.findall(match.group(1))
    return "".join(f"* {_strip_tags(item).strip()}\n" for item in items) + "\n"


def _ordered_list(match: re.Match) -> str:
    items = _LIST_ITEM.findall(match.group(1))
    return "".join(
        f"{index}. {_strip_tags(item).strip()}\n" for index, item in enumerate(items, start=1)
    ) + "\n"


HTML_TO_MARKDOWN_RULES: List[Rule] = [
    (re.compile(r"<pre[^>]*>\s*<code[^>]*>(.*?)</code>\s*</pre>", re.S | re.I), "```\n\\1\n```\n\n"),
    (re.compile(r"<h([1-6])[^>]*>(.*?)</h\1>", re.S | re.I), _heading),
    (re.compile(r"<(strong|b)>(.*?)</\1>", re.S | re.I), r"**\2**"),
    (re.compile(r"<(em|i)>(.*?)</\1>", re.S | re.I), r"*\2*"),
    (re.compile(r"<(del|s|strike)>(.*?)</\1>", re.S | re.I), r"~~\2~~"),
    (re.compile(r"<img\b[^>]*>", re.I), _image),
    (re.compile(r'<a\b[^>]*href="([^"]*)"[^>]*>(.*?)</a>', re.S | re.I), r"[\2](\1)"),
    (re.compile(r"<code[^>]*>(.*?)</code>", re.S | re.I), r"`\1`"),
    (re.compile(r"<blockquote[^>]*>\s*(.*?)\s*</blockquote>", re.S | re.I), "> \\1\n\n"),
    (re.compile(r"<ul[^>]*>(.*?)</ul>", re.S | re.I), _unordered_list),
    (re.compile(r"<ol[^>]*>(.*?)</ol>", re.S | re.I), _ordered_list),
    (re.compile(r"<p[^>]*>(.*?)</p>", re.S | re.I), "\\1\n\n"),
    (re.compile(r"<br\s*/?>", re.I), "\n"),
    (_TAG, ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def apply_rules(text: str, rules: List[Rule]) -> str:
    """Run each substitution over the whole text, in order."""
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def convert(source_text: str, direction: Direction) -> str:
    """Convert text between Markdown and HTML.

    Args:
        source_text: Markdown or HTML input.
        direction: Which way to convert.

    Returns:
        The converted text, stripped of surrounding whitespace.
    """
    text = source_text.replace("\r\n", "\n")
    if direction == Direction.MARKDOWN_TO_HTML:
        return _markdown_to_html(text)
    return apply_rules(text, HTML_TO_MARKDOWN_RULES).strip()


def render_document(body_html: str, css: str = DEFAULT_CSS, title: str = "Converted Markdown") -> str:
    """Wrap converted HTML in a standalone document with a stylesheet."""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{title}</title>\n"
        f"<style>\n{css}\n</style>\n"
        "</head>\n"
        f"<body>\n{body_html}\n</body>\n"
        "</html>\n"
    )
