"""Plain-text extraction from article HTML."""

from __future__ import annotations

from bs4 import BeautifulSoup

_BLOCK_TAGS = [
    "article", "section", "div", "p", "li", "blockquote", "pre",
    "h1", "h2", "h3", "h4", "h5", "h6", "tr",
]


def html_to_text(html: str) -> str:
    """Flatten article HTML into paragraphs separated by blank lines.

    Block elements end a paragraph; inline markup is dropped and entities
    are decoded. Whitespace inside a paragraph is collapsed.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with(" ")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.append("\n\n")

    paragraphs = (" ".join(chunk.split()) for chunk in soup.get_text().split("\n\n"))
    return "\n\n".join(p for p in paragraphs if p)
