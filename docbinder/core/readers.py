"""
Builds content trees from input files.
HTML goes straight to lxml; Markdown is converted to HTML first.
"""
import logging

import lxml.html
import markdown
from lxml import etree


log = logging.getLogger("docbinder")


MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "toc"]

EMPTY_DOCUMENT = "<html><head></head><body></body></html>"


def read_html(data: bytes | str, base: str = ".") -> etree._Element:
    """Parses an HTML document. Empty input yields an empty <html> tree."""
    if not data or not data.strip():
        return lxml.html.document_fromstring(EMPTY_DOCUMENT)
    try:
        return lxml.html.document_fromstring(data, base_url=base)
    except etree.ParserError as e:
        log.warning(f"Could not parse HTML ({e}); using an empty document.")
        return lxml.html.document_fromstring(EMPTY_DOCUMENT)


def read_markdown(data: bytes | str, base: str = ".") -> etree._Element:
    """Converts Markdown to HTML and parses the result."""
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    body = markdown.markdown(data, extensions=MARKDOWN_EXTENSIONS)
    return read_html(f"<html><head></head><body>{body}</body></html>", base)
