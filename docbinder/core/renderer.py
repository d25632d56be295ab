"""
The basic renderer shipped with docbinder.

Writes the two HTML targets with lxml. Paginated targets (PostScript,
PDF) and EPUB need an external rendering engine and are reported as
unavailable.
"""
import copy
import logging
import sys
from pathlib import Path

import lxml.html
from lxml import etree

from .export import Renderer, PdfTarget, PostScriptTarget
from .toc import toc_to_html
from ..utils.config import GlobalConfig
from ..utils.structures import DocumentNode, DocumentSequence, TOCItem


log = logging.getLogger("docbinder")


DOCTYPE = "<!DOCTYPE html>"
INDEX_NAME = "index.html"


class BasicRenderer(Renderer):
    """Renders HTML output to a file, a directory or standard output."""

    def __init__(self, config: GlobalConfig):
        self.config = config


    def export_html(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        """All documents in one HTML file, with the TOC (if any) first."""
        html, body = self._create_html(self._title(document))

        if toc:
            nav = toc_to_html(toc, self.config.toc_title)
            for a in nav.iter("a"):
                # Everything lives in one file now
                a.set("href", "#" + a.get("href", "").partition("#")[2])
            body.append(nav)

        for node in document:
            body.append(self._wrap_body(node))

        target = self.config.output_path
        if target and self.config.output_files:
            target = str(Path(target) / INDEX_NAME)
        return self._write(html, target)


    def export_htmlsep(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        """One HTML file per document in the output directory, plus an index page."""
        out_dir = Path(self.config.output_path or ".")
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log.error(f"Unable to create output directory {out_dir}: {e}")
            return 1

        names = output_names(document)
        errors = 0
        for node in document:
            name = names[node.index]
            html, body = self._create_html(self._title_of(node) or name)
            body.append(self._wrap_body(node))
            errors += self._write(html, str(out_dir / name))

        if toc:
            html, body = self._create_html(self.config.toc_title)
            nav = toc_to_html(toc, self.config.toc_title)
            for a in nav.iter("a"):
                filename, _, anchor = a.get("href", "").partition("#")
                node = _anchor_owner(document, filename, anchor)
                target = names[node.index] if node is not None else filename
                a.set("href", f"{target}#{anchor}")
            body.append(nav)
            errors += self._write(html, str(out_dir / INDEX_NAME))

        return errors


    def export_epub(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        log.error("No EPUB renderer is installed.")
        return 1


    def export_pspdf(self, document: DocumentSequence, toc: list[TOCItem] | None,
                     target: PostScriptTarget | PdfTarget) -> int:
        if isinstance(target, PdfTarget):
            log.error(f"No PDF renderer is installed (PDF {target.version // 10}.{target.version % 10}).")
        else:
            log.error(f"No PostScript renderer is installed (level {target.level}).")
        return 1


    # --- Helpers ---

    def _create_html(self, title: str) -> tuple[etree._Element, etree._Element]:
        html = etree.Element("html")
        head = etree.SubElement(html, "head")
        etree.SubElement(head, "meta", charset="utf-8")
        etree.SubElement(head, "title").text = title
        body = etree.SubElement(html, "body")
        if self.config.body_color:
            body.set("bgcolor", self.config.body_color)
        if self.config.text_color:
            body.set("text", self.config.text_color)
        if self.config.link_color:
            body.set("link", self.config.link_color)
        return html, body


    def _wrap_body(self, node: DocumentNode) -> etree._Element:
        div = etree.Element("div", {"class": "document"})
        if node.filename:
            div.set("title", node.filename)
        if node.tree is None:
            return div
        source = node.tree.find(".//body")
        if source is None:
            source = node.tree
        div.text = source.text
        for child in source:
            div.append(copy.deepcopy(child))
        return div


    def _title(self, document: DocumentSequence) -> str:
        head = document.head
        title = self._title_of(head) if head is not None else ""
        return title or self.config.toc_title


    @staticmethod
    def _title_of(node: DocumentNode) -> str:
        if node.tree is None:
            return ""
        title = node.tree.findtext(".//title")
        return title.strip() if title else ""


    def _write(self, html: etree._Element, target: str) -> int:
        data = lxml.html.tostring(html, doctype=DOCTYPE, encoding="utf-8", pretty_print=True)
        if not target:
            sys.stdout.buffer.write(data)
            sys.stdout.flush()
            return 0
        try:
            Path(target).write_bytes(data)
        except OSError as e:
            log.error(f"Unable to write {target}: {e}")
            return 1
        log.info(f"Wrote {target}")
        return 0


def output_name(node: DocumentNode) -> str:
    """The .html file name a document is written to in separate-file output."""
    if node.filename:
        return Path(node.filename).stem + ".html"
    return f"doc{node.index + 1}.html"


def output_names(document: DocumentSequence) -> list[str]:
    """
    Separate-file output names, indexed by node index.

    Names are unique and never the index page's; a clash gets the
    document number appended.
    """
    taken = {INDEX_NAME}
    names = [""] * len(document)
    for node in document:
        name = output_name(node)
        stem, number = Path(name).stem, node.index + 1
        while name.lower() in taken:
            name = f"{stem}_{number}.html"
            number += 1
        taken.add(name.lower())
        names[node.index] = name
    return names


def _anchor_owner(document: DocumentSequence, filename: str, anchor: str) -> DocumentNode | None:
    """The first document named `filename` that carries the id `anchor`."""
    fallback = None
    for node in document:
        if node.filename != filename:
            continue
        if node.tree is not None and node.tree.xpath("//*[@id=$id]", id=anchor):
            return node
        fallback = fallback or node
    return fallback
