"""
Table of contents from the document headings.
"""
import copy
import logging
import re

from lxml import etree

from ..utils.structures import DocumentSequence, TOCItem


log = logging.getLogger("docbinder")


MAX_TOC_LEVELS = 6


def build_toc(document: DocumentSequence, levels: int, numbered: bool = False) -> list[TOCItem]:
    """
    Collects h1..h<levels> headings from every document in order.
    Headings without an id get one, so each entry can be linked to.
    With `numbered`, entries are prefixed with their section number ("2.1 ").
    """
    levels = max(0, min(levels, MAX_TOC_LEVELS))
    if levels == 0:
        return []

    items: list[TOCItem] = []
    id_counter = 1
    counters = [0] * MAX_TOC_LEVELS

    headings_query = " | ".join(f"//h{i}" for i in range(1, levels + 1))

    for node in document:
        if node.tree is None:
            log.warning(f"[build_toc]: No content for {node.url or '(stdin)'}. Skipping.")
            continue

        for heading in node.tree.xpath(headings_query):
            heading_id = heading.get('id')
            if not heading_id:
                heading_id = f"toc_id_{id_counter}"
                heading.set('id', heading_id)
                id_counter += 1

            # Line breaks become spaces, then whitespace is collapsed
            heading_clone = copy.deepcopy(heading)
            for br in heading_clone.xpath('.//br'):
                br.tail = " " + (br.tail or "")
                br.drop_tag()
            text = re.sub(r'\s+', ' ', "".join(heading_clone.itertext())).strip()

            level = int(heading.tag[-1])
            if numbered:
                counters[level - 1] += 1
                for i in range(level, MAX_TOC_LEVELS):
                    counters[i] = 0
                number = ".".join(str(n) for n in counters[:level])
                text = f"{number} {text}"

            items.append(TOCItem(level=level, text=text, href=f"{node.filename}#{heading_id}"))

    log.info(f"Generated TOC with {len(items)} entries.")
    return items


def toc_to_html(toc: list[TOCItem], title: str) -> etree._Element:
    """Renders the TOC as a nested <nav><ol> element."""
    nav = etree.Element("nav", id="toc")
    if title:
        etree.SubElement(nav, "h1").text = title

    ol = etree.SubElement(nav, "ol")
    # level_parents[0] is the root list
    level_parents = [ol]

    for item in toc:
        if item.level > len(level_parents):
            while item.level > len(level_parents):
                parent = level_parents[-1]
                if len(parent):
                    host = parent[-1]
                else:
                    host = etree.SubElement(parent, "li")
                level_parents.append(etree.SubElement(host, "ol"))
        else:
            while item.level < len(level_parents):
                level_parents.pop()

        li = etree.SubElement(level_parents[-1], "li")
        a = etree.SubElement(li, "a", href=item.href)
        a.text = item.text

    return nav
