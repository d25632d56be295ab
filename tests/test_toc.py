"""
Tests for the table of contents (docbinder/core/toc.py)

Run: python -m pytest tests/test_toc.py -q
"""
from docbinder.core.readers import read_html
from docbinder.core.toc import build_toc, toc_to_html
from docbinder.utils.structures import DocumentNode, DocumentSequence, TOCItem


def sequence(*docs):
    seq = DocumentSequence()
    for filename, html in docs:
        seq.append(DocumentNode(url=filename, filename=filename, base=".", tree=read_html(html)))
    return seq


SAMPLE = (
    ("one.html", "<body><h1 id='intro'>Intro</h1><h2>Part<br>A</h2><h3>Deep</h3></body>"),
    ("two.html", "<body><h1>Second</h1><h2>Part B</h2></body>"),
)


class TestBuildToc:

    def test_levels_limit_headings(self):
        toc = build_toc(sequence(*SAMPLE), levels=2)
        assert [(item.level, item.text) for item in toc] == [
            (1, "Intro"), (2, "Part A"), (1, "Second"), (2, "Part B"),
        ]

    def test_existing_ids_are_kept_and_missing_ones_added(self):
        seq = sequence(*SAMPLE)
        toc = build_toc(seq, levels=1)
        assert toc[0].href == "one.html#intro"
        assert toc[1].href.startswith("two.html#toc_id_")
        assert seq[1].tree.find(".//h1").get("id") == toc[1].href.partition("#")[2]

    def test_numbered(self):
        toc = build_toc(sequence(*SAMPLE), levels=3, numbered=True)
        assert [item.text for item in toc] == [
            "1 Intro", "1.1 Part A", "1.1.1 Deep", "2 Second", "2.1 Part B",
        ]

    def test_zero_levels(self):
        assert build_toc(sequence(*SAMPLE), levels=0) == []


class TestTocHtml:

    def test_nesting(self):
        nav = toc_to_html([
            TOCItem(1, "A", "a.html#a"),
            TOCItem(2, "A.1", "a.html#a1"),
            TOCItem(1, "B", "b.html#b"),
        ], "Contents")

        assert nav.findtext("h1") == "Contents"
        top = nav.find("ol")
        assert [li.findtext("a") for li in top.findall("li")] == ["A", "B"]
        assert top.find("li/ol/li/a").get("href") == "a.html#a1"
