
from dataclasses import dataclass
from typing import NamedTuple, Iterator

from lxml import etree

from .config import Typeface, FontStyle

__all__ = [
    "DocumentNode", "DocumentSequence", "TOCItem",
    "FONT_NAMES", "HEADFOOT_FONTS",
]


@dataclass
class DocumentNode:
    """One input file's parsed content and its position in the sequence."""
    url: str
    filename: str
    base: str
    tree: etree._Element | None
    index: int = -1
    prev: int | None = None
    next: int | None = None


class DocumentSequence:
    """
    Ordered container of DocumentNodes.

    Nodes are stored in an arena list; prev/next are indices into it.
    Insertion order is first-seen order and index 0 is the head.
    """

    def __init__(self):
        self._nodes: list[DocumentNode] = []


    def append(self, node: DocumentNode) -> DocumentNode:
        """Links `node` after the current tail and takes ownership of it."""
        node.index = len(self._nodes)
        node.next = None
        if self._nodes:
            tail = self._nodes[-1]
            tail.next = node.index
            node.prev = tail.index
        else:
            node.prev = None
        self._nodes.append(node)
        return node


    @property
    def head(self) -> DocumentNode | None:
        return self._nodes[0] if self._nodes else None


    @property
    def tail(self) -> DocumentNode | None:
        return self._nodes[-1] if self._nodes else None


    def __len__(self) -> int:
        return len(self._nodes)


    def __getitem__(self, index: int) -> DocumentNode:
        return self._nodes[index]


    def __iter__(self) -> Iterator[DocumentNode]:
        """Walks the sequence from the head following next links."""
        index = 0 if self._nodes else None
        while index is not None:
            node = self._nodes[index]
            yield node
            index = node.next


    def check_links(self) -> bool:
        """Returns True if every prev/next pair is mutually consistent."""
        for i, node in enumerate(self._nodes):
            if node.index != i:
                return False
            expected_prev = i - 1 if i > 0 else None
            expected_next = i + 1 if i + 1 < len(self._nodes) else None
            if node.prev != expected_prev or node.next != expected_next:
                return False
        return True


class TOCItem(NamedTuple):
    """A container for Table of Contents items."""
    level: int
    text: str
    href: str


# Body and heading font keywords
FONT_NAMES: dict[str, Typeface] = {
    'courier': Typeface.COURIER,
    'times': Typeface.TIMES,
    'helvetica': Typeface.HELVETICA,
    'arial': Typeface.HELVETICA,
    'monospace': Typeface.MONOSPACE,
    'serif': Typeface.SERIF,
    'sans-serif': Typeface.SANS_SERIF,
    'sans': Typeface.SANS_SERIF,
}


_OBLIQUE_SUFFIXES = {
    '': FontStyle.NORMAL,
    '-bold': FontStyle.BOLD,
    '-oblique': FontStyle.ITALIC,
    '-boldoblique': FontStyle.BOLD_ITALIC,
}

_ITALIC_SUFFIXES = {
    '': FontStyle.NORMAL,
    '-roman': FontStyle.NORMAL,
    '-bold': FontStyle.BOLD,
    '-italic': FontStyle.ITALIC,
    '-bolditalic': FontStyle.BOLD_ITALIC,
}

_HEADFOOT_FAMILIES = [
    # (keyword, typeface, suffix table)
    ('courier', Typeface.COURIER, _OBLIQUE_SUFFIXES),
    ('times', Typeface.TIMES, _ITALIC_SUFFIXES),
    ('helvetica', Typeface.HELVETICA, _OBLIQUE_SUFFIXES),
    ('monospace', Typeface.MONOSPACE, _OBLIQUE_SUFFIXES),
    ('serif', Typeface.SERIF, _ITALIC_SUFFIXES),
    ('sans-serif', Typeface.SANS_SERIF, _OBLIQUE_SUFFIXES),
    ('sans', Typeface.SANS_SERIF, _OBLIQUE_SUFFIXES),
]

# Header/footer font keywords such as "helvetica-bold" -> (typeface, style)
HEADFOOT_FONTS: dict[str, tuple[Typeface, FontStyle]] = {
    name + suffix: (face, style)
    for name, face, suffixes in _HEADFOOT_FAMILIES
    for suffix, style in suffixes.items()
}
