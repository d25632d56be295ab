"""
Export targets and the selector that decides which one is active.

The target is a closed set of variants; each variant knows which
Renderer method produces it, so the renderer is driven through a
single export() call.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from ..utils.config import GlobalConfig
from ..utils.errors import UsageError
from ..utils.files import file_extension
from ..utils.structures import DocumentSequence, TOCItem


log = logging.getLogger("docbinder")


DEFAULT_PDF_VERSION = 14
DEFAULT_PS_LEVEL = 2
MIN_COMPRESSED_PDF_VERSION = 12


class Renderer(ABC):
    """
    Rendering engine interface, one method per export target.
    Each method returns the number of errors it encountered.
    """

    @abstractmethod
    def export_html(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        ...

    @abstractmethod
    def export_htmlsep(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        ...

    @abstractmethod
    def export_epub(self, document: DocumentSequence, toc: list[TOCItem] | None) -> int:
        ...

    @abstractmethod
    def export_pspdf(self, document: DocumentSequence, toc: list[TOCItem] | None,
                     target: "PostScriptTarget | PdfTarget") -> int:
        ...


@dataclass(frozen=True)
class HtmlTarget:
    name: ClassVar[str] = "html"

    def export(self, renderer: Renderer, document, toc) -> int:
        return renderer.export_html(document, toc)


@dataclass(frozen=True)
class HtmlSepTarget:
    name: ClassVar[str] = "htmlsep"

    def export(self, renderer: Renderer, document, toc) -> int:
        return renderer.export_htmlsep(document, toc)


@dataclass(frozen=True)
class EpubTarget:
    name: ClassVar[str] = "epub"

    def export(self, renderer: Renderer, document, toc) -> int:
        return renderer.export_epub(document, toc)


@dataclass(frozen=True)
class PostScriptTarget:
    level: int = DEFAULT_PS_LEVEL
    name: ClassVar[str] = "ps"

    def export(self, renderer: Renderer, document, toc) -> int:
        return renderer.export_pspdf(document, toc, self)


@dataclass(frozen=True)
class PdfTarget:
    version: int = DEFAULT_PDF_VERSION
    name: ClassVar[str] = "pdf"

    def export(self, renderer: Renderer, document, toc) -> int:
        return renderer.export_pspdf(document, toc, self)


ExportTarget = HtmlTarget | HtmlSepTarget | EpubTarget | PostScriptTarget | PdfTarget


# --format keywords -> target
FORMAT_KEYWORDS: dict[str, ExportTarget] = {
    'epub': EpubTarget(),
    'html': HtmlTarget(),
    'htmlsep': HtmlSepTarget(),
    'pdf': PdfTarget(14),
    'pdf14': PdfTarget(14),
    'pdf13': PdfTarget(13),
    'pdf12': PdfTarget(12),
    'pdf11': PdfTarget(11),
    'ps': PostScriptTarget(2),
    'ps1': PostScriptTarget(1),
    'ps2': PostScriptTarget(2),
    'ps3': PostScriptTarget(3),
}


class ExportSelector:
    """
    Holds the active export target in a single assignment slot.

    An explicit format selection always wins over a target inferred from the
    output filename: inference only fills the slot while no explicit choice
    has been made, and a later explicit choice replaces an inferred one.
    """

    def __init__(self, config: GlobalConfig):
        self.config = config
        self.target: ExportTarget = HtmlTarget()
        self.explicit = False


    def select(self, keyword: str):
        """Applies a --format keyword. Unknown keywords are usage errors."""
        target = FORMAT_KEYWORDS.get(keyword.strip().lower())
        if target is None:
            raise UsageError(f"Unknown output format \"{keyword}\".", keyword)
        self._assign(target)
        self.explicit = True


    def infer_from_filename(self, filename: str):
        """Chooses a target from the output file extension, unless one was selected."""
        if self.explicit:
            return

        ext = file_extension(filename)
        if ext == 'epub':
            self._assign(EpubTarget())
        elif ext == 'html':
            self._assign(HtmlTarget())
        elif ext == 'pdf':
            self._assign(PdfTarget(self.config.pdf_version or DEFAULT_PDF_VERSION))
        elif ext == 'ps':
            self._assign(PostScriptTarget(self.config.ps_level or DEFAULT_PS_LEVEL))


    def force(self, target: ExportTarget):
        """Sets the target unconditionally and locks it as explicit."""
        self._assign(target)
        self.explicit = True


    def set_compression(self, level: int):
        """Compression is only honored for PDF 1.2 and later."""
        if self.config.pdf_version >= MIN_COMPRESSED_PDF_VERSION:
            self.config.compression = level


    def _assign(self, target: ExportTarget):
        self.target = target
        if isinstance(target, PdfTarget):
            self.config.ps_level = 0
            self.config.pdf_version = target.version
            if target.version < MIN_COMPRESSED_PDF_VERSION:
                self.config.compression = 0
        elif isinstance(target, PostScriptTarget):
            self.config.ps_level = target.level
            self.config.pdf_version = 0
        log.debug(f"Export target: {target}")


    def export(self, renderer: Renderer, document: DocumentSequence,
               toc: list[TOCItem] | None) -> int:
        """Hands the finished document to the renderer method for the active target."""
        if len(document) == 0:
            raise ValueError("Cannot export an empty document sequence.")
        return self.target.export(renderer, document, toc)
