"""
The conversion job (Facade).

Wires the option parser, book-script loader, assembler and export selector
around one GlobalConfig, so the front end only deals with this class.
"""
import logging
import sys

from .assembler import DocumentAssembler
from .book_script import BookScriptLoader, BOOK_EXTENSION
from .export import ExportSelector, Renderer
from .options import OptionParser
from .toc import build_toc
from ..utils.config import GlobalConfig, OutputType
from ..utils.files import FileResolver, file_extension
from ..utils.structures import DocumentSequence, TOCItem


log = logging.getLogger("docbinder")


class ConversionJob:
    """
    A facade over one conversion job.

    It is the DocumentSink of its OptionParser: operands are resolved and
    appended as soon as the parser meets them, using the options in effect
    at that moment.
    """

    def __init__(self, config: GlobalConfig | None = None, resolver: FileResolver | None = None):
        self.config = config if config is not None else GlobalConfig()
        self.selector = ExportSelector(self.config)
        self.resolver = resolver if resolver is not None else FileResolver(self.config)
        self.document = DocumentSequence()
        self.assembler = DocumentAssembler(self.config, self.resolver, self.document)
        self.parser = OptionParser(self.config, self.selector, sink=self)
        self.loader = BookScriptLoader(self.config, self.parser, self.assembler, self.resolver)


    # --- DocumentSink ---

    def read_file(self, name: str) -> bool:
        if file_extension(name) == BOOK_EXTENSION:
            return self.load_book(name)
        return self.assembler.append(name, self.config.path)


    def read_stdin(self) -> bool:
        return self.assembler.append_stream(sys.stdin.buffer)


    def load_book(self, name: str) -> bool:
        return self.loader.load(name)


    # --- Output ---

    @property
    def error_count(self) -> int:
        return len(self.assembler.errors)


    def build_toc(self) -> list[TOCItem] | None:
        """A TOC is only built for book output with at least one level."""
        if self.config.output_type == OutputType.BOOK and self.config.toc_levels > 0:
            return build_toc(self.document, self.config.toc_levels, self.config.toc_numbers)
        return None


    def export(self, renderer: Renderer, toc: list[TOCItem] | None = None) -> int:
        """Hands the assembled document to the renderer. Returns the renderer's error count."""
        log.debug(f"Exporting {len(self.document)} document(s) as {self.selector.target}")
        return self.selector.export(renderer, self.document, toc)


    def cleanup(self):
        self.resolver.cleanup()
