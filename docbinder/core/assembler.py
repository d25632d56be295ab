"""
Resolves input files and appends their content trees to the document sequence.
"""
import logging
from typing import BinaryIO

from .readers import read_html, read_markdown
from ..utils.config import GlobalConfig
from ..utils.errors import DocbinderError, NotFoundError
from ..utils.files import FileResolver, file_basename, file_directory, file_extension, is_url
from ..utils.structures import DocumentNode, DocumentSequence


log = logging.getLogger("docbinder")


class DocumentAssembler:
    """
    Builds the ordered document sequence for a job.

    A file that cannot be found or opened is recorded as a NotFoundError
    and skipped; the sequence is left untouched and the caller decides
    whether to go on. Errors accumulate in `errors`.
    """

    def __init__(self, config: GlobalConfig, resolver: FileResolver,
                 sequence: DocumentSequence | None = None):
        self.config = config
        self.resolver = resolver
        self.sequence = sequence if sequence is not None else DocumentSequence()
        self.errors: list[DocbinderError] = []


    def record(self, error: DocbinderError):
        """Reports an error and counts it toward the job's exit status."""
        self.errors.append(error)
        log.error(str(error))


    def append(self, name: str, search_path: str) -> bool:
        """Resolves `name` on `search_path`, parses it and appends it."""
        local = self.resolver.find(search_path, name)
        if local is None:
            self.record(NotFoundError(f"Unable to find \"{name}\"...", name))
            return False

        try:
            with open(local, "rb") as fp:
                data = fp.read()
        except OSError:
            self.record(NotFoundError(f"Unable to open \"{name}\" for reading...", name))
            return False

        log.info(f"Reading {name}...")

        base = file_directory(name) if is_url(name) else str(local.parent)
        if file_extension(name) == "md":
            tree = read_markdown(data, base)
        else:
            tree = read_html(data, base)

        self.sequence.append(DocumentNode(
            url=name,
            filename=file_basename(name),
            base=base,
            tree=tree,
        ))
        return True


    def append_stream(self, stream: BinaryIO) -> bool:
        """Reads an HTML document from an open stream (standard input)."""
        log.info("Reading (stdin)...")
        tree = read_html(stream.read(), ".")
        self.sequence.append(DocumentNode(url="", filename="", base=".", tree=tree))
        return True
