"""
Book scripts: small text files that batch options and input files for a job.

    #HTMLDOC 1.9
    -t pdf14 --toclevels 2 --toctitle "Contents"
    intro.html
    chapters/one.md
    \\-odd-name.html

The first non-empty line is the magic header. Lines starting with '-' are
options lines; a leading backslash marks a literal file name; everything
else is a file to append. Files ending in .book are loaded as nested scripts.
"""
import logging
from enum import Enum, auto
from typing import NamedTuple, TextIO

from .assembler import DocumentAssembler
from .options import OptionParser
from ..utils.config import GlobalConfig
from ..utils.errors import FormatError, NotFoundError, UsageError
from ..utils.files import FileResolver, file_directory, file_extension, is_url


log = logging.getLogger("docbinder")


BOOK_HEADER = "#HTMLDOC"
BOOK_EXTENSION = "book"
MAX_BOOK_DEPTH = 8


class DirectiveKind(Enum):
    BLANK = auto()
    OPTIONS = auto()
    FILE = auto()


class BookDirective(NamedTuple):
    """One parsed line of a book script."""
    kind: DirectiveKind
    text: str
    escaped: bool = False

    @classmethod
    def parse(cls, line: str) -> 'BookDirective':
        line = line.rstrip('\r\n')
        if not line.strip():
            return cls(DirectiveKind.BLANK, '')
        if line.startswith('-'):
            return cls(DirectiveKind.OPTIONS, line)
        if line.startswith('\\'):
            return cls(DirectiveKind.FILE, line[1:], escaped=True)
        return cls(DirectiveKind.FILE, line)


def tokenize_options(line: str) -> list[str]:
    """
    Splits an options line on runs of spaces.
    A double-quoted token keeps its embedded spaces (quotes are dropped).
    """
    tokens = []
    i, n = 0, len(line)
    while i < n:
        while i < n and line[i] == ' ':
            i += 1
        if i >= n:
            break
        if line[i] == '"':
            end = line.find('"', i + 1)
            if end < 0:
                tokens.append(line[i + 1:])
                break
            tokens.append(line[i + 1:end])
            i = end + 1
        else:
            end = line.find(' ', i)
            if end < 0:
                end = n
            tokens.append(line[i:end])
            i = end
    return tokens


def parse_options_line(line: str, parser: OptionParser):
    """
    Applies a book-script options line.

    Flags are matched by their full names and applied exactly as on the
    command line. Unknown flags are skipped together with their value,
    and values the command line would reject are logged and ignored.
    """
    tokens = tokenize_options(line)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1

        spec, value = parser.match_exact(token)
        if spec is None or spec.cli_only:
            # Skip the value of an unknown or command-line-only flag
            if i < len(tokens) and not tokens[i].startswith('-'):
                i += 1
            log.debug(f"Ignoring book option \"{token}\".")
            continue

        if spec.takes_value:
            if i >= len(tokens):
                log.warning(f"Book option \"{token}\" is missing its value.")
                break
            value = tokens[i]
            i += 1

        if spec.output_selection and parser.config.cgi_mode:
            log.debug(f"Ignoring book option \"{token}\" in CGI mode.")
            continue

        try:
            parser.apply(spec, value)
        except UsageError as e:
            log.warning(f"Ignoring book option \"{token}\": {e}")


class BookScriptLoader:
    """
    Interprets book scripts, appending their files to the document.

    The search path for file lines is "<script directory>;<config.path>",
    recomputed after every options line so that a --path option in the
    script applies to the lines that follow it.
    """

    def __init__(self, config: GlobalConfig, parser: OptionParser,
                 assembler: DocumentAssembler, resolver: FileResolver):
        self.config = config
        self.parser = parser
        self.assembler = assembler
        self.resolver = resolver
        self._stack: list[str] = []


    def load(self, name: str, search_path: str | None = None, set_nolocal: bool = False) -> bool:
        """
        Loads a book script. Returns False if it could not be found, opened
        or has a bad header; the error is recorded with the assembler.
        """
        if search_path is None:
            search_path = self.config.path

        local = self.resolver.find(search_path, name)

        # CGI lookups lock out local files once the script has been found
        if set_nolocal:
            self.config.no_local = True

        if local is None:
            self.assembler.record(NotFoundError(f"Unable to find book file \"{name}\".", name))
            return False

        key = str(local.resolve())
        if key in self._stack:
            self.assembler.record(FormatError(f"Book file \"{name}\" includes itself."))
            return False
        if len(self._stack) >= MAX_BOOK_DEPTH:
            self.assembler.record(FormatError(
                f"Book file \"{name}\" is nested more than {MAX_BOOK_DEPTH} levels deep."))
            return False

        directory = file_directory(name) if is_url(name) else str(local.parent)

        self._stack.append(key)
        try:
            with open(local, "r", encoding="utf-8", errors="replace") as fp:
                return self._read(fp, name, directory)
        except OSError as e:
            self.assembler.record(NotFoundError(f"Unable to open book file \"{name}\": {e}", name))
            return False
        finally:
            self._stack.pop()


    def search_path(self, directory: str) -> str:
        """The path used for file lines: the script directory, then config.path."""
        if self.config.path:
            return f"{directory};{self.config.path}"
        return directory


    def include(self, name: str, search_path: str) -> bool:
        """Appends a file line, loading .book files as nested scripts."""
        if file_extension(name) == BOOK_EXTENSION:
            return self.load(name, search_path)
        return self.assembler.append(name, search_path)


    def _read(self, fp: TextIO, name: str, directory: str) -> bool:
        header = None
        for line in fp:
            if line.strip():
                header = line
                break

        if header is None or not header.startswith(BOOK_HEADER):
            self.assembler.record(FormatError(f"Bad or missing {BOOK_HEADER} header in \"{name}\"."))
            return False

        log.info(f"Loading book file {name}...")
        search_path = self.search_path(directory)
        first = True

        for line in fp:
            directive = BookDirective.parse(line)
            if directive.kind is DirectiveKind.BLANK:
                continue

            # Older book files carry a file count on the line after the header
            if first:
                first = False
                if (directive.kind is DirectiveKind.FILE and not directive.escaped
                        and directive.text.strip().isdigit()):
                    continue

            if directive.kind is DirectiveKind.OPTIONS:
                parse_options_line(directive.text, self.parser)
                search_path = self.search_path(directory)
            else:
                self.include(directive.text, search_path)

        return True
