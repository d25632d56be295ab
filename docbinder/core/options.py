"""
Table-driven command-line option parsing.

Every flag is described once by a FlagSpec: its full name, the minimum
number of characters that identify it unambiguously, whether it takes a
value, and the handler that applies it. The same table drives both the
command line (prefix matching) and book-script options lines (exact names).
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from .export import ExportSelector
from ..utils.config import (
    GlobalConfig, OutputType, LinkStyle, MAX_HF_IMAGES,
    PDF_PAGE_MODES, PDF_LAYOUTS, PDF_FIRST_PAGES, PDF_EFFECTS,
    PDF_PAGE_MODE_DOCUMENT, PDF_FIRST_PAGE_P1,
)
from ..utils.errors import UsageError
from ..utils.logger import set_console_verbosity
from ..utils.measurements import (
    get_measurement, get_format, get_page_size, to_float, to_int,
)
from ..utils.permissions import parse_permissions
from ..utils.structures import FONT_NAMES, HEADFOOT_FONTS


log = logging.getLogger("docbinder")


VALID_NUMBER_UP = (1, 2, 4, 6, 9, 16)


class DocumentSink(Protocol):
    """Receives the input operands found while parsing."""

    def read_file(self, name: str) -> bool: ...

    def read_stdin(self) -> bool: ...

    def load_book(self, name: str) -> bool: ...


Handler = Callable[["OptionParser", str | None], None]


@dataclass(frozen=True)
class FlagSpec:
    """Describes one flag of the option table."""
    name: str
    min_prefix: int
    handler: Handler
    takes_value: bool = False
    aliases: tuple[str, ...] = ()   # exact-match alternatives such as "-t"
    exact: bool = False             # the full name must be typed
    inline: bool = False            # accepts "--name=value"
    output_selection: bool = False  # ignored in book scripts while in CGI mode
    cli_only: bool = False          # not accepted in book-script options lines

    def matches_prefix(self, token: str) -> bool:
        """Command-line matching: an unambiguous prefix of the full name."""
        if token in self.aliases:
            return True
        if self.exact:
            return token == self.name
        return len(token) >= self.min_prefix and self.name.startswith(token)

    def matches_exact(self, token: str) -> bool:
        """Book-script matching: the full name or an alias."""
        return token == self.name or token in self.aliases

    def inline_value(self, token: str) -> str | None:
        """Returns the value of a "--name=value" token, or None."""
        if self.inline and token.startswith(self.name + '='):
            return token[len(self.name) + 1:]
        return None


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# --- Handler factories ---

def _set_const(attr: str, const) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        setattr(opts.config, attr, const)
    return handler


def _set_str(attr: str) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        setattr(opts.config, attr, value)
    return handler


def _set_measurement(attr: str) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        setattr(opts.config, attr, int(get_measurement(value)))
    return handler


def _set_format(attr: str) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        setattr(opts.config, attr, get_format(value))
    return handler


def _set_clamped(attr: str, low: float, high: float) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        setattr(opts.config, attr, _clamp(to_float(value), low, high))
    return handler


def _set_min_float(attr: str, minimum: float, what: str) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        number = to_float(value)
        if number < minimum:
            raise UsageError(f"Bad {what} \"{value}\"!")
        setattr(opts.config, attr, number)
    return handler


def _lookup_index(attr: str, table: tuple[str, ...], what: str) -> Handler:
    """Case-insensitive keyword lookup; no match keeps the current value."""
    def handler(opts: "OptionParser", value: str | None):
        keyword = value.lower()
        if keyword in table:
            setattr(opts.config, attr, table.index(keyword))
        else:
            log.warning(f"Unknown {what} \"{value}\", keeping current setting.")
    return handler


def _lookup_font(attr: str) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        face = FONT_NAMES.get(value.lower())
        if face is None:
            log.warning(f"Unknown font \"{value}\", keeping current setting.")
            return
        setattr(opts.config, attr, face)
    return handler


def _set_hf_image(slot: int) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        opts.config.hf_images[slot] = value
    return handler


def _set_deprecated_embed(flag: str, replacement: str, enabled: bool) -> Handler:
    def handler(opts: "OptionParser", value: str | None):
        log.warning(f"{flag} option superseded by {replacement}!")
        opts.config.embed_fonts = enabled
    return handler


# --- Handlers with more than one effect ---

def _batch(opts: "OptionParser", value: str | None):
    opts.num_files += 1
    if opts.sink is not None:
        opts.sink.load_book(value)


def _headfootfont(opts: "OptionParser", value: str | None):
    font = HEADFOOT_FONTS.get(value.lower())
    if font is None:
        log.warning(f"Unknown header/footer font \"{value}\", keeping current setting.")
        return
    opts.config.headfoot_type, opts.config.headfoot_style = font


def _compression(opts: "OptionParser", value: str | None):
    level = to_int(value) if value else 1
    opts.selector.set_compression(level)


def _jpeg(opts: "OptionParser", value: str | None):
    opts.config.jpeg = to_int(value) if value else 90


def _color(opts: "OptionParser", value: str | None):
    opts.config.output_color = True


def _grayscale(opts: "OptionParser", value: str | None):
    opts.config.output_color = False


def _single_document(output_type: OutputType) -> Handler:
    """--continuous and --webpage: no TOC or title page, PDF opens on page 1."""
    def handler(opts: "OptionParser", value: str | None):
        cfg = opts.config
        cfg.toc_levels = 0
        cfg.title_page = False
        cfg.output_type = output_type
        cfg.pdf_page_mode = PDF_PAGE_MODE_DOCUMENT
        cfg.pdf_first_page = PDF_FIRST_PAGE_P1
    return handler


def _format(opts: "OptionParser", value: str | None):
    opts.selector.select(value)


def _help(opts: "OptionParser", value: str | None):
    raise UsageError("")


def _linkstyle(opts: "OptionParser", value: str | None):
    if value == "plain":
        opts.config.link_style = LinkStyle.PLAIN
    elif value == "underline":
        opts.config.link_style = LinkStyle.UNDERLINE
    else:
        raise UsageError(f"Bad link style \"{value}\"!", value)


def _nup(opts: "OptionParser", value: str | None):
    number_up = to_int(value)
    if number_up not in VALID_NUMBER_UP:
        raise UsageError(f"Bad number-up value \"{value}\"!", value)
    opts.config.number_up = number_up


def _outdir(opts: "OptionParser", value: str | None):
    opts.config.output_path = value
    opts.config.output_files = True


def _outfile(opts: "OptionParser", value: str | None):
    opts.config.output_path = value
    opts.config.output_files = False
    opts.selector.infer_from_filename(value)


def _permissions(opts: "OptionParser", value: str | None):
    mask, encrypt = parse_permissions(value, opts.config.permissions)
    opts.config.permissions = mask
    if encrypt:
        opts.config.encryption = True


def _datadir(opts: "OptionParser", value: str | None):
    opts.config.data_dir = Path(value)


def _no_localfiles(opts: "OptionParser", value: str | None):
    opts.config.no_local = True


def _quiet(opts: "OptionParser", value: str | None):
    opts.config.verbosity = -1
    set_console_verbosity(opts.config.verbosity)


def _verbose(opts: "OptionParser", value: str | None):
    opts.config.verbosity += 1
    set_console_verbosity(opts.config.verbosity)


def _size(opts: "OptionParser", value: str | None):
    size = get_page_size(value)
    if size is None:
        log.warning(f"Unknown page size \"{value}\", keeping current setting.")
        return
    opts.config.page_width, opts.config.page_length = size


def _titleimage(opts: "OptionParser", value: str | None):
    opts.config.title_image = value
    opts.config.title_page = True


def _version(opts: "OptionParser", value: str | None):
    raise VersionRequested()


class VersionRequested(Exception):
    """Raised by --version; the caller prints the version and exits 0."""
    pass


def _build_flags() -> list[FlagSpec]:
    """The option table, in matching order."""
    F = FlagSpec
    flags = [
        F("--batch", 4, _batch, takes_value=True, cli_only=True),
        F("--bodycolor", 7, _set_str("body_color"), takes_value=True),
        F("--bodyfont", 7, _lookup_font("body_font"), takes_value=True),
        F("--textfont", 7, _lookup_font("body_font"), takes_value=True),
        F("--bodyimage", 7, _set_str("body_image"), takes_value=True),
        F("--book", 5, _set_const("output_type", OutputType.BOOK)),
        F("--bottom", 5, _set_measurement("page_bottom"), takes_value=True),
        F("--browserwidth", 4, _set_min_float("browser_width", 1.0, "browser width"), takes_value=True),
        F("--charset", 4, lambda opts, v: setattr(opts.config, "charset", v.lower()), takes_value=True),
        F("--color", 5, _color),
        F("--compression", 5, _compression, inline=True),
        F("--continuous", 5, _single_document(OutputType.CONTINUOUS)),
        F("--cookies", 5, _set_str("cookies"), takes_value=True),
        F("--datadir", 4, _datadir, takes_value=True, cli_only=True),
        F("--duplex", 4, _set_const("page_duplex", True)),
        F("--effectduration", 4, _set_min_float("pdf_effect_duration", 0.0, "effect duration"), takes_value=True),
        F("--embedfonts", 4, _set_const("embed_fonts", True)),
        F("--encryption", 4, _set_const("encryption", True)),
        F("--firstpage", 4, _lookup_index("pdf_first_page", PDF_FIRST_PAGES, "first page"), takes_value=True),
        F("--fontsize", 8, _set_clamped("font_size", 4.0, 24.0), takes_value=True),
        F("--fontspacing", 8, _set_clamped("font_spacing", 1.0, 3.0), takes_value=True),
        F("--footer", 5, _set_format("footer"), takes_value=True),
        F("--format", 5, _format, takes_value=True, aliases=("-t",), output_selection=True),
        F("--grayscale", 3, _grayscale),
        F("--header", 8, _set_format("header"), takes_value=True, exact=True),
        F("--header1", 9, _set_format("header1"), takes_value=True, exact=True),
        F("--headfootfont", 11, _headfootfont, takes_value=True),
        F("--headfootsize", 11, _set_clamped("headfoot_size", 6.0, 24.0), takes_value=True),
        F("--headingfont", 7, _lookup_font("heading_font"), takes_value=True),
        F("--help", 6, _help, cli_only=True),
        F("--hfimage", 9, _set_hf_image(0), takes_value=True, exact=True),
    ]
    flags += [
        F(f"--hfimage{slot}", 10, _set_hf_image(slot), takes_value=True, exact=True)
        for slot in range(MAX_HF_IMAGES)
    ]
    flags += [
        F("--jpeg", 3, _jpeg, inline=True),
        F("--landscape", 4, _set_const("landscape", True)),
        F("--left", 5, _set_measurement("page_left"), takes_value=True),
        F("--letterhead", 5, _set_str("letterhead"), takes_value=True),
        F("--linkcolor", 7, _set_str("link_color"), takes_value=True),
        F("--links", 7, _set_const("links", True), exact=True),
        F("--linkstyle", 8, _linkstyle, takes_value=True),
        F("--logoimage", 5, _set_str("logo_image"), takes_value=True, aliases=("--logo",)),
        F("--no-compression", 6, _set_const("compression", 0)),
        F("--no-duplex", 4, _set_const("page_duplex", False)),
        F("--no-embedfonts", 7, _set_const("embed_fonts", False)),
        F("--no-encryption", 7, _set_const("encryption", False)),
        F("--no-jpeg", 6, _set_const("jpeg", 0)),
        F("--no-links", 7, _set_const("links", False)),
        F("--no-localfiles", 7, _no_localfiles),
        F("--no-numbered", 6, _set_const("toc_numbers", False)),
        F("--no-overflow", 6, _set_const("overflow_errors", False)),
        F("--no-pscommands", 6, _set_const("ps_commands", False)),
        F("--no-strict", 6, _set_const("strict_html", False)),
        F("--no-title", 7, _set_const("title_page", False)),
        F("--no-toc", 7, _set_const("toc_levels", 0)),
        F("--no-truetype", 7, _set_deprecated_embed("--no-truetype", "--no-embedfonts", False)),
        F("--no-xrxcomments", 6, _set_const("xrx_comments", False)),
        F("--numbered", 5, _set_const("toc_numbers", True)),
        F("--nup", 5, _nup, takes_value=True),
        F("--outdir", 6, _outdir, takes_value=True, aliases=("-d",), output_selection=True),
        F("--outfile", 6, _outfile, takes_value=True, aliases=("-f",), output_selection=True),
        F("--overflow", 4, _set_const("overflow_errors", True)),
        F("--owner-password", 4, _set_str("owner_password"), takes_value=True),
        F("--pageduration", 7, _set_min_float("pdf_page_duration", 1.0, "page duration"), takes_value=True),
        F("--pageeffect", 7, _lookup_index("pdf_effect", PDF_EFFECTS, "page effect"), takes_value=True),
        F("--pagelayout", 7, _lookup_index("pdf_page_layout", PDF_LAYOUTS, "page layout"), takes_value=True),
        F("--pagemode", 7, _lookup_index("pdf_page_mode", PDF_PAGE_MODES, "page mode"), takes_value=True),
        F("--path", 5, _set_str("path"), takes_value=True),
        F("--permissions", 4, _permissions, takes_value=True),
        F("--portrait", 4, _set_const("landscape", False)),
        F("--pre-indent", 5, _set_measurement("pre_indent"), takes_value=True),
        F("--proxy", 4, _set_str("proxy"), takes_value=True),
        F("--pscommands", 3, _set_const("ps_commands", True)),
        F("--quiet", 3, _quiet, cli_only=True),
        F("--referer", 4, _set_str("referer"), takes_value=True),
        F("--right", 4, _set_measurement("page_right"), takes_value=True),
        F("--size", 4, _size, takes_value=True),
        F("--strict", 4, _set_const("strict_html", True)),
        F("--textcolor", 7, _set_str("text_color"), takes_value=True),
        F("--title", 7, _set_const("title_page", True)),
        F("--titlefile", 8, _titleimage, takes_value=True),
        F("--titleimage", 8, _titleimage, takes_value=True),
        F("--tocfooter", 6, _set_format("toc_footer"), takes_value=True),
        F("--tocheader", 6, _set_format("toc_header"), takes_value=True),
        F("--toclevels", 6, lambda opts, v: setattr(opts.config, "toc_levels", to_int(v)), takes_value=True),
        F("--toctitle", 6, _set_str("toc_title"), takes_value=True),
        F("--top", 5, _set_measurement("page_top"), takes_value=True),
        F("--truetype", 4, _set_deprecated_embed("--truetype", "--embedfonts", True)),
        F("--user-password", 4, _set_str("user_password"), takes_value=True),
        F("--verbose", 6, _verbose, aliases=("-v",), cli_only=True),
        F("--version", 6, _version, cli_only=True),
        F("--webpage", 3, _single_document(OutputType.WEBPAGES)),
        F("--xrxcomments", 3, _set_const("xrx_comments", True)),
    ]
    return flags


FLAGS: list[FlagSpec] = _build_flags()


class OptionParser:
    """
    Applies command-line tokens to a GlobalConfig and ExportSelector.

    Input operands are handed to the DocumentSink as they are met, so a
    flag only affects the files that follow it.
    """

    def __init__(self, config: GlobalConfig, selector: ExportSelector,
                 sink: DocumentSink | None = None, flags: list[FlagSpec] | None = None):
        self.config = config
        self.selector = selector
        self.sink = sink
        self.flags = flags if flags is not None else FLAGS
        self.num_files = 0
        self.operands: list[str] = []


    def match(self, token: str) -> tuple[FlagSpec | None, str | None]:
        """Finds the flag for a command-line token. Returns (spec, inline value)."""
        for spec in self.flags:
            inline = spec.inline_value(token)
            if inline is not None:
                return spec, inline
            if spec.matches_prefix(token):
                return spec, None
        return None, None


    def match_exact(self, token: str) -> tuple[FlagSpec | None, str | None]:
        """Finds the flag for a book-script token by its full name."""
        for spec in self.flags:
            inline = spec.inline_value(token)
            if inline is not None:
                return spec, inline
            if spec.matches_exact(token):
                return spec, None
        return None, None


    def apply(self, spec: FlagSpec, value: str | None = None):
        """Runs one flag's handler. The handler validates before it assigns."""
        spec.handler(self, value)


    def wants_version(self, argv: list[str]) -> bool:
        """True if --version appears as a flag (not as another flag's value)."""
        i = 0
        while i < len(argv):
            spec, inline = self.match(argv[i])
            if spec is not None:
                if spec.handler is _version:
                    return True
                if spec.takes_value and inline is None:
                    i += 1
            i += 1
        return False


    def parse(self, argv: list[str]) -> int:
        """
        Processes argv (without the program name) left to right.
        Returns the number of input operands seen.

        Raises:
            UsageError: on an unknown flag or a flag missing its value.
            VersionRequested: when --version is met.
        """
        i = 0
        while i < len(argv):
            token = argv[i]

            if token == '-':
                self._operand(token)
                i += 1
                continue

            spec, value = self.match(token)
            if spec is None:
                if token.startswith('-'):
                    raise UsageError(f"Bad option argument \"{token}\"!", token)
                self._operand(token)
                i += 1
                continue

            if spec.takes_value:
                if i + 1 >= len(argv):
                    raise UsageError(f"Missing value for \"{token}\"!", token)
                i += 1
                value = argv[i]

            self.apply(spec, value)
            i += 1

        return self.num_files


    def _operand(self, token: str):
        self.num_files += 1
        self.operands.append(token)
        if self.sink is None:
            return
        if token == '-':
            self.sink.read_stdin()
        else:
            self.sink.read_file(token)
