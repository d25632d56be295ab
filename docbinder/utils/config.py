"""
Defines configuration and settings for a conversion job.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path


VERSION = "1.0.0"

MAX_HF_IMAGES = 10


class Typeface(IntEnum):
    COURIER = 0
    TIMES = 1
    HELVETICA = 2
    MONOSPACE = 3
    SERIF = 4
    SANS_SERIF = 5


class FontStyle(IntEnum):
    NORMAL = 0
    BOLD = 1
    ITALIC = 2
    BOLD_ITALIC = 3


class OutputType(IntEnum):
    """Defines how the documents are laid out by the renderer."""
    BOOK = 0
    CONTINUOUS = 1
    WEBPAGES = 2


class LinkStyle(IntEnum):
    PLAIN = 0
    UNDERLINE = 1


# PDF viewer settings are stored as indices into these tables
PDF_PAGE_MODES = ("document", "outline", "fullscreen")
PDF_LAYOUTS = ("single", "one", "twoleft", "tworight")
PDF_FIRST_PAGES = ("p1", "toc", "c1")
PDF_EFFECTS = (
    "none", "bi", "bo", "d", "gd", "gdr", "gr", "hb", "hsi",
    "hso", "vb", "vsi", "vso", "wd", "wl", "wr", "wu",
)

PDF_PAGE_MODE_DOCUMENT = 0
PDF_PAGE_MODE_OUTLINE = 1
PDF_FIRST_PAGE_P1 = 0


@dataclass
class GlobalConfig:
    """
    The resolved configuration of a single conversion job.

    Created with compiled-in defaults, then updated in order by the
    preferences store, the CGI adapter or the command line / book scripts.
    Components receive it by reference; there is no module-level instance.
    """
    # Page geometry, in points
    page_width: int = 595
    page_length: int = 792
    page_left: int = 72
    page_right: int = 36
    page_top: int = 36
    page_bottom: int = 36
    page_duplex: bool = False
    landscape: bool = False
    number_up: int = 1
    pre_indent: int = 40

    # Fonts
    body_font: Typeface = Typeface.TIMES
    heading_font: Typeface = Typeface.HELVETICA
    font_size: float = 11.0
    font_spacing: float = 1.2
    headfoot_type: Typeface = Typeface.HELVETICA
    headfoot_style: FontStyle = FontStyle.NORMAL
    headfoot_size: float = 11.0
    charset: str = "iso-8859-1"
    embed_fonts: bool = False

    # Colors and links
    text_color: str = ""
    body_color: str = ""
    body_image: str = ""
    link_color: str = ""
    link_style: LinkStyle = LinkStyle.UNDERLINE
    links: bool = True
    browser_width: float = 680.0
    output_color: bool = True

    # Headers, footers and table of contents
    header: str = ".t."
    header1: str = ""
    footer: str = "h.1"
    toc_header: str = ".t."
    toc_footer: str = "..i"
    toc_levels: int = 3
    toc_numbers: bool = False
    toc_title: str = "Table of Contents"
    title_page: bool = True
    title_image: str = ""
    logo_image: str = ""
    letterhead: str = ""
    hf_images: list[str] = field(default_factory=lambda: [""] * MAX_HF_IMAGES)

    # Output
    output_type: OutputType = OutputType.BOOK
    output_path: str = ""
    output_files: bool = False      # True = output_path is a directory
    compression: int = 1
    jpeg: int = 0
    ps_level: int = 2
    ps_commands: bool = False
    xrx_comments: bool = False
    pdf_version: int = 14
    strict_html: bool = False
    overflow_errors: bool = False

    # PDF viewer settings
    pdf_page_mode: int = PDF_PAGE_MODE_OUTLINE
    pdf_page_layout: int = 0
    pdf_first_page: int = PDF_FIRST_PAGE_P1
    pdf_effect: int = 0
    pdf_page_duration: float = 10.0
    pdf_effect_duration: float = 1.0

    # PDF security
    encryption: bool = False
    permissions: int = -4
    owner_password: str = ""
    user_password: str = ""

    # Input resolution
    path: str = ""
    proxy: str = ""
    cookies: str = ""
    referer: str = ""
    no_local: bool = False

    # Process
    verbosity: int = 0
    data_dir: Path | None = None
    cgi_mode: bool = False
