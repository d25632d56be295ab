"""
Tests for the table-driven option parser (docbinder/core/options.py)

Run: python -m pytest tests/test_options.py -q
"""
import copy

import pytest

from docbinder.core.export import ExportSelector, HtmlTarget, PdfTarget, PostScriptTarget
from docbinder.core.options import FLAGS, OptionParser, VersionRequested
from docbinder.utils.config import (
    GlobalConfig, FontStyle, LinkStyle, OutputType, Typeface, PDF_PAGE_MODE_DOCUMENT,
)
from docbinder.utils.errors import UsageError
from docbinder.utils.permissions import PERM_BITS, PERM_PRINT


class RecordingSink:
    def __init__(self):
        self.calls = []

    def read_file(self, name):
        self.calls.append(("file", name))
        return True

    def read_stdin(self):
        self.calls.append(("stdin", None))
        return True

    def load_book(self, name):
        self.calls.append(("book", name))
        return True


def make_parser(sink=None):
    config = GlobalConfig()
    selector = ExportSelector(config)
    return OptionParser(config, selector, sink=sink)


# ---------------------------------------------------------------------------
# Missing values
# ---------------------------------------------------------------------------

VALUE_FLAGS = [spec.name for spec in FLAGS if spec.takes_value] + ["-t", "-d", "-f"]


@pytest.mark.parametrize("flag", VALUE_FLAGS)
def test_value_flag_without_value_is_usage_error(flag):
    parser = make_parser()
    before = copy.deepcopy(parser.config)

    with pytest.raises(UsageError):
        parser.parse([flag])

    assert parser.config == before
    assert parser.num_files == 0


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

class TestMatching:

    def test_unambiguous_prefix_matches(self):
        parser = make_parser()
        parser.parse(["--toclev", "2", "--gray", "--no-tit"])
        assert parser.config.toc_levels == 2
        assert parser.config.output_color is False
        assert parser.config.title_page is False

    def test_prefix_shorter_than_minimum_is_rejected(self):
        parser = make_parser()
        with pytest.raises(UsageError, match="Bad option"):
            parser.parse(["--fonts", "12"])

    def test_unknown_flag_is_usage_error(self):
        parser = make_parser()
        with pytest.raises(UsageError):
            parser.parse(["--bogus"])

    def test_first_flag_in_table_order_wins(self):
        # Every --no-* flag starts with "--no-"; only --no-duplex accepts a 4-character prefix
        spec, _ = make_parser().match("--no-")
        assert spec.name == "--no-duplex"

    @pytest.mark.parametrize("token, name", [("--verb", "--verbose"), ("--vers", "--version")])
    def test_prefix_must_match_the_whole_token(self, token, name):
        spec, _ = make_parser().match(token)
        assert spec.name == name

    def test_exact_only_flags_need_full_name(self):
        parser = make_parser()
        spec, _ = parser.match("--header")
        assert spec.name == "--header"
        spec, _ = parser.match("--header1")
        assert spec.name == "--header1"
        spec, _ = parser.match("--link")
        assert spec is None or spec.name != "--links"

    def test_aliases(self):
        parser = make_parser()
        parser.parse(["-t", "htmlsep", "-d", "outdir"])
        assert parser.config.output_path == "outdir"
        assert parser.config.output_files is True
        assert parser.selector.target.name == "htmlsep"

    def test_inline_values(self):
        parser = make_parser()
        parser.parse(["--compression=5", "--jpeg=50"])
        assert parser.config.compression == 5
        assert parser.config.jpeg == 50

    def test_jpeg_without_value_defaults_to_90(self):
        parser = make_parser()
        parser.parse(["--jpeg"])
        assert parser.config.jpeg == 90


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

class TestValues:

    @pytest.mark.parametrize("flag, value, attr, expected", [
        ("--fontsize", "40", "font_size", 24.0),
        ("--fontsize", "1", "font_size", 4.0),
        ("--fontsize", "12.5", "font_size", 12.5),
        ("--fontspacing", "5", "font_spacing", 3.0),
        ("--fontspacing", "0.5", "font_spacing", 1.0),
        ("--headfootsize", "2", "headfoot_size", 6.0),
        ("--headfootsize", "30", "headfoot_size", 24.0),
    ])
    def test_numeric_flags_clamp(self, flag, value, attr, expected):
        parser = make_parser()
        parser.parse([flag, value])
        assert getattr(parser.config, attr) == expected

    @pytest.mark.parametrize("argv", [
        ["--nup", "3"],
        ["--linkstyle", "bold"],
        ["--browserwidth", "0"],
        ["--pageduration", "0.5"],
        ["--effectduration", "-1"],
        ["--format", "docx"],
    ])
    def test_rejected_values(self, argv):
        parser = make_parser()
        before = copy.deepcopy(parser.config)
        with pytest.raises(UsageError):
            parser.parse(argv)
        assert parser.config == before

    def test_measurements(self):
        parser = make_parser()
        parser.parse(["--left", "1in", "--right", "2cm", "--top", "10mm", "--bottom", "20"])
        assert parser.config.page_left == 72
        assert parser.config.page_right == 56
        assert parser.config.page_top == 28
        assert parser.config.page_bottom == 20

    def test_size(self):
        parser = make_parser()
        parser.parse(["--size", "a4"])
        assert (parser.config.page_width, parser.config.page_length) == (595, 842)
        parser.parse(["--size", "8.5x11in"])
        assert (parser.config.page_width, parser.config.page_length) == (612, 792)

    def test_unknown_size_keeps_current(self):
        parser = make_parser()
        parser.parse(["--size", "napkin"])
        assert parser.config.page_width == 595

    def test_font_lookups_are_case_insensitive(self):
        parser = make_parser()
        parser.parse(["--bodyfont", "Courier", "--headingfont", "SANS"])
        assert parser.config.body_font == Typeface.COURIER
        assert parser.config.heading_font == Typeface.SANS_SERIF

    def test_unknown_font_keeps_current(self):
        parser = make_parser()
        parser.parse(["--bodyfont", "comic"])
        assert parser.config.body_font == Typeface.TIMES

    def test_headfootfont(self):
        parser = make_parser()
        parser.parse(["--headfootfont", "times-bolditalic"])
        assert parser.config.headfoot_type == Typeface.TIMES
        assert parser.config.headfoot_style == FontStyle.BOLD_ITALIC

    def test_pdf_viewer_lookups(self):
        parser = make_parser()
        parser.parse(["--pagemode", "FullScreen", "--pagelayout", "twoleft",
                      "--firstpage", "toc", "--pageeffect", "wr"])
        assert parser.config.pdf_page_mode == 2
        assert parser.config.pdf_page_layout == 2
        assert parser.config.pdf_first_page == 1
        assert parser.config.pdf_effect == 15

    def test_unknown_page_mode_keeps_current(self):
        parser = make_parser()
        current = parser.config.pdf_page_mode
        parser.parse(["--pagemode", "bogus"])
        assert parser.config.pdf_page_mode == current

    def test_linkstyle(self):
        parser = make_parser()
        parser.parse(["--linkstyle", "plain"])
        assert parser.config.link_style == LinkStyle.PLAIN

    def test_webpage_disables_toc_and_title(self):
        parser = make_parser()
        parser.parse(["--webpage"])
        cfg = parser.config
        assert cfg.output_type == OutputType.WEBPAGES
        assert cfg.toc_levels == 0
        assert cfg.title_page is False
        assert cfg.pdf_page_mode == PDF_PAGE_MODE_DOCUMENT

    def test_permissions_turn_on_encryption(self):
        parser = make_parser()
        parser.parse(["--permissions", "none,print"])
        assert parser.config.permissions & PERM_BITS == PERM_PRINT
        assert parser.config.encryption is True

    def test_hfimage_slots(self):
        parser = make_parser()
        parser.parse(["--hfimage", "zero.png", "--hfimage3", "three.png"])
        assert parser.config.hf_images[0] == "zero.png"
        assert parser.config.hf_images[3] == "three.png"

    def test_deprecated_truetype_flags(self):
        parser = make_parser()
        parser.parse(["--truetype"])
        assert parser.config.embed_fonts is True
        parser.parse(["--no-truetype"])
        assert parser.config.embed_fonts is False

    def test_titlefile_enables_title_page(self):
        parser = make_parser()
        parser.parse(["--no-title", "--titleimage", "logo.png"])
        assert parser.config.title_image == "logo.png"
        assert parser.config.title_page is True

    def test_charset_is_lowercased(self):
        parser = make_parser()
        parser.parse(["--charset", "UTF-8"])
        assert parser.config.charset == "utf-8"

    def test_help_raises_empty_usage_error(self):
        parser = make_parser()
        with pytest.raises(UsageError) as exc:
            parser.parse(["--help"])
        assert str(exc.value) == ""


# ---------------------------------------------------------------------------
# Output selection
# ---------------------------------------------------------------------------

class TestOutputSelection:

    def test_outfile_extension_selects_pdf(self):
        parser = make_parser()
        parser.parse(["-f", "out.pdf"])
        assert parser.selector.target == PdfTarget(14)
        assert parser.config.output_path == "out.pdf"
        assert parser.config.output_files is False

    def test_explicit_format_wins_over_extension(self):
        parser = make_parser()
        parser.parse(["-t", "ps", "-f", "out.pdf"])
        assert parser.selector.target == PostScriptTarget(2)

    def test_later_explicit_format_overrides_inference(self):
        parser = make_parser()
        parser.parse(["-f", "out.pdf", "-t", "html"])
        assert parser.selector.target == HtmlTarget()

    def test_compression_ignored_for_old_pdf(self):
        parser = make_parser()
        parser.parse(["-t", "pdf11", "--compression=5"])
        assert parser.config.compression == 0


# ---------------------------------------------------------------------------
# Operands
# ---------------------------------------------------------------------------

class TestOperands:

    def test_operands_reach_the_sink_in_order(self):
        sink = RecordingSink()
        parser = make_parser(sink)
        count = parser.parse(["a.html", "--toclevels", "2", "-", "b.html"])
        assert count == 3
        assert sink.calls == [("file", "a.html"), ("stdin", None), ("file", "b.html")]

    def test_batch_loads_a_book(self):
        sink = RecordingSink()
        parser = make_parser(sink)
        parser.parse(["--batch", "job.book"])
        assert parser.num_files == 1
        assert sink.calls == [("book", "job.book")]

    def test_version_raises(self):
        with pytest.raises(VersionRequested):
            make_parser().parse(["--version"])

    def test_wants_version_skips_flag_values(self):
        parser = make_parser()
        assert parser.wants_version(["a.html", "--version"]) is True
        assert parser.wants_version(["--toctitle", "--version"]) is False
        assert parser.wants_version(["a.html"]) is False
