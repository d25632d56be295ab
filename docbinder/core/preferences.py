"""
Persisted per-user preferences.

The file is a plain list of KEY=value lines written in a fixed order after
a "#DOCBINDERRC <version>" comment. Keys are matched case-insensitively on
load; values are taken verbatim up to the end of the line.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Any

from ..utils.config import GlobalConfig, Typeface, FontStyle, LinkStyle, VERSION
from ..utils.measurements import to_float, to_int, get_format, is_blank_format


log = logging.getLogger("docbinder")


RC_HEADER = "#DOCBINDERRC"
RC_FILENAME = ".docbinderrc"
DATA_RC_FILENAME = "docbinder.rc"

# Formats that fall back to these when the file leaves them blank
FORMAT_DEFAULTS = {
    "header": ".t.",
    "footer": "h.1",
    "toc_header": ".t.",
    "toc_footer": "..i",
}


def default_rc_path(config: GlobalConfig, environ=None) -> Path | None:
    """
    $HOME/.docbinderrc, or docbinder.rc in the data directory when HOME is
    unset. Returns None when neither location is known.
    """
    environ = os.environ if environ is None else environ
    home = environ.get("HOME")
    if home:
        return Path(home) / RC_FILENAME
    if config.data_dir is not None:
        return Path(config.data_dir) / DATA_RC_FILENAME
    return None


# --- Value codecs ---

def _decode_bool(value: str) -> bool:
    return to_int(value) != 0


def _encode_bool(value: bool) -> str:
    return "1" if value else "0"


def _decode_pdf_version(value: str) -> int:
    """Accepts both "14" and "1.4"."""
    if '.' in value:
        return int(round(to_float(value) * 10))
    return to_int(value)


def _enum_decoder(enum_type) -> Callable[[str], Any]:
    def decode(value: str):
        return enum_type(to_int(value))
    return decode


def _encode_int(value) -> str:
    return str(int(value))


@dataclass(frozen=True)
class PrefField:
    """One tracked KEY and the config attribute it maps to."""
    key: str
    attr: str
    decode: Callable[[str], Any] = str
    encode: Callable[[Any], str] = str


def _str(key, attr):
    return PrefField(key, attr)


def _int(key, attr):
    return PrefField(key, attr, to_int, _encode_int)


def _float(key, attr):
    return PrefField(key, attr, to_float, repr)


def _bool(key, attr):
    return PrefField(key, attr, _decode_bool, _encode_bool)


def _format(key, attr):
    return PrefField(key, attr, get_format)


def _enum(key, attr, enum_type):
    return PrefField(key, attr, _enum_decoder(enum_type), _encode_int)


# Save order
PREF_FIELDS: list[PrefField] = [
    _str("TEXTCOLOR", "text_color"),
    _str("BODYCOLOR", "body_color"),
    _str("BODYIMAGE", "body_image"),
    _str("LINKCOLOR", "link_color"),
    _enum("LINKSTYLE", "link_style", LinkStyle),
    _float("BROWSERWIDTH", "browser_width"),
    _int("PAGEWIDTH", "page_width"),
    _int("PAGELENGTH", "page_length"),
    _int("PAGELEFT", "page_left"),
    _int("PAGERIGHT", "page_right"),
    _int("PAGETOP", "page_top"),
    _int("PAGEBOTTOM", "page_bottom"),
    _bool("PAGEDUPLEX", "page_duplex"),
    _bool("LANDSCAPE", "landscape"),
    _int("COMPRESSION", "compression"),
    _bool("OUTPUTCOLOR", "output_color"),
    _bool("TOCNUMBERS", "toc_numbers"),
    _int("TOCLEVELS", "toc_levels"),
    _int("JPEG", "jpeg"),
    _format("PAGEHEADER", "header"),
    _format("PAGEFOOTER", "footer"),
    _int("NUMBERUP", "number_up"),
    _format("TOCHEADER", "toc_header"),
    _format("TOCFOOTER", "toc_footer"),
    _str("TOCTITLE", "toc_title"),
    _enum("BODYFONT", "body_font", Typeface),
    _enum("HEADINGFONT", "heading_font", Typeface),
    _float("FONTSIZE", "font_size"),
    _float("FONTSPACING", "font_spacing"),
    _enum("HEADFOOTTYPE", "headfoot_type", Typeface),
    _enum("HEADFOOTSTYLE", "headfoot_style", FontStyle),
    _float("HEADFOOTSIZE", "headfoot_size"),
    PrefField("PDFVERSION", "pdf_version", _decode_pdf_version, _encode_int),
    _int("PSLEVEL", "ps_level"),
    _bool("PSCOMMANDS", "ps_commands"),
    _bool("XRXCOMMENTS", "xrx_comments"),
    _str("CHARSET", "charset"),
    _int("PAGEMODE", "pdf_page_mode"),
    _int("PAGELAYOUT", "pdf_page_layout"),
    _int("FIRSTPAGE", "pdf_first_page"),
    _int("PAGEEFFECT", "pdf_effect"),
    _float("PAGEDURATION", "pdf_page_duration"),
    _float("EFFECTDURATION", "pdf_effect_duration"),
    _bool("ENCRYPTION", "encryption"),
    _int("PERMISSIONS", "permissions"),
    _str("OWNERPASSWORD", "owner_password"),
    _str("USERPASSWORD", "user_password"),
    _bool("LINKS", "links"),
    _bool("EMBEDFONTS", "embed_fonts"),
    _str("PATH", "path"),
    _str("PROXY", "proxy"),
    _bool("STRICTHTML", "strict_html"),
]

_FIELDS_BY_KEY = {f.key: f for f in PREF_FIELDS}
# Files written by older versions
_FIELDS_BY_KEY["TRUETYPE"] = _FIELDS_BY_KEY["EMBEDFONTS"]


class PreferencesStore:
    """Loads and saves the tracked GlobalConfig fields."""

    def __init__(self, config: GlobalConfig, path: Path | None):
        self.config = config
        self.path = Path(path) if path is not None else None


    def load(self) -> bool:
        """
        Applies the preferences file to the config.
        Returns False if there is no file to read; that is not an error.
        """
        loaded = False
        if self.path is not None and self.path.is_file():
            try:
                with open(self.path, "r", encoding="utf-8", errors="replace") as fp:
                    for line in fp:
                        self._apply_line(line.rstrip("\r\n"))
                loaded = True
                log.debug(f"Loaded preferences from {self.path}")
            except OSError as e:
                log.warning(f"Unable to read preferences file {self.path}: {e}")

        self._apply_format_defaults()
        return loaded


    def save(self):
        """Writes every tracked field. Raises OSError if the file cannot be written."""
        if self.path is None:
            raise OSError("No preferences file location is known.")

        with open(self.path, "w", encoding="utf-8") as fp:
            fp.write(f"{RC_HEADER} {VERSION}\n")
            for field in PREF_FIELDS:
                value = field.encode(getattr(self.config, field.attr))
                fp.write(f"{field.key}={value}\n")

        log.debug(f"Saved preferences to {self.path}")


    def _apply_line(self, line: str):
        if not line or line.startswith('#'):
            return
        key, sep, value = line.partition('=')
        if not sep:
            log.debug(f"Skipping malformed preferences line \"{line}\".")
            return

        field = _FIELDS_BY_KEY.get(key.strip().upper())
        if field is None:
            log.debug(f"Skipping unknown preferences key \"{key}\".")
            return

        try:
            decoded = field.decode(value)
        except ValueError:
            log.debug(f"Skipping bad value for {field.key}: \"{value}\".")
            return
        setattr(self.config, field.attr, decoded)


    def _apply_format_defaults(self):
        for attr, default in FORMAT_DEFAULTS.items():
            if is_blank_format(getattr(self.config, attr)):
                setattr(self.config, attr, default)
