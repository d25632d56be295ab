"""
Small textual encodings: lengths with unit suffixes, page sizes,
3-character header/footer format codes and lenient number parsing.
"""
import re


_NUMBER_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_RE = re.compile(r"\s*([+-]?\d+)")

# Points per unit
UNITS = {
    'in': 72.0,
    'cm': 72.0 / 2.54,
    'mm': 72.0 / 25.4,
    'pt': 1.0,
}

# Named page sizes in points (width, length)
PAGE_SIZES: dict[str, tuple[int, int]] = {
    'letter': (612, 792),
    'legal': (612, 1008),
    'tabloid': (792, 1224),
    'a3': (842, 1191),
    'a4': (595, 842),
    'a5': (420, 595),
    'universal': (595, 792),
}

# Valid header/footer format characters; '.' is a blank slot
FORMAT_CODES = "./:1aAcCdDhiIlLtTu"
BLANK_FORMAT = "..."


def to_float(value: str) -> float:
    """Parses the leading number of a string, 0.0 if there is none."""
    m = _NUMBER_RE.match(value or '')
    return float(m.group(1)) if m else 0.0


def to_int(value: str) -> int:
    """Parses the leading integer of a string, 0 if there is none."""
    m = _INT_RE.match(value or '')
    return int(m.group(1)) if m else 0


def get_measurement(value: str, mul: float = 1.0) -> float:
    """
    Converts a length such as '0.5in', '2cm' or '36' to points.
    Values without a known unit are multiplied by `mul`.
    """
    m = _NUMBER_RE.match(value or '')
    if not m:
        return 0.0
    number = float(m.group(1))
    units = value[m.end():].strip().lower()
    for name, factor in UNITS.items():
        if units.startswith(name):
            return number * factor
    return number * mul


def get_page_size(value: str) -> tuple[int, int] | None:
    """Returns (width, length) in points for a size name or 'WxH{in,cm,mm}'."""
    name = (value or '').strip().lower()
    if name in PAGE_SIZES:
        return PAGE_SIZES[name]

    m = re.fullmatch(r"([\d.]+)x([\d.]+)\s*([a-z]*)", name)
    if not m:
        return None
    factor = UNITS.get(m.group(3), 1.0)
    width = float(m.group(1)) * factor
    length = float(m.group(2)) * factor
    if width <= 0 or length <= 0:
        return None
    return int(width), int(length)


def get_format(value: str) -> str:
    """
    Normalizes a header/footer format string to exactly 3 slots.
    Unknown characters and missing positions become blank ('.').
    """
    slots = []
    for ch in (value or '')[:3]:
        slots.append(ch if ch in FORMAT_CODES else '.')
    while len(slots) < 3:
        slots.append('.')
    return ''.join(slots)


def is_blank_format(fmt: str) -> bool:
    """True if none of the 3 positional slots is set."""
    return get_format(fmt) == BLANK_FORMAT
