"""
PDF permission keywords.

A permission list is a comma-separated string such as "all,no-print".
Keywords are applied left to right; 'all' and 'none' reset the mask outright.
"""
import logging


log = logging.getLogger("docbinder")


PERM_PRINT = 4
PERM_MODIFY = 8
PERM_COPY = 16
PERM_ANNOTATE = 32
PERM_BITS = PERM_PRINT | PERM_MODIFY | PERM_COPY | PERM_ANNOTATE

PERM_ALL = -4
PERM_NONE = -64

_GRANTS = {
    'print': PERM_PRINT,
    'modify': PERM_MODIFY,
    'copy': PERM_COPY,
    'annotate': PERM_ANNOTATE,
}


def parse_permissions(value: str, mask: int = PERM_ALL) -> tuple[int, bool]:
    """
    Applies a permission list to `mask`.

    Returns:
        tuple[int, bool]: the new mask and whether encryption must be turned on
        (any mask other than 'all' needs an encrypted document).
        Encryption is never turned off here.
    """
    if not value:
        return mask, False

    for keyword in value.split(','):
        keyword = keyword.strip().lower()
        if keyword == 'all':
            mask = PERM_ALL
        elif keyword == 'none':
            mask = PERM_NONE
        elif keyword in _GRANTS:
            mask |= _GRANTS[keyword]
        elif keyword.startswith('no-') and keyword[3:] in _GRANTS:
            mask &= ~_GRANTS[keyword[3:]]
        elif keyword:
            log.debug(f"Ignoring unknown permission '{keyword}'.")

    return mask, mask != PERM_ALL
