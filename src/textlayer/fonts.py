"""
Font attribute resolution.

Maps raw embedded PDF font names (e.g. ``BAAAAA+ArialMT-Bold``) to a
canonical family and weight, and canonical families to one of the
Base-14 font classes used when drawing replacement text.
"""

import re
from enum import Enum


class FontClass(Enum):
    """Standard font class used at save time."""
    SERIF = "serif"
    SANS = "sans"
    MONO = "mono"


# Checked in order; first case-insensitive substring match wins
FAMILY_ALIASES: tuple[tuple[str, str], ...] = (
    ("TimesNewRoman", "Times New Roman"),
    ("TimesNewRomanPS", "Times New Roman"),
    ("Arial", "Arial"),
    ("ArialMT", "Arial"),
    ("Helvetica", "Helvetica"),
    ("Courier", "Courier New"),
    ("CourierNew", "Courier New"),
    ("Calibri", "Calibri"),
    ("Verdana", "Verdana"),
    ("Georgia", "Georgia"),
    ("Palatino", "Palatino"),
)

FONT_CLASS_PATTERNS: tuple[tuple[re.Pattern, FontClass], ...] = (
    (re.compile(r"times|georgia|palatino", re.IGNORECASE), FontClass.SERIF),
    (re.compile(r"helvetica|arial|avenir|lato", re.IGNORECASE), FontClass.SANS),
    (re.compile(r"courier|mono", re.IGNORECASE), FontClass.MONO),
)

# PyMuPDF Base-14 names: (normal, bold)
STANDARD_FONTS: dict[FontClass, tuple[str, str]] = {
    FontClass.SERIF: ("tiro", "tibo"),
    FontClass.SANS: ("helv", "hebo"),
    FontClass.MONO: ("cour", "cobo"),
}

DEFAULT_FAMILY = "sans-serif"

_SUBSET_PREFIX = re.compile(r"^[A-Z]{6}\+")
_FAMILY_SEPARATORS = re.compile(r"[-,]")
_BOLD_PATTERN = re.compile(r"bold|heavy|black|demibold|semibold", re.IGNORECASE)


def strip_subset_prefix(font_name: str) -> str:
    """Remove a ``ABCDEF+`` subset tag from a font name."""
    return _SUBSET_PREFIX.sub("", font_name)


def canonical_family(font_name: str | None) -> str:
    """
    Resolve a raw font name to a canonical family name.

    Args:
        font_name: Font name as reported by the PDF (may carry a subset
            prefix and style suffix)

    Returns:
        Canonical family, e.g. "Arial" for "BAAAAA+ArialMT-Bold"
    """
    if not font_name:
        return DEFAULT_FAMILY
    name = strip_subset_prefix(font_name)
    family = _FAMILY_SEPARATORS.split(name)[0].strip() or DEFAULT_FAMILY

    lowered = family.lower()
    for key, value in FAMILY_ALIASES:
        if key.lower() in lowered:
            return value
    return family


def font_weight(font_name: str | None) -> str:
    """Return "bold" if the full font name carries a heavy weight marker."""
    if font_name and _BOLD_PATTERN.search(font_name):
        return "bold"
    return "normal"


def resolve_font(font_name: str | None) -> tuple[str, str]:
    """Return (family, weight) for a raw font name."""
    return canonical_family(font_name), font_weight(font_name)


def font_class(family: str | None) -> FontClass:
    """Classify a family as serif, sans or monospace (sans if unknown)."""
    if family:
        for pattern, cls in FONT_CLASS_PATTERNS:
            if pattern.search(family):
                return cls
    return FontClass.SANS


def pick_standard_font(family: str | None, weight: str = "normal") -> str:
    """Pick the Base-14 font name for a family/weight pair."""
    normal, bold = STANDARD_FONTS[font_class(family)]
    return bold if weight == "bold" else normal
