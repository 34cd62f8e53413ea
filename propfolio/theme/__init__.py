"""Theme palettes and token derivation."""

from propfolio.theme.engine import (
    BACKGROUND_SLOT,
    DARK_ACCENT_OVERRIDE,
    PaletteTokens,
    StyleSubstrate,
    ThemeEngine,
    derive_tokens,
    semantic_slots,
)
from propfolio.theme.palettes import PALETTES, Palette

__all__ = [
    "BACKGROUND_SLOT",
    "DARK_ACCENT_OVERRIDE",
    "PALETTES",
    "Palette",
    "PaletteTokens",
    "StyleSubstrate",
    "ThemeEngine",
    "derive_tokens",
    "semantic_slots",
]
