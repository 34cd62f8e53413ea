"""Palette catalog.

Colors are stored as space-separated ``"R G B"`` triplets so consumers can
compose them with an alpha channel (``rgb(var(--color-base-900) / 0.5)``).
"""

from dataclasses import dataclass

NEUTRAL_STEPS = (50, 100, 200, 300, 400, 500, 600, 700, 800, 850, 900)
ACCENT_STEPS = (50, 100, 200, 300, 400, 500, 600, 700)


@dataclass(frozen=True)
class Palette:
    """Named neutral + accent scales and the font that goes with them."""

    id: str
    name: str
    description: str
    font: str
    neutral: dict[int, str]
    accent: dict[int, str]

    def __post_init__(self) -> None:
        if tuple(sorted(self.neutral)) != NEUTRAL_STEPS:
            raise ValueError(f"Palette {self.id} neutral scale must define {NEUTRAL_STEPS}")
        if tuple(sorted(self.accent)) != ACCENT_STEPS:
            raise ValueError(f"Palette {self.id} accent scale must define {ACCENT_STEPS}")


CORPORATE = Palette(
    id="corporate",
    name="Corporate",
    description="Professional Slate & Blue. Clean and trustworthy.",
    font="Inter",
    neutral={
        50: "248 250 252",
        100: "241 245 249",
        200: "226 232 240",
        300: "203 213 225",
        400: "148 163 184",
        500: "100 116 139",
        600: "71 85 105",
        700: "51 65 85",
        800: "30 41 59",
        850: "22 32 49",
        900: "15 23 42",
    },
    accent={
        50: "239 246 255",
        100: "219 234 254",
        200: "191 219 254",
        300: "147 197 253",
        400: "96 165 250",
        500: "59 130 246",
        600: "37 99 235",
        700: "29 78 216",
    },
)

ELEGANT = Palette(
    id="elegant",
    name="Elegant",
    description="Sophisticated Stone & Emerald. Warm and grounded.",
    font="Lato",
    neutral={
        50: "250 250 249",
        100: "245 245 244",
        200: "231 229 228",
        300: "214 211 209",
        400: "168 162 158",
        500: "120 113 108",
        600: "87 83 78",
        700: "68 64 60",
        800: "41 37 36",
        850: "35 30 28",
        900: "28 25 23",
    },
    accent={
        50: "236 253 245",
        100: "209 250 229",
        200: "167 243 208",
        300: "110 231 183",
        400: "52 211 153",
        500: "16 185 129",
        600: "5 150 105",
        700: "4 120 87",
    },
)

MODERN = Palette(
    id="modern",
    name="Modern",
    description="Sleek Zinc & Violet. High contrast and tech-focused.",
    font="Roboto",
    neutral={
        50: "250 250 250",
        100: "244 244 245",
        200: "228 228 231",
        300: "212 212 216",
        400: "161 161 170",
        500: "113 113 122",
        600: "82 82 91",
        700: "63 63 70",
        800: "39 39 42",
        850: "32 32 35",
        900: "24 24 27",
    },
    accent={
        50: "245 243 255",
        100: "237 233 254",
        200: "221 214 254",
        300: "196 181 253",
        400: "167 139 250",
        500: "139 92 246",
        600: "124 58 237",
        700: "109 40 217",
    },
)

WARM = Palette(
    id="warm",
    name="Warm",
    description="Cozy Neutral & Amber. Inviting and friendly.",
    font="Quicksand",
    neutral={
        50: "250 250 250",
        100: "245 245 245",
        200: "229 229 229",
        300: "212 212 212",
        400: "163 163 163",
        500: "115 115 115",
        600: "82 82 82",
        700: "64 64 64",
        800: "38 38 38",
        850: "30 30 30",
        900: "23 23 23",
    },
    accent={
        50: "255 251 235",
        100: "254 243 199",
        200: "253 230 138",
        300: "252 211 77",
        400: "251 191 36",
        500: "245 158 11",
        600: "217 119 6",
        700: "180 83 9",
    },
)

PALETTES: dict[str, Palette] = {p.id: p for p in (CORPORATE, ELEGANT, MODERN, WARM)}

DEFAULT_PALETTE_ID = "corporate"
