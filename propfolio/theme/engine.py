"""Theme token derivation and publication."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping

from propfolio.exceptions import PersistenceError, UnknownPaletteError
from propfolio.persistence.base import LocalStorage
from propfolio.theme.palettes import (
    ACCENT_STEPS,
    DEFAULT_PALETTE_ID,
    NEUTRAL_STEPS,
    PALETTES,
    Palette,
)

logger = logging.getLogger(__name__)

PALETTE_KEY = "propfolio_theme"
DARK_MODE_KEY = "propfolio_dark_mode"

BACKGROUND_SLOT = "base-950"
DARK_CLASS = "dark"
FONT_PROPERTY = "--font-main"

PURE_WHITE = "255 255 255"

# Dark mode keeps a muted, light-on-structured-dark look: surfaces come
# from the light end of the neutral scale, text from the dark end.
DARK_NEUTRAL_REMAP: dict[str, int | str] = {
    "base-950": 200,  # app background
    "base-900": 100,  # secondary surfaces, sidebar
    "base-850": 50,  # card base
    "base-800": PURE_WHITE,  # elevated card surface
    "base-700": 300,  # borders, dividers
    "base-50": 900,  # primary text
    "base-100": 700,  # secondary text
    "base-200": 600,  # muted text
    "base-300": 500,
}

# Palette accents are tuned for light backgrounds; dark mode uses one
# fixed triplet whatever the palette.
DARK_ACCENT_OVERRIDE: dict[str, str] = {
    "primary-400": "59 130 246",
    "primary-500": "37 99 235",
    "primary-600": "29 78 216",
}


@dataclass(frozen=True)
class PaletteTokens(Mapping[str, str]):
    """Semantic slot name -> ``"R G B"`` value for one palette and mode."""

    palette_id: str
    dark_mode: bool
    slots: Mapping[str, str]
    font: str

    def __getitem__(self, slot: str) -> str:
        return self.slots[slot]

    def __iter__(self) -> Iterator[str]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def css_variables(self) -> dict[str, str]:
        """CSS custom properties published for these tokens."""
        variables = {f"--color-{slot}": value for slot, value in self.slots.items()}
        variables[FONT_PROPERTY] = self.font
        return variables


def semantic_slots() -> list[str]:
    """Every slot name a derivation produces."""
    return (
        [f"base-{step}" for step in NEUTRAL_STEPS]
        + [BACKGROUND_SLOT]
        + [f"primary-{step}" for step in ACCENT_STEPS]
    )


def derive_tokens(palette: Palette, dark_mode: bool) -> PaletteTokens:
    """Compute the full token set for ``palette`` in the given mode."""
    values: dict[str, str] = {f"base-{step}": palette.neutral[step] for step in NEUTRAL_STEPS}
    values[BACKGROUND_SLOT] = palette.neutral[900]
    values.update({f"primary-{step}": palette.accent[step] for step in ACCENT_STEPS})

    if dark_mode:
        for slot, source in DARK_NEUTRAL_REMAP.items():
            values[slot] = source if isinstance(source, str) else palette.neutral[source]
        values.update(DARK_ACCENT_OVERRIDE)

    return PaletteTokens(
        palette_id=palette.id,
        dark_mode=dark_mode,
        slots=values,
        font=palette.font,
    )


StyleObserver = Callable[[Mapping[str, str], frozenset[str]], None]


class StyleSubstrate:
    """Shared, observable store of style properties and root classes.

    Plays the part of the document root: every visual consumer reads from
    it or subscribes to it instead of receiving colors explicitly.
    """

    def __init__(self) -> None:
        self._properties: dict[str, str] = {}
        self._classes: set[str] = set()
        self._observers: list[StyleObserver] = []
        self._lock = threading.Lock()

    def publish(self, properties: Mapping[str, str], classes: Mapping[str, bool]) -> None:
        """Set properties and toggle classes, then notify observers once."""
        with self._lock:
            self._properties.update(properties)
            for name, enabled in classes.items():
                if enabled:
                    self._classes.add(name)
                else:
                    self._classes.discard(name)
            snapshot = dict(self._properties)
            active = frozenset(self._classes)
            observers = list(self._observers)
        for observer in observers:
            observer(snapshot, active)

    def get_property(self, name: str) -> str | None:
        with self._lock:
            return self._properties.get(name)

    def has_class(self, name: str) -> bool:
        with self._lock:
            return name in self._classes

    @property
    def properties(self) -> dict[str, str]:
        with self._lock:
            return dict(self._properties)

    def subscribe(self, observer: StyleObserver) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe


class ThemeEngine:
    """Owns the palette/mode selection and keeps the substrate in sync.

    Parameters
    ----------
    storage : LocalStorage
        Durable storage for the palette id and dark-mode flag.
    substrate : StyleSubstrate
        Where derived tokens are published.
    catalog : Mapping[str, Palette] | None
        Available palettes (default: the built-in four).
    default_palette : str
        Palette used when nothing valid is persisted.
    default_dark_mode : bool
        Mode used when nothing valid is persisted.
    """

    def __init__(
        self,
        storage: LocalStorage,
        substrate: StyleSubstrate,
        catalog: Mapping[str, Palette] | None = None,
        default_palette: str = DEFAULT_PALETTE_ID,
        default_dark_mode: bool = False,
    ) -> None:
        self._storage = storage
        self._substrate = substrate
        self._catalog = dict(catalog or PALETTES)
        if default_palette not in self._catalog:
            raise UnknownPaletteError(f"Default palette {default_palette!r} is not in the catalog")
        self._default_palette = default_palette
        self._default_dark_mode = default_dark_mode

        self._palette_id = default_palette
        self._dark_mode = default_dark_mode
        self._tokens: PaletteTokens | None = None
        self._started = False

    def start(self) -> PaletteTokens:
        """Read the persisted selection once and publish the first token set."""
        if self._started:
            return self.tokens
        self._palette_id = self._read_palette()
        self._dark_mode = self._read_dark_mode()
        self._started = True
        logger.debug("Theme started with %s (dark=%s)", self._palette_id, self._dark_mode)
        return self._recompute()

    @property
    def palette_id(self) -> str:
        return self._palette_id

    @property
    def palette(self) -> Palette:
        return self._catalog[self._palette_id]

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    @property
    def tokens(self) -> PaletteTokens:
        if self._tokens is None:
            self._tokens = derive_tokens(self.palette, self._dark_mode)
        return self._tokens

    def available_palettes(self) -> list[Palette]:
        return list(self._catalog.values())

    def set_palette(self, palette_id: str) -> PaletteTokens:
        """Switch palette; a no-op when it is already selected."""
        if palette_id not in self._catalog:
            raise UnknownPaletteError(f"Unknown palette {palette_id!r}")
        if palette_id == self._palette_id and self._started:
            return self.tokens
        self._palette_id = palette_id
        self._write(PALETTE_KEY, palette_id)
        return self._recompute()

    def set_dark_mode(self, enabled: bool) -> PaletteTokens:
        """Switch appearance mode; a no-op when unchanged."""
        if enabled == self._dark_mode and self._started:
            return self.tokens
        self._dark_mode = enabled
        self._write(DARK_MODE_KEY, "true" if enabled else "false")
        return self._recompute()

    def toggle_dark_mode(self) -> PaletteTokens:
        return self.set_dark_mode(not self._dark_mode)

    def _recompute(self) -> PaletteTokens:
        self._tokens = derive_tokens(self.palette, self._dark_mode)
        self._substrate.publish(self._tokens.css_variables(), {DARK_CLASS: self._dark_mode})
        return self._tokens

    def _read_palette(self) -> str:
        try:
            stored = self._storage.get(PALETTE_KEY)
        except PersistenceError:
            return self._default_palette
        return stored if stored in self._catalog else self._default_palette

    def _read_dark_mode(self) -> bool:
        try:
            stored = self._storage.get(DARK_MODE_KEY)
        except PersistenceError:
            return self._default_dark_mode
        if stored == "true":
            return True
        if stored == "false":
            return False
        return self._default_dark_mode

    def _write(self, key: str, value: str) -> None:
        try:
            self._storage.set(key, value)
        except PersistenceError as e:
            logger.warning("Could not persist %s: %s", key, e)
