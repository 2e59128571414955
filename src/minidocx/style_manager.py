"""Document style presets.

Manages style presets (default, academic, business, minimal) that fix the
fonts, ambient font size and heading sizes written into ``styles.xml`` and
``fontTable.xml``, and used by the Markdown front end when it builds runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FontSpec:
    """A font declaration as it appears in ``word/fontTable.xml``."""

    name: str = "Times New Roman"
    charset: str = "00"
    family: str = "roman"      # roman, swiss, modern, script, decorative, auto
    pitch: str = "variable"    # variable, fixed, default


@dataclass(frozen=True)
class StylePreset:
    """Complete preset: fonts, sizes (points) and body spacing."""

    name: str
    body_font: FontSpec
    heading_font: FontSpec
    ambient_size: int = 12
    heading_sizes: dict[int, int] = field(default_factory=dict)
    # Twentieths of a point / 240ths of a line, as OOXML expects them.
    body_space_after: int = 140
    body_line_spacing: int = 276


# Fonts every preset declares regardless of its own choices.
BASELINE_FONTS = (
    FontSpec("Times New Roman", "00", "roman", "variable"),
    FontSpec("Symbol", "02", "roman", "variable"),
    FontSpec("Arial", "00", "swiss", "variable"),
)


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _build_default() -> StylePreset:
    """Build the **default** preset styles."""
    return StylePreset(
        name="default",
        body_font=FontSpec("Liberation Serif", "00", "roman", "variable"),
        heading_font=FontSpec("Liberation Sans", "00", "swiss", "variable"),
        ambient_size=12,
        # H1=24, H2=20, H3=16, H4=14, H5=13, H6=12
        heading_sizes={1: 24, 2: 20, 3: 16, 4: 14, 5: 13, 6: 12},
    )


def _build_academic() -> StylePreset:
    """Build the **academic** preset -- serif, wider spacing."""
    return StylePreset(
        name="academic",
        body_font=FontSpec("Times New Roman", "00", "roman", "variable"),
        heading_font=FontSpec("Times New Roman", "00", "roman", "variable"),
        ambient_size=12,
        heading_sizes={1: 26, 2: 22, 3: 18, 4: 15, 5: 13, 6: 12},
        body_space_after=200,
        body_line_spacing=480,
    )


def _build_business() -> StylePreset:
    """Build the **business** preset -- sans-serif, compact."""
    return StylePreset(
        name="business",
        body_font=FontSpec("Arial", "00", "swiss", "variable"),
        heading_font=FontSpec("Arial", "00", "swiss", "variable"),
        ambient_size=11,
        heading_sizes={1: 20, 2: 16, 3: 14, 4: 12, 5: 11, 6: 11},
        body_space_after=80,
        body_line_spacing=259,
    )


def _build_minimal() -> StylePreset:
    """Build the **minimal** preset -- clean, tight spacing."""
    return StylePreset(
        name="minimal",
        body_font=FontSpec("Helvetica Neue", "00", "swiss", "variable"),
        heading_font=FontSpec("Helvetica Neue", "00", "swiss", "variable"),
        ambient_size=10,
        heading_sizes={1: 18, 2: 15, 3: 13, 4: 11, 5: 10, 6: 10},
        body_space_after=60,
        body_line_spacing=240,
    )


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

_PRESET_BUILDERS = {
    "default": _build_default,
    "academic": _build_academic,
    "business": _build_business,
    "minimal": _build_minimal,
}


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Manages document style presets.

    Usage::

        sm = StyleManager("academic")
        sm.ambient_font_size      # 12
        sm.heading_size(1)        # 26
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default") -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self.style: StylePreset = _PRESET_BUILDERS[preset]()

    # -- public API ---------------------------------------------------------

    @property
    def ambient_font_size(self) -> int:
        return self.style.ambient_size

    def heading_size(self, level: int) -> int:
        """Return the point size for heading level *1--6*."""
        level = max(1, min(6, level))
        return self.style.heading_sizes.get(level, self.style.ambient_size)

    def fonts(self) -> list[FontSpec]:
        return preset_fonts(self.style)


def preset_fonts(style: StylePreset) -> list[FontSpec]:
    """Return every font *style* needs, baseline first, no duplicates."""
    seen: set[str] = set()
    result: list[FontSpec] = []
    for font in (*BASELINE_FONTS, style.body_font, style.heading_font):
        if font.name in seen:
            continue
        seen.add(font.name)
        result.append(font)
    return result
