"""Color presets, color resolution and gradient definitions."""

import math
from dataclasses import dataclass, replace

from shieldqr.config import ColorSet, DesignConfig, GradientKind, GradientSpec
from shieldqr.logging import get_logger
from shieldqr.svgfmt import attr, js_round, num

log = get_logger("colors")

DEFAULT_PRESET = "cyber"
GRADIENT_ID = "qrGradient"


@dataclass(frozen=True)
class ColorPreset:
    label: str
    description: str
    icon: str
    background: str
    foreground: str
    outline: str
    finder_outer: str
    finder_inner: str
    outline_width: float
    category: str  # "dark" | "light"

    def colors(self) -> ColorSet:
        return ColorSet(
            background=self.background,
            foreground=self.foreground,
            outline=self.outline,
            finder_outer=self.finder_outer,
            finder_inner=self.finder_inner,
            outline_width=self.outline_width,
        )


COLOR_PRESETS = {
    "cyber": ColorPreset("Cyber", "Neon cyan on navy", "💠",
                         "#0a0e27", "#00d4ff", "#00d4ff", "#00ff88", "#00d4ff", 3, "dark"),
    "stealth": ColorPreset("Stealth", "Grey on black, minimal", "🌑",
                           "#1a1a1a", "#c8c8c8", "#555555", "#ffffff", "#999999", 2, "dark"),
    "royal": ColorPreset("Royal", "Purple & gold, luxurious", "👑",
                         "#1a0a3e", "#c9a0ff", "#ffd700", "#ffd700", "#c9a0ff", 3, "dark"),
    "military": ColorPreset("Military", "Green on olive, tactical", "🎖️",
                            "#1a2e1a", "#4caf50", "#66bb6a", "#a5d6a7", "#4caf50", 2.5, "dark"),
    "fire": ColorPreset("Fire", "Red & orange, bold", "🔥",
                        "#1a0000", "#ff4444", "#ff6600", "#ffaa00", "#ff4444", 3, "dark"),
    "ocean": ColorPreset("Ocean", "Blue tones, professional", "🌊",
                         "#001a33", "#0088cc", "#00aaff", "#00ddff", "#0088cc", 2.5, "dark"),
    "monochrome": ColorPreset("Monochrome", "Classic black on white", "⬛",
                              "#ffffff", "#000000", "#222222", "#000000", "#000000", 2.5, "light"),
}

CYBER_COLORS = COLOR_PRESETS[DEFAULT_PRESET].colors()


def get_color_presets() -> list[str]:
    return list(COLOR_PRESETS)


def get_preset_colors(name: str) -> ColorPreset | None:
    return COLOR_PRESETS.get(name)


def resolve_colors(config: DesignConfig) -> ColorSet:
    """Custom colors win outright; otherwise the named preset (default cyber).

    Custom color strings come back attribute-escaped.
    """
    if config.custom_colors is not None:
        return _escaped(config.custom_colors)
    name = config.preset or DEFAULT_PRESET
    preset = COLOR_PRESETS.get(name)
    if preset is None:
        log.debug("unknown preset %r, using %s", name, DEFAULT_PRESET)
        return CYBER_COLORS
    return preset.colors()


def _escaped(colors: ColorSet) -> ColorSet:
    return replace(
        colors,
        background=attr(colors.background),
        foreground=attr(colors.foreground),
        outline=attr(colors.outline),
        finder_outer=attr(colors.finder_outer) if colors.finder_outer else None,
        finder_inner=attr(colors.finder_inner) if colors.finder_inner else None,
    )


def foreground_paint(colors: ColorSet, gradient: GradientSpec | None) -> str:
    return f"url(#{GRADIENT_ID})" if gradient is not None else colors.foreground


# ---------------------------------------------------------------------------
# Gradients
# ---------------------------------------------------------------------------

def gradient_stops(spec: GradientSpec) -> list[str]:
    """Stop offsets as percentage strings; even spacing when none are given."""
    if spec.stops is not None:
        return [f"{num(s)}%" for s in spec.stops]
    n = len(spec.colors)
    if n == 1:
        return ["0%"]
    return [f"{js_round(i / (n - 1) * 100)}%" for i in range(n)]


def linear_endpoints(angle: float) -> tuple[int, int, int, int]:
    """(x1, y1, x2, y2) in percent for a CSS-style angle in degrees."""
    rad = (angle - 90) * math.pi / 180
    x1 = js_round(50 + math.sin(rad + math.pi) * 50)
    y1 = js_round(50 + math.cos(rad + math.pi) * 50)
    x2 = js_round(50 + math.sin(rad) * 50)
    y2 = js_round(50 + math.cos(rad) * 50)
    return x1, y1, x2, y2


def build_gradient_def(spec: GradientSpec, indent: str = "") -> str:
    stops = "\n".join(
        f'{indent}  <stop offset="{offset}" stop-color="{attr(color)}"/>'
        for offset, color in zip(gradient_stops(spec), spec.colors)
    )

    if spec.kind is GradientKind.RADIAL:
        return "\n".join([
            f'{indent}<radialGradient id="{GRADIENT_ID}" cx="50%" cy="50%" r="60%">',
            stops,
            f"{indent}</radialGradient>",
        ])

    x1, y1, x2, y2 = linear_endpoints(spec.angle)
    return "\n".join([
        f'{indent}<linearGradient id="{GRADIENT_ID}" x1="{x1}%" y1="{y1}%" x2="{x2}%" y2="{y2}%">',
        stops,
        f"{indent}</linearGradient>",
    ])


# ---------------------------------------------------------------------------
# WCAG contrast
# ---------------------------------------------------------------------------

def parse_hex_color(s: str) -> tuple[int, int, int] | None:
    """``#rgb`` / ``#rrggbb`` to an RGB tuple, None for anything else."""
    s = s.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6:
        return None
    try:
        return tuple(int(s[i: i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def _linearize(channel: int) -> float:
    """sRGB channel (0-255) to linear light."""
    c = channel / 255.0
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def _luminance(rgb: tuple[int, int, int]) -> float:
    r, g, b = [_linearize(ch) for ch in rgb]
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: str, bg: str) -> float | None:
    """WCAG contrast ratio (1.0 - 21.0), or None if either color is not hex."""
    a, b = parse_hex_color(fg), parse_hex_color(bg)
    if a is None or b is None:
        return None
    l1, l2 = _luminance(a), _luminance(b)
    if l1 < l2:
        l1, l2 = l2, l1
    return (l1 + 0.05) / (l2 + 0.05)
