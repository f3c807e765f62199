"""Design configuration: typed options with per-field defaults.

Options arrive as a flat mapping (camelCase keys as saved by the playground, or
snake_case). Each known key is coerced onto its field; unknown keys are ignored.
Styling values that are not recognised fall back to a default instead of
failing, while structurally broken values raise ``ConfigError``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum

from shieldqr.logging import get_logger

log = get_logger("config")

TRANSPARENT_VALUES = ("transparent", "none")


class ConfigError(ValueError):
    """A required configuration field is missing or malformed."""


# ---------------------------------------------------------------------------
# Style enums
# ---------------------------------------------------------------------------

class ParseMixin:
    @classmethod
    def parse(cls, value, fallback):
        """Map ``value`` onto a member, or return ``fallback`` if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            log.debug("unknown %s %r, using %s", cls.__name__, value, fallback.value)
            return fallback


class ModuleStyle(ParseMixin, str, Enum):
    CIRCLE = "circle"
    ROUNDED_SQUARE = "roundedSquare"
    DIAMOND = "diamond"
    DOT = "dot"
    SQUARE = "square"
    BAR_H = "barH"
    BAR_V = "barV"
    POND = "pond"

    @classmethod
    def _missing_(cls, value):
        if value == "rounded":
            return cls.ROUNDED_SQUARE
        return None

    @property
    def is_bar(self) -> bool:
        return self in (ModuleStyle.BAR_H, ModuleStyle.BAR_V)


class FinderStyle(ParseMixin, str, Enum):
    ROUNDED = "rounded"
    SQUARE = "square"
    CIRCLE = "circle"
    DIAMOND = "diamond"

    @property
    def module_style(self) -> ModuleStyle:
        """Primitive used for this style in per-module finder rendering."""
        return _FINDER_PRIMITIVES[self]


_FINDER_PRIMITIVES = {
    FinderStyle.ROUNDED: ModuleStyle.ROUNDED_SQUARE,
    FinderStyle.SQUARE: ModuleStyle.SQUARE,
    FinderStyle.CIRCLE: ModuleStyle.CIRCLE,
    FinderStyle.DIAMOND: ModuleStyle.DIAMOND,
}


class FinderMode(ParseMixin, str, Enum):
    PATTERN = "pattern"
    SOLID = "solid"


class GradientKind(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"


MODULE_STYLES = {
    ModuleStyle.CIRCLE: {"label": "Circle", "icon": "●", "description": "Circular dots"},
    ModuleStyle.ROUNDED_SQUARE: {"label": "Rounded", "icon": "▢", "description": "Rounded squares"},
    ModuleStyle.DIAMOND: {"label": "Diamond", "icon": "◆", "description": "Diamond shapes"},
    ModuleStyle.SQUARE: {"label": "Square", "icon": "■", "description": "Sharp squares"},
    ModuleStyle.BAR_H: {"label": "H-Bars", "icon": "≡", "description": "Horizontal flowing bars"},
    ModuleStyle.BAR_V: {"label": "V-Bars", "icon": "⫿", "description": "Vertical flowing bars"},
    ModuleStyle.POND: {"label": "Pond", "icon": "⬬", "description": "Connected organic blobs"},
}

FINDER_PATTERNS = {
    FinderMode.PATTERN: {"label": "Pattern", "description": "Individual modules"},
    FinderMode.SOLID: {"label": "Solid", "description": "Solid concentric shapes"},
}

FINDER_STYLES = {
    FinderStyle.ROUNDED: {"label": "Rounded", "icon": "▢", "description": "Rounded square"},
    FinderStyle.SQUARE: {"label": "Square", "icon": "■", "description": "Sharp square"},
    FinderStyle.CIRCLE: {"label": "Circle", "icon": "●", "description": "Circle"},
    FinderStyle.DIAMOND: {"label": "Diamond", "icon": "◆", "description": "Diamond"},
}

ECC_LEVELS = ("L", "M", "Q", "H")


# ---------------------------------------------------------------------------
# Colors & gradients
# ---------------------------------------------------------------------------

def is_transparent(color: str | None) -> bool:
    return isinstance(color, str) and color.strip().lower() in TRANSPARENT_VALUES


@dataclass(frozen=True)
class ColorSet:
    """Concrete paint values for one render."""

    background: str
    foreground: str
    outline: str
    finder_outer: str | None = None
    finder_inner: str | None = None
    outline_width: float = 3

    @property
    def transparent(self) -> bool:
        return is_transparent(self.background)

    @property
    def outer(self) -> str:
        return self.finder_outer or self.foreground

    @property
    def inner(self) -> str:
        return self.finder_inner or self.foreground

    @classmethod
    def from_mapping(cls, value: Mapping, base: "ColorSet") -> "ColorSet":
        """Overlay a (possibly partial) color mapping on ``base``."""
        keys = {
            "background": "background",
            "foreground": "foreground",
            "outline": "outline",
            "finderOuter": "finder_outer",
            "finder_outer": "finder_outer",
            "finderInner": "finder_inner",
            "finder_inner": "finder_inner",
            "outlineWidth": "outline_width",
            "outline_width": "outline_width",
        }
        updates = {}
        for key, raw in value.items():
            name = keys.get(key)
            if name is None or raw is None:
                continue
            updates[name] = as_number(key, raw) if name == "outline_width" else str(raw)
        # unset finder accents follow the foreground, not the base
        updates.setdefault("finder_outer", None)
        updates.setdefault("finder_inner", None)
        return replace(base, **updates)

    def to_dict(self) -> dict:
        return {
            "background": self.background,
            "foreground": self.foreground,
            "outline": self.outline,
            "finderOuter": self.outer,
            "finderInner": self.inner,
            "outlineWidth": self.outline_width,
        }


@dataclass(frozen=True)
class GradientSpec:
    """Foreground gradient. ``stops`` are percentages, one per color."""

    kind: GradientKind
    colors: tuple[str, ...]
    angle: float = 135
    stops: tuple[float, ...] | None = None

    def __post_init__(self):
        if not self.colors:
            raise ConfigError("gradient requires at least one color")
        if self.stops is not None and len(self.stops) != len(self.colors):
            raise ConfigError(
                f"gradient has {len(self.colors)} colors but {len(self.stops)} stops"
            )

    @classmethod
    def from_value(cls, value) -> "GradientSpec | None":
        """Build from a spec, a mapping, or a preset name (``"aurora"``)."""
        if value is None or isinstance(value, GradientSpec):
            return value
        if isinstance(value, str):
            preset = GRADIENT_PRESETS.get(value)
            if value not in GRADIENT_PRESETS:
                log.debug("unknown gradient preset %r, rendering without gradient", value)
            return preset
        if not isinstance(value, Mapping):
            raise ConfigError(f"gradient must be a mapping or preset name, got {type(value).__name__}")

        kind_raw = value.get("type", value.get("kind", "linear"))
        try:
            kind = GradientKind(kind_raw)
        except ValueError:
            raise ConfigError(f"unknown gradient type {kind_raw!r}") from None

        colors = value.get("colors") or ()
        stops = value.get("stops")
        angle = value.get("angle")
        return cls(
            kind=kind,
            colors=tuple(str(c) for c in colors),
            angle=135 if angle is None else as_number("angle", angle),
            stops=None if stops is None else tuple(as_number("stops", s) for s in stops),
        )

    def to_dict(self) -> dict:
        out = {"type": self.kind.value, "colors": list(self.colors)}
        if self.kind is GradientKind.LINEAR:
            out["angle"] = self.angle
        if self.stops is not None:
            out["stops"] = list(self.stops)
        return out


GRADIENT_PRESETS: dict[str, GradientSpec | None] = {
    "none": None,
    "neonPulse": GradientSpec(GradientKind.LINEAR, ("#00d4ff", "#7b2ff7"), 135, (0, 100)),
    "sunset": GradientSpec(GradientKind.LINEAR, ("#ff6b6b", "#ffd93d"), 180, (0, 100)),
    "aurora": GradientSpec(GradientKind.LINEAR, ("#00ff88", "#00d4ff", "#7b2ff7"), 135, (0, 50, 100)),
    "golden": GradientSpec(GradientKind.RADIAL, ("#ffd700", "#ff8c00"), stops=(0, 100)),
    "ice": GradientSpec(GradientKind.LINEAR, ("#e0f7ff", "#00aaff"), 180, (0, 100)),
}


# ---------------------------------------------------------------------------
# DesignConfig
# ---------------------------------------------------------------------------

def as_number(key: str, value) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"option {key!r} must be a number, got a boolean")
    if isinstance(value, int):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"option {key!r} must be a number, got {value!r}") from None


@dataclass(frozen=True)
class DesignConfig:
    """Every styling option for one shaped QR render."""

    # shape & layout
    shape_category: str | None = "shield"
    shape_variation: str | None = "classic"
    # legacy single-key selector; only consulted when shape_category is unset or
    # unknown, so direct construction needs shape_category=None for it to apply
    # (from_options clears the default category itself)
    shape: str | None = None
    module_style: ModuleStyle = ModuleStyle.CIRCLE
    module_scale: float = 0.82
    finder_scale: float = 1.0
    finder_pattern: FinderMode = FinderMode.PATTERN
    finder_outer_style: FinderStyle = FinderStyle.ROUNDED
    finder_inner_style: FinderStyle = FinderStyle.ROUNDED

    error_correction: str = "H"

    # colors
    preset: str | None = "cyber"
    custom_colors: ColorSet | None = None
    gradient: GradientSpec | None = None

    # effects
    glow_effect: bool = False
    glow_color: str | None = None
    glow_intensity: float = 8
    inner_border: bool = False
    inner_border_width: float = 1
    inner_border_color: str | None = None
    inner_border_offset: float = 8

    center_clear: bool = False
    center_size: float = 0.22

    # decorative fill
    decorative_fill: bool = True
    decorative_density: float = 0.35
    decorative_opacity: float = 0.25
    decorative_safe_margin: float = 6
    decorative_shield_inset: float = 8
    decorative_scale: float = 0.65

    @classmethod
    def default_design(cls) -> "DesignConfig":
        """Defaults used by the interactive designer (glow on)."""
        return cls(glow_effect=True)

    @classmethod
    def from_options(cls, options: Mapping | None = None, base: "DesignConfig | None" = None) -> "DesignConfig":
        """Build a config from a flat option mapping.

        ``None`` values keep the default. Keys may be camelCase or snake_case.
        """
        base = base or cls()
        if options is None:
            return base
        if isinstance(options, DesignConfig):
            return options

        updates = {}
        for key, raw in options.items():
            name = _OPTION_ALIASES.get(key)
            if name is None:
                log.debug("ignoring unknown option %r", key)
                continue
            if raw is None:
                continue
            updates[name] = _coerce(name, key, raw, base)

        # a legacy ``shape`` only competes with a category the caller named
        if "shape" in updates and "shape_category" not in updates:
            updates["shape_category"] = None
            updates.setdefault("shape_variation", None)
        return replace(base, **updates)


_FIELD_NAMES = {f.name for f in fields(DesignConfig)}


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


_OPTION_ALIASES = {name: name for name in _FIELD_NAMES}
_OPTION_ALIASES.update({camel_case(name): name for name in _FIELD_NAMES})
_OPTION_ALIASES["colors"] = "custom_colors"

_BOOL_FIELDS = {"glow_effect", "inner_border", "center_clear", "decorative_fill"}
_STR_FIELDS = {
    "shape_category", "shape_variation", "shape", "preset",
    "glow_color", "inner_border_color",
}
_ENUM_FIELDS = {
    "module_style": (ModuleStyle, ModuleStyle.SQUARE),
    "finder_pattern": (FinderMode, FinderMode.PATTERN),
    "finder_outer_style": (FinderStyle, FinderStyle.SQUARE),
    "finder_inner_style": (FinderStyle, FinderStyle.SQUARE),
}


def _coerce(name: str, key: str, raw, base: DesignConfig):
    if name in _ENUM_FIELDS:
        enum_cls, fallback = _ENUM_FIELDS[name]
        return enum_cls.parse(raw, fallback)
    if name in _BOOL_FIELDS:
        return bool(raw)
    if name in _STR_FIELDS:
        return str(raw)
    if name == "error_correction":
        level = str(raw).upper()
        if level not in ECC_LEVELS:
            raise ConfigError(f"error correction must be one of {'/'.join(ECC_LEVELS)}, got {raw!r}")
        return level
    if name == "custom_colors":
        if isinstance(raw, ColorSet):
            return raw
        if not isinstance(raw, Mapping):
            raise ConfigError(f"option {key!r} must be a mapping of colors")
        from shieldqr.colors import CYBER_COLORS

        return ColorSet.from_mapping(raw, base.custom_colors or CYBER_COLORS)
    if name == "gradient":
        return GradientSpec.from_value(raw)
    return as_number(key, raw)


def serialize_design(config: DesignConfig) -> dict:
    """Flat camelCase dict suitable for saving and sharing a design."""
    out = {
        "shapeCategory": config.shape_category or "shield",
        "shapeVariation": config.shape_variation or "classic",
        "moduleStyle": config.module_style.value,
        "moduleScale": config.module_scale,
        "finderScale": config.finder_scale,
        "finderPattern": config.finder_pattern.value,
        "finderOuterStyle": config.finder_outer_style.value,
        "finderInnerStyle": config.finder_inner_style.value,
        "glowEffect": config.glow_effect,
        "innerBorder": config.inner_border,
        "centerClear": config.center_clear,
        "centerSize": config.center_size,
        "decorativeFill": config.decorative_fill,
        "decorativeDensity": config.decorative_density or 0.35,
        "decorativeOpacity": config.decorative_opacity,
        "decorativeSafeMargin": config.decorative_safe_margin,
        "decorativeShieldInset": config.decorative_shield_inset,
        "decorativeScale": config.decorative_scale,
    }
    if config.custom_colors is not None:
        out["colors"] = config.custom_colors.to_dict()
    elif config.preset:
        out["preset"] = config.preset
    if config.gradient is not None:
        out["gradient"] = config.gradient.to_dict()
    return out
