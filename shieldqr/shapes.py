"""Shape library: outline silhouettes the QR code is framed in.

Shapes are grouped by category (shield, heart, circle, ...), each with a few
variations. A variation is an SVG outline path on its own canvas plus the
square ``qr_area`` the code is drawn into.

There is no global library. ``create_registry()`` hands out a registry loaded
with the built-in shapes; callers keep it and pass it to every resolution call.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from shieldqr.config import ConfigError, DesignConfig
from shieldqr.logging import audit, get_logger
from shieldqr.svgfmt import num

log = get_logger("shapes")

DEFAULT_CATEGORY = "shield"
DEFAULT_VARIATION = "classic"


@dataclass(frozen=True)
class QRArea:
    x: float
    y: float
    size: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.size / 2, self.y + self.size / 2


@dataclass(frozen=True)
class ShapeVariation:
    label: str
    description: str
    width: float
    height: float
    path: str
    qr_area: QRArea
    bare: bool = False

    def __post_init__(self):
        a = self.qr_area
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"shape {self.label!r} has an empty canvas")
        if a.size <= 0 or a.x < 0 or a.y < 0 or a.x + a.size > self.width or a.y + a.size > self.height:
            raise ConfigError(
                f"shape {self.label!r}: qrArea ({a.x}, {a.y}, {a.size}) "
                f"exceeds canvas {self.width}x{self.height}"
            )

    @property
    def view_box(self) -> str:
        return f"0 0 {num(self.width)} {num(self.height)}"

    @classmethod
    def from_dict(cls, key: str, d: Mapping) -> "ShapeVariation":
        try:
            area = d["qrArea"] if "qrArea" in d else d["qr_area"]
            if not isinstance(area, QRArea):
                area = QRArea(float(area["x"]), float(area["y"]), float(area["size"]))
            path = d["path"]
            if not isinstance(path, str):
                path = " ".join(path)
            return cls(
                label=d.get("label", key),
                description=d.get("description", ""),
                width=float(d["width"]),
                height=float(d["height"]),
                path=path,
                qr_area=area,
                bare=bool(d.get("bare", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"invalid shape variation {key!r}: {e}") from e


@dataclass(frozen=True)
class ShapeCategory:
    label: str
    icon: str
    description: str
    variations: dict[str, ShapeVariation] = field(default_factory=dict)

    @property
    def first_key(self) -> str | None:
        return next(iter(self.variations), None)

    @classmethod
    def from_dict(cls, key: str, d: Mapping) -> "ShapeCategory":
        variations = {
            vkey: v if isinstance(v, ShapeVariation) else ShapeVariation.from_dict(vkey, v)
            for vkey, v in (d.get("variations") or {}).items()
        }
        return cls(
            label=d.get("label", key),
            icon=d.get("icon", ""),
            description=d.get("description", ""),
            variations=variations,
        )


@dataclass(frozen=True)
class ResolvedShape:
    category: str
    variation: str
    shape: ShapeVariation


class ShapeRegistry:
    """Category-key -> ShapeCategory table. Additive-only mutation via ``register``.

    Not synchronised: register shapes at startup, or guard concurrent
    registration yourself.
    """

    def __init__(self, categories: Mapping[str, ShapeCategory] | None = None):
        self._categories: dict[str, ShapeCategory] = dict(categories or {})

    def __contains__(self, key: str) -> bool:
        return key in self._categories

    def __getitem__(self, key: str) -> ShapeCategory:
        return self._categories[key]

    def categories(self) -> list[str]:
        return list(self._categories)

    def variations(self, category: str) -> list[str]:
        cat = self._categories.get(category)
        return list(cat.variations) if cat else []

    def get(self, category: str, variation: str) -> ShapeVariation | None:
        cat = self._categories.get(category)
        return cat.variations.get(variation) if cat else None

    def shield_variation(self, name: str) -> ShapeVariation | None:
        return self.get(DEFAULT_CATEGORY, name)

    def shield_shapes(self) -> list[str]:
        return self.variations(DEFAULT_CATEGORY)

    def register(self, key: str, definition: ShapeCategory | Mapping, merge: bool = True) -> ShapeCategory:
        """Add a category, or extend an existing one.

        With ``merge`` the incoming variations are laid over the existing ones
        (same keys are replaced); otherwise the category is replaced wholesale.
        """
        incoming = definition if isinstance(definition, ShapeCategory) else ShapeCategory.from_dict(key, definition)
        existing = self._categories.get(key)

        if merge and existing is not None:
            overrides = {}
            if isinstance(definition, Mapping):
                overrides = {k: definition[k] for k in ("label", "icon", "description") if k in definition}
            else:
                overrides = {"label": incoming.label, "icon": incoming.icon, "description": incoming.description}
            merged = ShapeCategory(
                label=overrides.get("label", existing.label),
                icon=overrides.get("icon", existing.icon),
                description=overrides.get("description", existing.description),
                variations={**existing.variations, **incoming.variations},
            )
        else:
            merged = incoming

        self._categories[key] = merged
        audit("shape.registered", logger=log, category=key, merge=merge,
              variations=len(merged.variations))
        return merged

    def resolve(self, config: DesignConfig | Mapping | None) -> ResolvedShape:
        return resolve_shape(config, self)


def resolve_shape(config: DesignConfig | Mapping | None, registry: ShapeRegistry) -> ResolvedShape:
    """Pick the concrete variation a design asks for.

    A known ``shape_category`` wins; otherwise the legacy ``shape`` key may
    name a shield variation or a category; anything else is shield/classic.
    """
    if config is None:
        config = DesignConfig(shape_category=None, shape_variation=None)
    elif not isinstance(config, DesignConfig):
        config = DesignConfig.from_options(
            config, base=DesignConfig(shape_category=None, shape_variation=None)
        )

    category = config.shape_category
    if category and category in registry:
        cat = registry[category]
        var_key = config.shape_variation or cat.first_key
        shape = cat.variations.get(var_key)
        if shape is None:
            log.debug("unknown variation %r in %r, using first", var_key, category)
            var_key = cat.first_key
            shape = cat.variations.get(var_key) if var_key else None
        if shape is not None:
            return ResolvedShape(category, var_key, shape)
    elif category:
        log.debug("unknown shape category %r", category)

    legacy = config.shape
    if legacy:
        shield = registry.shield_variation(legacy)
        if shield is not None:
            return ResolvedShape(DEFAULT_CATEGORY, legacy, shield)
        if legacy in registry and registry[legacy].variations:
            cat = registry[legacy]
            return ResolvedShape(legacy, cat.first_key, cat.variations[cat.first_key])

    return ResolvedShape(DEFAULT_CATEGORY, DEFAULT_VARIATION, _default_shape(registry))


def resolve_shield(registry: ShapeRegistry, name: str | None) -> tuple[str, ShapeVariation]:
    """A shield variation by name, falling back to classic."""
    if name:
        shape = registry.shield_variation(name)
        if shape is not None:
            return name, shape
        log.debug("unknown shield variation %r, using %s", name, DEFAULT_VARIATION)
    return DEFAULT_VARIATION, _default_shape(registry)


def _default_shape(registry: ShapeRegistry) -> ShapeVariation:
    shape = registry.shield_variation(DEFAULT_VARIATION)
    if shape is None:
        # registry replaced the shield category; the built-in stays the floor
        shape = ShapeVariation.from_dict(DEFAULT_VARIATION, BUILTIN_SHAPES[DEFAULT_CATEGORY]["variations"][DEFAULT_VARIATION])
    return shape


def create_registry() -> ShapeRegistry:
    """Fresh registry loaded with the built-in shape library."""
    return ShapeRegistry({key: ShapeCategory.from_dict(key, d) for key, d in BUILTIN_SHAPES.items()})


# ---------------------------------------------------------------------------
# Built-in library
# ---------------------------------------------------------------------------

BUILTIN_SHAPES = {
    "none": {
        "label": "None",
        "icon": "⊞",
        "description": "Plain QR code with no shape or border",
        "variations": {
            "default": {
                "label": "Default",
                "description": "Raw QR code, no framing",
                "width": 300, "height": 300,
                "path": "M 0 0 H 300 V 300 H 0 Z",
                "qrArea": {"x": 8, "y": 8, "size": 284},
                "bare": True,
            },
        },
    },
    "square": {
        "label": "Square",
        "icon": "⬜",
        "description": "Square shapes with corner variations",
        "variations": {
            "sharp": {
                "label": "Sharp",
                "description": "Clean sharp edges",
                "width": 300, "height": 300,
                "path": "M 8 8 H 292 V 292 H 8 Z",
                "qrArea": {"x": 18, "y": 18, "size": 264},
            },
            "rounded": {
                "label": "Rounded",
                "description": "Softly rounded corners",
                "width": 300, "height": 300,
                "path": "M 30 8 H 270 Q 292 8 292 30 V 270 Q 292 292 270 292 H 30 Q 8 292 8 270 V 30 Q 8 8 30 8 Z",
                "qrArea": {"x": 18, "y": 18, "size": 264},
            },
            "pill": {
                "label": "Pill",
                "description": "Very rounded corners",
                "width": 300, "height": 300,
                "path": "M 60 8 H 240 Q 292 8 292 60 V 240 Q 292 292 240 292 H 60 Q 8 292 8 240 V 60 Q 8 8 60 8 Z",
                "qrArea": {"x": 24, "y": 24, "size": 252},
            },
        },
    },
    "rectangle": {
        "label": "Rectangle",
        "icon": "▬",
        "description": "Rectangular portrait and landscape shapes",
        "variations": {
            "portrait": {
                "label": "Portrait",
                "description": "Tall rounded rectangle",
                "width": 260, "height": 360,
                "path": "M 26 8 H 234 Q 252 8 252 26 V 334 Q 252 352 234 352 H 26 Q 8 352 8 334 V 26 Q 8 8 26 8 Z",
                "qrArea": {"x": 14, "y": 64, "size": 232},
            },
            "landscape": {
                "label": "Landscape",
                "description": "Wide rounded rectangle",
                "width": 360, "height": 260,
                "path": "M 26 8 H 334 Q 352 8 352 26 V 234 Q 352 252 334 252 H 26 Q 8 252 8 234 V 26 Q 8 8 26 8 Z",
                "qrArea": {"x": 64, "y": 14, "size": 232},
            },
            "ticket": {
                "label": "Ticket",
                "description": "Rounded rectangle with decorative notches",
                "width": 260, "height": 360,
                "path": [
                    "M 26 8 H 234 Q 252 8 252 26 V 148",
                    "Q 242 158 242 170 Q 242 182 252 192",
                    "V 334 Q 252 352 234 352 H 26 Q 8 352 8 334",
                    "V 192 Q 18 182 18 170 Q 18 158 8 148",
                    "V 26 Q 8 8 26 8 Z",
                ],
                "qrArea": {"x": 22, "y": 64, "size": 216},
            },
        },
    },
    "circle": {
        "label": "Circle",
        "icon": "⭕",
        "description": "Circular and squircle shapes",
        "variations": {
            "perfect": {
                "label": "Perfect",
                "description": "True circle",
                "width": 300, "height": 300,
                "path": "M 150 8 A 142 142 0 0 1 292 150 A 142 142 0 0 1 150 292 A 142 142 0 0 1 8 150 A 142 142 0 0 1 150 8 Z",
                "qrArea": {"x": 52, "y": 52, "size": 196},
            },
            "squircle": {
                "label": "Squircle",
                "description": "Superellipse / iOS icon shape",
                "width": 300, "height": 300,
                "path": "M 150 8 C 260 8 292 40 292 150 C 292 260 260 292 150 292 C 40 292 8 260 8 150 C 8 40 40 8 150 8 Z",
                "qrArea": {"x": 40, "y": 40, "size": 220},
            },
        },
    },
    "oval": {
        "label": "Oval",
        "icon": "⬮",
        "description": "Elliptical shapes",
        "variations": {
            "vertical": {
                "label": "Vertical",
                "description": "Tall oval",
                "width": 280, "height": 360,
                "path": "M 140 8 A 132 172 0 0 1 272 180 A 132 172 0 0 1 140 352 A 132 172 0 0 1 8 180 A 132 172 0 0 1 140 8 Z",
                "qrArea": {"x": 38, "y": 78, "size": 204},
            },
            "horizontal": {
                "label": "Horizontal",
                "description": "Wide oval",
                "width": 360, "height": 280,
                "path": "M 180 8 A 172 132 0 0 1 352 140 A 172 132 0 0 1 180 272 A 172 132 0 0 1 8 140 A 172 132 0 0 1 180 8 Z",
                "qrArea": {"x": 78, "y": 38, "size": 204},
            },
        },
    },
    "diamond": {
        "label": "Diamond",
        "icon": "◆",
        "description": "Diamond / rhombus shapes",
        "variations": {
            "classic": {
                "label": "Classic",
                "description": "Sharp diamond",
                "width": 300, "height": 340,
                "path": "M 150 8 L 292 170 L 150 332 L 8 170 Z",
                "qrArea": {"x": 76, "y": 96, "size": 148},
            },
            "soft": {
                "label": "Soft",
                "description": "Rounded diamond corners",
                "width": 300, "height": 340,
                "path": "M 150 18 Q 224 90 282 170 Q 224 250 150 322 Q 76 250 18 170 Q 76 90 150 18 Z",
                "qrArea": {"x": 78, "y": 98, "size": 144},
            },
        },
    },
    "heart": {
        "label": "Heart",
        "icon": "❤️",
        "description": "Heart shapes",
        "variations": {
            "classic": {
                "label": "Classic",
                "description": "Traditional heart",
                "width": 300, "height": 280,
                "path": [
                    "M 150 268",
                    "C 75 218 8 165 8 112",
                    "C 8 55 50 18 100 18",
                    "C 130 18 150 48 150 48",
                    "C 150 48 170 18 200 18",
                    "C 250 18 292 55 292 112",
                    "C 292 165 225 218 150 268 Z",
                ],
                "qrArea": {"x": 62, "y": 42, "size": 176},
            },
            "rounded": {
                "label": "Rounded",
                "description": "Softer, fuller heart",
                "width": 300, "height": 280,
                "path": [
                    "M 150 258",
                    "C 68 204 14 158 14 108",
                    "C 14 52 55 18 105 18",
                    "C 135 18 150 45 150 45",
                    "C 150 45 165 18 195 18",
                    "C 245 18 286 52 286 108",
                    "C 286 158 232 204 150 258 Z",
                ],
                "qrArea": {"x": 58, "y": 38, "size": 184},
            },
        },
    },
    "hexagon": {
        "label": "Hexagon",
        "icon": "⬡",
        "description": "Six-sided shapes",
        "variations": {
            "sharp": {
                "label": "Sharp",
                "description": "Clean hex edges",
                "width": 300, "height": 340,
                "path": "M 150 8 L 290 88 L 290 252 L 150 332 L 10 252 L 10 88 Z",
                "qrArea": {"x": 56, "y": 72, "size": 188},
            },
            "rounded": {
                "label": "Rounded",
                "description": "Softly rounded hex corners",
                "width": 300, "height": 340,
                "path": [
                    "M 150 14",
                    "Q 220 14 284 90",
                    "L 284 250",
                    "Q 220 326 150 326",
                    "Q 80 326 16 250",
                    "L 16 90",
                    "Q 80 14 150 14 Z",
                ],
                "qrArea": {"x": 58, "y": 74, "size": 184},
            },
        },
    },
    "shield": {
        "label": "Shield",
        "icon": "🛡️",
        "description": "Protective shield shapes",
        "variations": {
            "classic": {
                "label": "Classic",
                "description": "Heraldic shield with pointed base",
                "width": 300, "height": 340,
                "path": [
                    "M 150 8",
                    "C 100 8, 18 18, 8 24",
                    "L 8 170",
                    "C 8 240, 65 295, 150 332",
                    "C 235 295, 292 240, 292 170",
                    "L 292 24",
                    "C 282 18, 200 8, 150 8",
                    "Z",
                ],
                "qrArea": {"x": 46, "y": 36, "size": 208},
            },
            "badge": {
                "label": "Badge",
                "description": "Rounded badge with soft curves",
                "width": 300, "height": 330,
                "path": [
                    "M 150 10",
                    "C 90 10, 28 18, 18 24",
                    "Q 10 30, 10 40",
                    "L 10 185",
                    "C 10 245, 60 290, 150 322",
                    "C 240 290, 290 245, 290 185",
                    "L 290 40",
                    "Q 290 30, 282 24",
                    "C 272 18, 210 10, 150 10",
                    "Z",
                ],
                "qrArea": {"x": 44, "y": 42, "size": 212},
            },
            "modern": {
                "label": "Modern",
                "description": "Clean with rounded bottom",
                "width": 300, "height": 310,
                "path": [
                    "M 150 10",
                    "C 100 10, 25 18, 15 24",
                    "L 15 205",
                    "Q 15 248, 42 268",
                    "Q 80 292, 150 300",
                    "Q 220 292, 258 268",
                    "Q 285 248, 285 205",
                    "L 285 24",
                    "C 275 18, 200 10, 150 10",
                    "Z",
                ],
                "qrArea": {"x": 36, "y": 30, "size": 228},
            },
            "emblem": {
                "label": "Emblem",
                "description": "Angular military chevron",
                "width": 300, "height": 350,
                "path": [
                    "M 150 5",
                    "L 292 22",
                    "L 292 195",
                    "C 292 258, 234 310, 150 342",
                    "C 66 310, 8 258, 8 195",
                    "L 8 22",
                    "Z",
                ],
                "qrArea": {"x": 42, "y": 34, "size": 216},
            },
        },
    },
}
