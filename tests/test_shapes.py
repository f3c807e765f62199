import pytest

from shieldqr.config import ConfigError, DesignConfig
from shieldqr.shapes import ShapeVariation, create_registry, resolve_shape, resolve_shield

TINY = {
    "label": "Tiny",
    "width": 100, "height": 120,
    "path": "M 0 0 H 100 V 120 H 0 Z",
    "qrArea": {"x": 10, "y": 10, "size": 80},
}


class TestBuiltins:
    def test_categories(self, registry):
        assert registry.categories() == [
            "none", "square", "rectangle", "circle", "oval",
            "diamond", "heart", "hexagon", "shield",
        ]

    def test_shield_shapes(self, registry):
        assert registry.shield_shapes() == ["classic", "badge", "modern", "emblem"]

    def test_classic_geometry(self, registry):
        classic = registry.get("shield", "classic")
        assert (classic.width, classic.height) == (300, 340)
        assert classic.view_box == "0 0 300 340"
        assert (classic.qr_area.x, classic.qr_area.y, classic.qr_area.size) == (46, 36, 208)

    def test_ticket_path_joined(self, registry):
        ticket = registry.get("rectangle", "ticket")
        assert ticket.path.startswith("M 26 8 H 234")
        assert "V 148 Q 242 158" in ticket.path

    def test_only_none_is_bare(self, registry):
        bare = [
            (cat, var)
            for cat in registry.categories()
            for var in registry.variations(cat)
            if registry.get(cat, var).bare
        ]
        assert bare == [("none", "default")]

    def test_every_qr_area_inside_canvas(self, registry):
        for cat in registry.categories():
            for var in registry.variations(cat):
                shape = registry.get(cat, var)
                a = shape.qr_area
                assert a.x + a.size <= shape.width
                assert a.y + a.size <= shape.height


class TestResolution:
    def test_category_and_variation(self, registry):
        resolved = resolve_shape(DesignConfig(shape_category="heart", shape_variation="rounded"), registry)
        assert (resolved.category, resolved.variation) == ("heart", "rounded")

    def test_unknown_variation_uses_first(self, registry):
        resolved = resolve_shape(DesignConfig(shape_category="heart", shape_variation="zigzag"), registry)
        assert (resolved.category, resolved.variation) == ("heart", "classic")

    def test_missing_variation_uses_first(self, registry):
        resolved = resolve_shape({"shapeCategory": "oval"}, registry)
        assert (resolved.category, resolved.variation) == ("oval", "vertical")

    def test_category_beats_legacy(self, registry):
        config = DesignConfig.from_options({"shapeCategory": "heart", "shape": "badge"})
        resolved = resolve_shape(config, registry)
        assert resolved.category == "heart"

    def test_legacy_shield_variation(self, registry):
        resolved = resolve_shape({"shape": "badge"}, registry)
        assert (resolved.category, resolved.variation) == ("shield", "badge")

    def test_legacy_category_name(self, registry):
        resolved = resolve_shape({"shape": "hexagon"}, registry)
        assert (resolved.category, resolved.variation) == ("hexagon", "sharp")

    def test_legacy_via_from_options(self, registry):
        config = DesignConfig.from_options({"shape": "emblem"})
        assert resolve_shape(config, registry).variation == "emblem"

    def test_legacy_needs_unset_category_when_constructed(self, registry):
        assert resolve_shape(DesignConfig(shape="badge"), registry).variation == "classic"
        config = DesignConfig(shape_category=None, shape_variation=None, shape="badge")
        assert resolve_shape(config, registry).variation == "badge"

    def test_unknown_everything_is_classic(self, registry):
        resolved = resolve_shape({"shapeCategory": "blob", "shape": "blob"}, registry)
        assert (resolved.category, resolved.variation) == ("shield", "classic")

    def test_none_config(self, registry):
        assert resolve_shape(None, registry).variation == "classic"

    def test_registry_method(self, registry):
        assert registry.resolve({"shapeCategory": "diamond"}).variation == "classic"

    def test_resolve_shield_fallback(self, registry):
        name, shape = resolve_shield(registry, "nope")
        assert name == "classic"
        assert shape is registry.get("shield", "classic")


class TestRegister:
    def test_merge_keeps_existing(self, registry):
        registry.register("shield", {"variations": {"tiny": TINY}})
        assert registry.shield_shapes() == ["classic", "badge", "modern", "emblem", "tiny"]
        assert registry["shield"].label == "Shield"

    def test_merge_replaces_same_key(self, registry):
        registry.register("heart", {"variations": {"classic": TINY}})
        assert registry.get("heart", "classic").width == 100
        assert registry.get("heart", "rounded").width == 300

    def test_replace(self, registry):
        registry.register("heart", {"label": "Love", "variations": {"tiny": TINY}}, merge=False)
        assert registry.variations("heart") == ["tiny"]
        assert registry["heart"].label == "Love"

    def test_new_category_is_resolvable(self, registry):
        registry.register("blob", {"label": "Blob", "variations": {"tiny": TINY}})
        resolved = resolve_shape({"shapeCategory": "blob"}, registry)
        assert (resolved.category, resolved.variation) == ("blob", "tiny")
        assert resolved.shape.view_box == "0 0 100 120"

    def test_replaced_shield_still_has_default(self, registry):
        registry.register("shield", {"variations": {"tiny": TINY}}, merge=False)
        resolved = resolve_shape({"shapeCategory": "nope"}, registry)
        assert (resolved.category, resolved.variation) == ("shield", "classic")
        assert resolved.shape.width == 300

    def test_registries_are_independent(self, registry):
        registry.register("blob", {"variations": {"tiny": TINY}})
        assert "blob" in registry
        assert "blob" not in create_registry()

    def test_qr_area_outside_canvas_rejected(self, registry):
        bad = dict(TINY, qrArea={"x": 30, "y": 10, "size": 80})
        with pytest.raises(ConfigError):
            registry.register("blob", {"variations": {"bad": bad}})
        assert "blob" not in registry

    def test_missing_field_rejected(self):
        with pytest.raises(ConfigError):
            ShapeVariation.from_dict("x", {"width": 10, "height": 10})
