import pytest
from pydantic import ValidationError

from layers.plan import check_layer_plan, default_layers
from layers.types import CircleLayerSpec, FillLayerSpec, LineLayerSpec, parse_layer_spec
from fakes import make_layers, make_registry


def test_parse_picks_variant_by_geometry_type():
    fill, outline, street, restaurant = make_layers()
    assert isinstance(fill, FillLayerSpec)
    assert isinstance(outline, LineLayerSpec)
    assert isinstance(street, LineLayerSpec)
    assert isinstance(restaurant, CircleLayerSpec)
    assert restaurant.paint.radius == 10
    assert restaurant.paint.opacity == 0.5


def test_to_engine_uses_hyphenated_paint_keys():
    fill = make_layers()[0]
    assert fill.to_engine() == {
        "id": "area",
        "type": "fill",
        "source": "area",
        "paint": {"fill-color": "#014a4f", "fill-opacity": 0.25},
    }


def test_paint_must_match_geometry_type():
    with pytest.raises(ValidationError):
        parse_layer_spec(
            {"id": "x", "type": "fill", "source": "area", "paint": {"line-width": 2, "line-color": "#000"}}
        )


def test_unknown_geometry_type_is_rejected():
    with pytest.raises(ValidationError):
        parse_layer_spec({"id": "x", "type": "symbol", "source": "area", "paint": {}})


def test_opacity_is_bounded():
    with pytest.raises(ValidationError):
        parse_layer_spec(
            {"id": "x", "type": "circle", "source": "p", "paint": {"circle-color": "#f00", "circle-opacity": 1.5}}
        )


def test_layer_plan_accepts_canonical_stack():
    check_layer_plan(make_layers(), make_registry())


def test_layer_plan_rejects_unknown_source():
    layers = make_layers()
    layers.append(
        parse_layer_spec({"id": "extra", "type": "circle", "source": "nope", "paint": {"circle-color": "#000"}})
    )
    with pytest.raises(ValueError, match="unknown source"):
        check_layer_plan(layers, make_registry())


def test_layer_plan_rejects_duplicate_ids():
    layers = make_layers()
    layers.append(layers[-1])
    with pytest.raises(ValueError, match="Duplicate layer id"):
        check_layer_plan(layers, make_registry())


def test_layer_plan_rejects_markers_below_fill():
    fill, outline, street, restaurant = make_layers()
    with pytest.raises(ValueError, match="fill -> line -> circle"):
        check_layer_plan([restaurant, fill, outline, street], make_registry())


def test_default_layers_come_from_district_config_in_stacking_order():
    layers = default_layers()
    assert [(layer.id, layer.type, layer.source) for layer in layers] == [
        ("area", "fill", "region6_area"),
        ("area-outline", "line", "region6_area"),
        ("street", "line", "region6_important_streets"),
        ("restaurant", "circle", "region6_restaurant_points"),
    ]
    assert layers[0].to_engine()["paint"] == {"fill-color": "#014a4f", "fill-opacity": 0.25}
    assert layers[1].to_engine()["paint"] == {"line-color": "#003134", "line-width": 2.0}
    assert layers[2].to_engine()["paint"] == {"line-color": "#3e570a", "line-width": 4.0}
    assert layers[3].to_engine()["paint"] == {
        "circle-color": "#ff1515",
        "circle-radius": 10.0,
        "circle-opacity": 0.5,
    }
