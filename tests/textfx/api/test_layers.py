import logging

import pytest
from attrs.exceptions import FrozenInstanceError

from textfx.api.layers import (
    BackgroundLayer,
    SubjectLayer,
    TextLayer,
    display_name,
    field_names,
    new_text_id,
    with_attribute,
)
from textfx.constants import LayerKind

logger = logging.getLogger(__name__)


def test_kinds():
    assert BackgroundLayer().kind == LayerKind.BACKGROUND
    assert SubjectLayer().kind == LayerKind.SUBJECT
    assert TextLayer(id="t").kind == LayerKind.TEXT
    assert LayerKind.BACKGROUND.value == "full"


def test_text_defaults():
    layer = TextLayer(id="t")
    assert layer.text == "edit"
    assert layer.name == "Edit"
    assert layer.font_family == "Inter"
    assert layer.color == "white"
    assert layer.font_size == 200
    assert layer.font_weight == 800
    assert layer.opacity == 1
    assert (layer.left, layer.top) == (0, 0)
    assert layer.shadow_color == "rgba(0, 0, 0, 0.8)"
    assert layer.shadow_size == 4
    assert layer.has_shadow


def test_frozen():
    layer = TextLayer(id="t")
    with pytest.raises(FrozenInstanceError):
        layer.left = 10  # type: ignore[misc]


def test_new_text_id():
    first, second = new_text_id(), new_text_id()
    assert first.startswith("text-layer-")
    assert len(first) == len("text-layer-") + 9
    assert first != second


@pytest.mark.parametrize(
    "text, expected", [("HELLO", "HELLO"), ("", "New Text"), ("a b", "a b")]
)
def test_display_name(text, expected):
    assert display_name(text) == expected


def test_with_attribute_text_sets_name():
    layer = with_attribute(TextLayer(id="t"), "text", "HELLO")
    assert layer.text == "HELLO"
    assert layer.name == "HELLO"
    layer = with_attribute(layer, "text", "")
    assert layer.name == "New Text"


def test_with_attribute_returns_copy():
    original = TextLayer(id="t")
    layer = with_attribute(original, "rotation", 45)
    assert layer.rotation == 45
    assert original.rotation == 0
    assert layer.id == original.id


@pytest.mark.parametrize("key", ["id", "kind"])
def test_with_attribute_structural(key):
    with pytest.raises(ValueError):
        with_attribute(TextLayer(id="t"), key, "other")


def test_with_attribute_unknown():
    with pytest.raises(ValueError):
        with_attribute(BackgroundLayer(), "font_size", 10)
    with pytest.raises(ValueError):
        with_attribute(TextLayer(id="t"), "nonexistent", 1)


def test_field_names():
    assert "font_size" in field_names(TextLayer(id="t"))
    assert "font_size" not in field_names(SubjectLayer())
    assert {"id", "name", "visible", "order", "kind"} <= field_names(
        BackgroundLayer()
    )
