import logging

from textfx.api.filters import FilterState
from textfx.api.geometry import Viewport
from textfx.api.layers import TextLayer
from textfx.api.preview import filter_style, image_rect, layer_stack, text_style
from textfx.api.store import LayerStore
from textfx.constants import LayerKind

logger = logging.getLogger(__name__)


def test_text_style_default():
    style = text_style(TextLayer(id="t"))
    assert style["left"] == "50%"
    assert style["top"] == "50%"
    assert style["transform"] == (
        "translate(-50%, -50%) rotate(0deg) perspective(1000px) "
        "rotateX(0deg) rotateY(0deg)"
    )
    assert style["font-size"] == "200px"
    assert style["font-weight"] == "800"
    assert style["font-family"] == "Inter, sans-serif"
    assert style["text-shadow"] == "0 2px 4px rgba(0, 0, 0, 0.8)"
    assert style["opacity"] == "1"


def test_text_style_position_and_transform():
    layer = TextLayer(
        id="t", left=10, top=20, rotation=-15, tilt_x=30, tilt_y=-12.5,
        letter_spacing=3, shadow_size=0, opacity=0.5,
    )
    style = text_style(layer)
    assert style["left"] == "60%"
    assert style["top"] == "30%"
    assert "rotate(-15deg)" in style["transform"]
    assert "rotateX(30deg)" in style["transform"]
    assert "rotateY(-12.5deg)" in style["transform"]
    assert style["letter-spacing"] == "3px"
    assert style["text-shadow"] == "none"
    assert style["opacity"] == "0.5"


def test_filter_style():
    assert filter_style(FilterState()) == {"filter": "none"}
    style = filter_style(FilterState(name="vivid-warm"))
    assert style["filter"] == (
        "brightness(1) contrast(1.25) saturate(1.3) hue-rotate(0.03rad)"
    )
    assert style["overlay-color"] == "rgba(255, 165, 0, 0.2)"
    assert style["overlay-blend-mode"] == "overlay"


def test_layer_stack():
    store = LayerStore.default()
    stack = layer_stack(store.layers)
    assert [layer.kind for layer, _ in stack] == [
        LayerKind.BACKGROUND, LayerKind.TEXT, LayerKind.SUBJECT,
    ]
    assert stack[0][1] is None
    assert stack[1][1]["left"] == "50%"

    stack = layer_stack(store.layers, has_cutout=False)
    assert [layer.kind for layer, _ in stack] == [
        LayerKind.BACKGROUND, LayerKind.TEXT,
    ]

    store.toggle_visibility("text-layer-1")
    assert len(layer_stack(store.layers)) == 2


def test_image_rect():
    assert image_rect((400, 200), Viewport(0, 0, 100, 100)) == Viewport(
        0, 25, 100, 50
    )
