"""Tests for the canvas package: painter paths, offscreen rendering, scene input and view zoom."""
from __future__ import annotations

import math

import pytest
from PyQt6.QtCore import QEvent, QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QImage, QKeyEvent, QPainter

from geometry import distance
from models import Mode, Shape
from diagram import EntryMarker, Node, PendingEdge, SelfTransition, Transition
from canvas import DiagramScene, DiagramView, EdgeItem, NodeItem
from canvas.painting import _CachedPaintSettings, edge_path, label_bounds
from canvas.scene import key_name


def _arc_mid_angle(geom) -> float:
    if geom.is_reversed:
        return geom.start_angle - ((geom.start_angle - geom.end_angle) % (2 * math.pi)) / 2
    return geom.start_angle + ((geom.end_angle - geom.start_angle) % (2 * math.pi)) / 2


def _render(scene: DiagramScene, size: int = 200) -> QImage:
    image = QImage(size, size, QImage.Format.Format_ARGB32)
    image.fill(QColor("#ffffff"))
    # Direct diagram edits bypass the redraw signal
    scene.refresh()
    area = QRectF(0, 0, size, size)
    painter = QPainter(image)
    scene.render(painter, area, area)
    painter.end()
    return image


@pytest.fixture()
def scene():
    s = DiagramScene()
    yield s
    s.state.enter_canvas()


# ═══════════════════════════════════════════════════════════
# edge_path
# ═══════════════════════════════════════════════════════════

class TestEdgePath:

    def test_straight(self):
        geom = Transition(Node(0, 0), Node(200, 0)).derive_geometry()
        path = edge_path(geom)
        assert path.elementCount() == 2
        assert distance(path.currentPosition(), geom.end) < 1e-9

    @pytest.mark.parametrize("anchor", [(800, 650), (650, 800)])
    def test_arc_follows_derived_circle(self, anchor):
        t = Transition(Node(500, 500), Node(1000, 1000))
        t.set_anchor_from_absolute_point(*anchor)
        geom = t.derive_geometry()
        path = edge_path(geom)

        # arcTo works from a bounding rect with float angles, so ends land within half a pixel
        assert distance(path.pointAtPercent(0.0), geom.start) < 0.5
        assert distance(path.currentPosition(), geom.end) < 0.5
        mid = geom.circle.point_at(_arc_mid_angle(geom))
        assert distance(path.pointAtPercent(0.5), mid) < 1.0
        # Passes through the dragged anchor, not the far side of the circle
        assert any(
            distance(path.pointAtPercent(i / 200), QPointF(*anchor)) < 3.0 for i in range(201)
        )

    def test_self_loop_is_long_way_round(self):
        loop = SelfTransition(Node(0, 0), anchor_angle=0.0)
        geom = loop.derive_geometry()
        path = edge_path(geom)
        r = geom.circle.radius
        # 1.6 pi of a circle
        assert path.length() == pytest.approx(1.6 * math.pi * r, rel=0.01)
        far = path.pointAtPercent(0.5)
        assert far.x() == pytest.approx(geom.circle.x + r, abs=0.5)
        assert far.y() == pytest.approx(0, abs=0.5)


# ═══════════════════════════════════════════════════════════
# Rendering smoke tests
# ═══════════════════════════════════════════════════════════

class TestRendering:

    def test_node_fill(self, scene):
        scene.diagram.add_node(Node(100, 100))
        image = _render(scene)
        assert image.pixelColor(100, 100).name() == "#fff2a8"
        assert image.pixelColor(5, 5).name() == "#ffffff"

    def test_selected_node_fill(self, scene):
        node = scene.diagram.add_node(Node(100, 100, color="blue"))
        scene.state.select(node)
        assert _render(scene).pixelColor(100, 100).name() == "#90caf9"

    def test_edge_stroke(self, scene):
        a = scene.diagram.add_node(Node(40, 100))
        b = scene.diagram.add_node(Node(160, 100))
        scene.diagram.add_edge(Transition(a, b))
        assert _render(scene).pixelColor(100, 100).name() == "#9ac29a"

    def test_every_entity_and_gesture_paints(self, scene):
        a = scene.diagram.add_node(Node(50, 50, shape=Shape.TRIANGLE, accept_state=True, text="\\alpha_1"))
        b = scene.diagram.add_node(Node(150, 150, shape=Shape.HEXAGON, text="b"))
        scene.diagram.add_edge(Transition(a, b, perpendicular_part=20.0, arrow_kind="tee", text="go"))
        scene.diagram.add_edge(SelfTransition(b, anchor_angle=1.0, text="loop"))
        scene.diagram.add_edge(EntryMarker(a, delta_x=-40, delta_y=0))
        scene.state.select(a)
        scene.state.begin_text_edit()
        scene.dispatcher.pending = PendingEdge(QPointF(10, 10), QPointF(90, 10))
        image = _render(scene)
        assert image.pixelColor(150, 150).name() != "#ffffff"

    def test_rubber_band(self, scene):
        scene.dispatcher.pointer_down(20, 20)
        scene.dispatcher.pointer_move(180, 180)
        image = _render(scene)
        assert image.pixelColor(100, 100).name() != "#ffffff"
        scene.dispatcher.pointer_up(180, 180)


# ═══════════════════════════════════════════════════════════
# Per-entity graphics items
# ═══════════════════════════════════════════════════════════

class TestItems:

    def test_one_item_per_entity(self, scene):
        a = scene.diagram.add_node(Node(0, 0))
        b = scene.diagram.add_node(Node(200, 0))
        edge = scene.diagram.add_edge(Transition(a, b))
        scene.refresh()
        assert isinstance(scene.item_for(a), NodeItem)
        assert isinstance(scene.item_for(edge), EdgeItem)
        assert len(scene.items()) == 3

    def test_nodes_stack_above_edges(self, scene):
        a = scene.diagram.add_node(Node(0, 0))
        b = scene.diagram.add_node(Node(200, 0))
        edge = scene.diagram.add_edge(Transition(a, b))
        scene.refresh()
        assert scene.item_for(a).zValue() > scene.item_for(edge).zValue()

    def test_removed_entities_lose_their_items(self, scene):
        a = scene.diagram.add_node(Node(0, 0))
        b = scene.diagram.add_node(Node(200, 0))
        edge = scene.diagram.add_edge(Transition(a, b))
        scene.refresh()
        scene.state.select(a)
        scene.dispatcher.delete_selection()
        assert scene.item_for(a) is None
        assert scene.item_for(edge) is None
        assert [item.entity for item in scene.items()] == [b]

    def test_loading_records_swaps_items(self, scene):
        old = scene.diagram.add_node(Node(0, 0))
        scene.refresh()
        scene.dispatcher.load_records({"nodes": [{"x": 10, "y": 10}, {"x": 90, "y": 10}]})
        assert scene.item_for(old) is None
        assert all(scene.item_for(n) is not None for n in scene.diagram.nodes)
        assert len(scene.items()) == 2

    def test_node_item_hit_area_is_outline(self, scene):
        node = scene.diagram.add_node(Node(100, 100, shape=Shape.TRIANGLE))
        scene.refresh()
        item = scene.item_for(node)
        for x, y in [(100, 100), (100, 75), (128, 100), (70, 70), (100, 125)]:
            assert item.contains(QPointF(x, y)) == node.contains_point(x, y)

    def test_items_follow_dragged_node(self, scene):
        node = scene.diagram.add_node(Node(100, 100))
        scene.refresh()
        scene.dispatcher.pointer_down(100, 100)
        scene.dispatcher.pointer_move(300, 100)
        scene.dispatcher.pointer_up(300, 100)
        assert scene.items(QPointF(300, 100)) == [scene.item_for(node)]
        assert scene.items(QPointF(100, 100)) == []

    def test_edge_item_hit_area(self, scene):
        a = scene.diagram.add_node(Node(0, 0))
        b = scene.diagram.add_node(Node(200, 0))
        edge = scene.diagram.add_edge(Transition(a, b))
        scene.refresh()
        item = scene.item_for(edge)
        assert item.contains(QPointF(100, 3))
        assert not item.contains(QPointF(100, 20))

    def test_bounds_cover_label(self, scene):
        node = scene.diagram.add_node(Node(0, 0, text="a rather long label"))
        scene.refresh()
        label = label_bounds(node.text, node.center(), None)
        assert scene.item_for(node).boundingRect().contains(label)


# ═══════════════════════════════════════════════════════════
# Colours from settings
# ═══════════════════════════════════════════════════════════

class TestPaintSettings:

    def test_valid_colour_used(self, isolated_settings):
        isolated_settings.settings.canvas.selection.selected_color = "#112233"
        _CachedPaintSettings.invalidate()
        assert _CachedPaintSettings.get().selected_color.name() == "#112233"

    @pytest.mark.parametrize("bad", ["", "orange-ish", "#12345"])
    def test_malformed_colour_falls_back(self, isolated_settings, bad):
        isolated_settings.settings.canvas.selection.selected_color = bad
        isolated_settings.settings.canvas.text.color = bad
        _CachedPaintSettings.invalidate()
        style = _CachedPaintSettings.get()
        assert style.selected_color.name() == "#ff9500"
        assert style.text_color.name() == "#000000"


# ═══════════════════════════════════════════════════════════
# Scene input routing
# ═══════════════════════════════════════════════════════════

class TestScene:

    @pytest.mark.parametrize("key, name", [
        (Qt.Key.Key_Shift, "shift"),
        (Qt.Key.Key_Escape, "escape"),
        (Qt.Key.Key_Return, "enter"),
        (Qt.Key.Key_Delete, "delete"),
        (Qt.Key.Key_A, "A"),
        (Qt.Key.Key_3, "3"),
        (Qt.Key.Key_F1, None),
    ])
    def test_key_name(self, key, name):
        assert key_name(key.value) == name

    def test_diagram_bounds(self, scene):
        assert scene.diagram_bounds().isNull()
        scene.diagram.add_node(Node(0, 0))
        scene.diagram.add_node(Node(100, 50))
        bounds = scene.diagram_bounds()
        assert (bounds.left(), bounds.top(), bounds.width(), bounds.height()) == (-30, -30, 160, 110)

    def test_typing_reaches_selected_node(self, scene):
        node = scene.diagram.add_node(Node(0, 0))
        scene.state.select(node)
        scene.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_H, Qt.KeyboardModifier.NoModifier, "h"))
        scene.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_I, Qt.KeyboardModifier.NoModifier, "i"))
        assert node.text == "hi"
        assert scene.state.mode == Mode.EDITING_TEXT

    def test_ctrl_chords_are_not_typed(self, scene):
        node = scene.diagram.add_node(Node(0, 0))
        scene.state.select(node)
        scene.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_H, Qt.KeyboardModifier.ControlModifier, "\x08"))
        assert node.text == ""

    def test_named_keys_route_to_dispatcher(self, scene):
        node = scene.diagram.add_node(Node(0, 0))
        scene.state.select(node)
        scene.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Delete, Qt.KeyboardModifier.NoModifier))
        assert scene.diagram.nodes == []
        assert scene.state.mode == Mode.CANVAS

    def test_modifier_key_release(self, scene):
        scene.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_4, Qt.KeyboardModifier.NoModifier, "4"))
        assert scene.dispatcher.shape_modifier == "4"
        scene.keyReleaseEvent(QKeyEvent(QEvent.Type.KeyRelease, Qt.Key.Key_4, Qt.KeyboardModifier.NoModifier, "4"))
        assert scene.dispatcher.shape_modifier is None


class TestView:

    def test_zoom_in_out_reset(self, scene):
        view = DiagramView(scene)
        view.zoom_in()
        assert view.transform().m11() == pytest.approx(1.15)
        view.zoom_out()
        assert view.transform().m11() == pytest.approx(1.0)
        view.zoom_in()
        view.zoom_reset()
        assert view.transform().m11() == 1.0

    def test_zoom_fit_without_nodes_is_noop(self, scene):
        view = DiagramView(scene)
        view.zoom_fit()
        assert view.transform().m11() == 1.0
