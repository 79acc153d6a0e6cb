"""
diagram/document.py

The Diagram container: owns every node and edge, answers spatial queries,
and converts to and from plain-data records.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from PyQt6.QtCore import QRectF

from debug_trace import trace, trace_call
from models import EdgeType
from diagram.edges import Edge, Transition, SelfTransition, EntryMarker
from diagram.node import Node, node_radius
from schemas import record_defaults, validate_records
from settings import get_settings

log = logging.getLogger(__name__)

Entity = Union[Node, Edge]


class DiagramImportError(ValueError):
    """Raised when records cannot be turned into a consistent diagram."""


class Diagram:
    """
    Ordered collection of nodes and edges.

    Insertion order is hit-test order: ``entity_at`` returns the first
    node under the point, and only then the first edge. Removing a node
    always removes every edge that references it.
    """

    def __init__(self):
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self._next_id = 0

    # ---- membership ----

    def add_node(self, node: Node) -> Node:
        if node.id < 0:
            node.id = self._next_id
        self._next_id = max(self._next_id, node.id + 1)
        self.nodes.append(node)
        return node

    def add_edge(self, edge: Edge) -> Edge:
        for n in edge.endpoints():
            if not self._owns(n):
                raise ValueError(f"edge references node {n.id} which is not in this diagram")
        self.edges.append(edge)
        return edge

    def _owns(self, node: Node) -> bool:
        return any(n is node for n in self.nodes)

    def edges_of(self, node: Node) -> List[Edge]:
        return [e for e in self.edges if e.references(node)]

    def remove(self, entity: Entity) -> List[Edge]:
        """
        Remove a node or edge.

        Returns:
            Every edge that left the diagram: the edge itself, or all edges
            incident to the removed node.
        """
        if isinstance(entity, Node):
            removed = self.edges_of(entity)
            self.edges = [e for e in self.edges if not e.references(entity)]
            self.nodes = [n for n in self.nodes if n is not entity]
            trace(f"removed node {entity.id} and {len(removed)} edge(s)", "DIAGRAM")
            return removed
        if any(e is entity for e in self.edges):
            self.edges = [e for e in self.edges if e is not entity]
            return [entity]
        return []

    def remove_nodes(self, nodes: Iterable[Node]) -> List[Edge]:
        removed: List[Edge] = []
        for node in list(nodes):
            removed.extend(self.remove(node))
        return removed

    def clear(self) -> None:
        self.nodes = []
        self.edges = []
        self._next_id = 0

    # ---- spatial queries ----

    def entity_at(self, x: float, y: float) -> Optional[Entity]:
        """Topmost entity at (x, y); nodes win over edges."""
        for node in self.nodes:
            if node.contains_point(x, y):
                return node
        for edge in self.edges:
            if edge.contains_point(x, y):
                return edge
        return None

    def node_at(self, x: float, y: float) -> Optional[Node]:
        for node in self.nodes:
            if node.contains_point(x, y):
                return node
        return None

    def nodes_in_rect(self, rect: QRectF) -> List[Node]:
        """Nodes whose radius circle touches *rect* (which may be unnormalized)."""
        rect = rect.normalized()
        r = node_radius()
        caught = []
        for node in self.nodes:
            closest_x = max(rect.left(), min(node.x, rect.right()))
            closest_y = max(rect.top(), min(node.y, rect.bottom()))
            dx = node.x - closest_x
            dy = node.y - closest_y
            if dx * dx + dy * dy <= r * r:
                caught.append(node)
        return caught

    def snap_node(self, node: Node) -> None:
        """Align *node* on each axis with any other node within the snap padding."""
        padding = get_settings().settings.canvas.edges.snap_padding
        for other in self.nodes:
            if other is node:
                continue
            if abs(node.x - other.x) < padding:
                node.x = other.x
            if abs(node.y - other.y) < padding:
                node.y = other.y

    def move_nodes(self, nodes: Iterable[Node], dx: float, dy: float) -> None:
        for node in nodes:
            node.move_by(dx, dy)

    # ---- records ----

    def to_records(self) -> Dict[str, List[Dict[str, Any]]]:
        """Plain-data snapshot of the diagram."""
        node_ids = {id(n): n.id for n in self.nodes}
        nodes = [
            {
                "id": n.id,
                "x": n.x,
                "y": n.y,
                "shape": n.shape,
                "color": n.color,
                "text": n.text,
                "acceptState": n.accept_state,
            }
            for n in self.nodes
        ]
        edges = [e.to_record(node_ids) for e in self.edges]
        return {"nodes": nodes, "links": edges}

    @trace_call("DIAGRAM")
    def replace_all(self, records: Dict[str, Any]) -> None:
        """
        Replace the whole diagram with the contents of *records*.

        Everything is built and validated first; the live diagram is only
        swapped once the new one is complete.

        Raises:
            DiagramImportError: malformed record, unknown edge type, or an
                edge that references a node that does not exist.
        """
        try:
            nodes, edges = _build_from_records(records)
        except DiagramImportError as e:
            trace(f"import rejected: {e}", "ERROR")
            raise

        self.nodes = nodes
        self.edges = edges
        self._next_id = len(nodes)
        trace(f"imported {len(nodes)} node(s), {len(edges)} edge(s)", "DIAGRAM")


# =============================================================================
# Record parsing
# =============================================================================

def _node_ref(record: Dict[str, Any], key: str, by_id: Dict[Any, Node]) -> Node:
    ref = record[key]
    if ref not in by_id:
        raise DiagramImportError(f"edge references unknown node {ref!r} via {key!r}")
    return by_id[ref]


def _build_from_records(records: Dict[str, Any]):
    # Shape and type checks live in the schema; only cross-record checks are left here
    is_valid, errors = validate_records(records)
    if not is_valid:
        raise DiagramImportError("; ".join(errors))

    node_defaults = record_defaults("node")
    link_defaults = record_defaults("link")

    nodes: List[Node] = []
    by_id: Dict[Any, Node] = {}
    for index, raw in enumerate(records.get("nodes", [])):
        rec = {**node_defaults, **raw}
        # Records without ids are referenced by position
        ref = rec.get("id", index)
        if ref in by_id:
            raise DiagramImportError(f"duplicate node id {ref!r}")
        node = Node(
            float(rec["x"]),
            float(rec["y"]),
            shape=rec["shape"],
            color=rec["color"],
            text=rec["text"],
            accept_state=rec["acceptState"],
            id=index,
        )
        by_id[ref] = node
        nodes.append(node)

    edges: List[Edge] = []
    for raw in records.get("links", []):
        rec = {**link_defaults, **raw}
        kind = rec["type"]
        style = dict(text=rec["text"], arrow_kind=rec["arrowKind"], color=rec["color"])

        if kind == EdgeType.TRANSITION:
            edges.append(Transition(
                _node_ref(rec, "nodeA", by_id),
                _node_ref(rec, "nodeB", by_id),
                parallel_part=float(rec["parallelPart"]),
                perpendicular_part=float(rec["perpendicularPart"]),
                straight_angle_bias=float(rec["straightAngleBias"]),
                **style,
            ))
        elif kind == EdgeType.SELF_TRANSITION:
            edges.append(SelfTransition(
                _node_ref(rec, "node", by_id),
                anchor_angle=float(rec["anchorAngle"]),
                **style,
            ))
        else:
            edges.append(EntryMarker(
                _node_ref(rec, "node", by_id),
                delta_x=float(rec["deltaX"]),
                delta_y=float(rec["deltaY"]),
                **style,
            ))

    log.debug("validated %d node record(s) and %d link record(s)", len(nodes), len(edges))
    return nodes, edges
