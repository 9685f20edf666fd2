"""
Layout Engine
=============

Hierarchical top-down placement of the visible statements.

MODEL:
======
1. Parent -> child pairs come from hierarchical relations whose endpoints
   are both visible; peer relations are ignored
2. Roots are every Thesis plus every node without a visible parent,
   Theses first, then by title
3. measure() runs bottom-up, place() runs top-down

Each subtree is measured as a pair of extents (left, right) around its own
x-center, so a parent sits exactly over the centers of its outermost
children while its neighbours still never overlap the subtree.

ARGUMENT SUMMARY CASE:
======================
A Thesis with an Argument Summary child puts the Summary directly beneath
itself (raised by summary_raise) and flanks it with the other children:
the first ceil(n/2) to the left, the rest to the right, each half laid out
outward from the Summary's subtree.

The engine is a pure function: same nodes and edges in, same positions out.
Positions are top-left corners of NODE_W x NODE_H boxes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple
import math

from debatemap.config import LayoutConfig
from debatemap.contracts import Relation, Statement, StatementKind


KIND_ORDER = {
    StatementKind.EVIDENCE: 0,
    StatementKind.AGREEMENT: 1,
    StatementKind.ARGUMENT: 2,
    StatementKind.COUNTER: 3,
}


@dataclass(frozen=True)
class Position:
    """Top-left corner of a statement box."""
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> Position:
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Extent:
    """Horizontal reach of a subtree to either side of its root's center."""
    left: float
    right: float

    @property
    def width(self) -> float:
        return self.left + self.right


def child_sort_key(node: Statement) -> Tuple[int, str]:
    return (KIND_ORDER.get(node.kind, len(KIND_ORDER)), node.title.casefold())


def root_sort_key(node: Statement) -> Tuple[int, str]:
    return (0 if node.kind == StatementKind.THESIS else 1, node.title.casefold())


class _LayoutPass:
    """State of one compute_layout() call."""

    def __init__(self, nodes: List[Statement], edges: Iterable[Relation], config: LayoutConfig):
        self.config = config
        self.nodes: Dict[str, Statement] = {n.id: n for n in nodes}
        self.order = [n.id for n in nodes]
        self.children: Dict[str, List[str]] = {n.id: [] for n in nodes}
        self.has_parent: Set[str] = set()
        for edge in edges:
            pair = edge.parent_child()
            if pair is None:
                continue
            parent, child = pair
            if parent not in self.nodes or child not in self.nodes or child in self.has_parent:
                continue
            self.children[parent].append(child)
            self.has_parent.add(child)

        for parent_id, kids in self.children.items():
            kids.sort(key=lambda cid: child_sort_key(self.nodes[cid]))

        self.extents: Dict[str, Extent] = {}
        self.positions: Dict[str, Position] = {}
        self._measuring: Set[str] = set()

    # =========================================================================
    # STRUCTURE
    # =========================================================================

    def roots(self) -> List[str]:
        roots = [
            nid for nid in self.order
            if self.nodes[nid].kind == StatementKind.THESIS or nid not in self.has_parent
        ]
        roots.sort(key=lambda nid: root_sort_key(self.nodes[nid]))
        return roots

    def split(self, node_id: str) -> Tuple[Optional[str], List[str]]:
        """(summary child, other children) of a node."""
        kids = self.children[node_id]
        if self.nodes[node_id].kind != StatementKind.THESIS:
            return None, kids
        summary = next(
            (c for c in kids if self.nodes[c].kind == StatementKind.ARGUMENT_SUMMARY), None
        )
        if summary is None:
            return None, kids
        return summary, [c for c in kids if c != summary]

    # =========================================================================
    # MEASURE (bottom-up)
    # =========================================================================

    def measure(self, node_id: str) -> Extent:
        """
        Extent of a subtree, children first.

        Walks an explicit stack so chain depth is not bounded by the
        interpreter's recursion limit. A child still open on the stack
        (only possible through a cycle) counts as a single box.
        """
        stack = [(node_id, False)]
        while stack:
            current, children_done = stack.pop()
            if current in self.extents:
                continue
            if children_done:
                self._measuring.discard(current)
                self.extents[current] = self._extent_of(current)
                continue
            if current in self._measuring:
                continue
            self._measuring.add(current)
            stack.append((current, True))
            for child in self.children[current]:
                if child not in self.extents and child not in self._measuring:
                    stack.append((child, False))
        return self._known(node_id)

    def _known(self, node_id: str) -> Extent:
        half = self.config.node_w / 2
        return self.extents.get(node_id, Extent(half, half))

    def _extent_of(self, node_id: str) -> Extent:
        half = self.config.node_w / 2
        summary, others = self.split(node_id)
        if summary is not None:
            return self._measure_summary(summary, others)
        if others:
            offsets = self._block_offsets(others)
            first, last = self._known(others[0]), self._known(others[-1])
            return Extent(
                max(half, first.left - offsets[0]),
                max(half, offsets[-1] + last.right),
            )
        return Extent(half, half)

    def _measure_summary(self, summary: str, others: List[str]) -> Extent:
        half = self.config.node_w / 2
        gap = self.config.x_gap
        left, right = _halves(others)
        mid = self._known(summary)
        reach_left = mid.left + (gap + self._block_width(left) if left else 0)
        reach_right = mid.right + (gap + self._block_width(right) if right else 0)
        return Extent(max(half, reach_left), max(half, reach_right))

    def _block_width(self, ids: List[str]) -> float:
        if not ids:
            return 0.0
        total = sum(self._known(c).width for c in ids)
        return total + self.config.x_gap * (len(ids) - 1)

    def _block_offsets(self, ids: List[str]) -> List[float]:
        """
        Child center offsets relative to the parent's center.

        Neighbouring subtrees are X_GAP apart; the first and last child
        centers are symmetric around zero.
        """
        offsets = [0.0]
        for prev, cur in zip(ids, ids[1:]):
            step = self._known(prev).right + self.config.x_gap + self._known(cur).left
            offsets.append(offsets[-1] + step)
        shift = (offsets[0] + offsets[-1]) / 2
        return [o - shift for o in offsets]

    # =========================================================================
    # PLACE (top-down)
    # =========================================================================

    def place(self, node_id: str, center_x: float, depth: int, raise_by: float = 0.0) -> None:
        cfg = self.config
        stack = [(node_id, center_x, depth, raise_by)]
        while stack:
            current, x, level, lift = stack.pop()
            if current in self.positions:
                continue
            self.positions[current] = Position(
                x - cfg.node_w / 2, level * cfg.level_height - lift
            )
            stack.extend(reversed(self._child_slots(current, x, level)))

    def _child_slots(self, node_id: str, center_x: float, depth: int
                     ) -> List[Tuple[str, float, int, float]]:
        """(child, center x, depth, raise) for each child, left to right."""
        cfg = self.config
        summary, others = self.split(node_id)
        if summary is None:
            if not others:
                return []
            return [
                (child, center_x + offset, depth + 1, 0.0)
                for child, offset in zip(others, self._block_offsets(others))
            ]

        mid = self._known(summary)
        left, right = _halves(others)
        slots = []

        edge = center_x - mid.left - cfg.x_gap
        for child in reversed(left):
            extent = self._known(child)
            slots.insert(0, (child, edge - extent.right, depth + 1, 0.0))
            edge -= extent.width + cfg.x_gap

        slots.append((summary, center_x, depth + 1, cfg.summary_raise))

        edge = center_x + mid.right + cfg.x_gap
        for child in right:
            extent = self._known(child)
            slots.append((child, edge + extent.left, depth + 1, 0.0))
            edge += extent.width + cfg.x_gap
        return slots

    def run(self) -> Dict[str, Position]:
        cursor = 0.0
        for root in self.roots():
            if root in self.positions:
                continue
            extent = self.measure(root)
            self.place(root, cursor + extent.left, 0)
            cursor += extent.width + 2 * self.config.x_gap

        # Nodes no root reaches (only possible through a cycle) go to the right
        for node_id in self.order:
            if node_id not in self.positions:
                self.positions[node_id] = Position(cursor, 0.0)
                cursor += self.config.node_w + 2 * self.config.x_gap

        return {nid: self.positions[nid] for nid in self.order}


def _halves(ids: List[str]) -> Tuple[List[str], List[str]]:
    cut = math.ceil(len(ids) / 2)
    return ids[:cut], ids[cut:]


# =============================================================================
# PUBLIC API
# =============================================================================

def compute_layout(
    nodes: Iterable[Statement],
    edges: Iterable[Relation],
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Position]:
    """Positions for the given (visible) nodes, keyed by node id."""
    return _LayoutPass(list(nodes), edges, config or LayoutConfig()).run()


def anchor_translate(
    positions: Mapping[str, Position],
    previous: Mapping[str, Position],
    reference_id: Optional[str],
) -> Dict[str, Position]:
    """
    Shift every position so reference_id stays where it was before.

    Returns the positions unchanged when the reference is missing from
    either map.
    """
    if not reference_id or reference_id not in positions or reference_id not in previous:
        return dict(positions)
    before, after = previous[reference_id], positions[reference_id]
    dx, dy = before.x - after.x, before.y - after.y
    return {nid: pos.translated(dx, dy) for nid, pos in positions.items()}


def center_x(position: Position, config: Optional[LayoutConfig] = None) -> float:
    return position.x + (config or LayoutConfig()).node_w / 2
