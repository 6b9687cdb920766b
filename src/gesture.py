"""Drag gesture tracking.

A DragSession is the explicit state of one drag: Idle until start(), then
Dragging while pointer moves update the hover target, and back to Idle on
drop() or cancel(). The controller that owns the session passes it to the
renderer; nothing here is global.

Geometry comes from the host already computed: each candidate row carries
its bounding rectangle, so the tracker only hit-tests points.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from drop import DropPolicy, HoverTarget, Mutation, VerticalFractionPolicy
from errors import DragStateError
from models import Forest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    def fraction_y(self, py: float) -> float:
        """Relative vertical position of py in the rect, clamped to [0, 1]."""
        if self.height <= 0:
            return 0.0
        return max(0.0, min(1.0, (py - self.y) / self.height))


@dataclass(frozen=True)
class HoverCandidate:
    task_id: str
    rect: Rect
    group_id: str
    depth: int


class DragState(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'


def hit_test(candidates: Iterable[HoverCandidate], x: float, y: float) -> Optional[Tuple[HoverCandidate, float]]:
    """First candidate containing the point, with the point's vertical fraction."""
    for candidate in candidates:
        if candidate.rect.contains(x, y):
            return candidate, candidate.rect.fraction_y(y)
    return None


def row_candidates(rows: Sequence[Any], width: float = 1000.0) -> List[HoverCandidate]:
    """Candidates for rendered terminal rows: row n spans y in [n, n+1).

    `rows` are objects with number, task_id, group_id and depth (see
    render.Row). Every row spans the full width so horizontal drags stay
    over the row they started on.
    """
    return [
        HoverCandidate(row.task_id, Rect(0.0, float(row.number), width, 1.0), row.group_id, row.depth)
        for row in rows
    ]


@dataclass
class DragSession:
    policy: DropPolicy = field(default_factory=VerticalFractionPolicy)
    state: DragState = DragState.IDLE
    dragged_id: Optional[str] = None
    start_point: Tuple[float, float] = (0.0, 0.0)
    pointer: Tuple[float, float] = (0.0, 0.0)
    hover: Optional[HoverTarget] = None

    @property
    def dx(self) -> float:
        return self.pointer[0] - self.start_point[0]

    @property
    def active(self) -> bool:
        return self.state is DragState.DRAGGING

    def start(self, dragged_id: str, x: float, y: float) -> None:
        if self.active:
            raise DragStateError(f'Drag of {self.dragged_id} already in progress.')
        self.state = DragState.DRAGGING
        self.dragged_id = dragged_id
        self.start_point = (x, y)
        self.pointer = (x, y)
        self.hover = None
        logger.debug('drag start %s at (%s, %s)', dragged_id, x, y)

    def move(self, forest: Forest, x: float, y: float,
             candidates: Iterable[HoverCandidate]) -> Optional[HoverTarget]:
        """Recompute the hover target for a pointer position."""
        if not self.active or self.dragged_id is None:
            raise DragStateError('Pointer move without an active drag.')
        self.pointer = (x, y)
        hit = hit_test(candidates, x, y)
        if hit is None:
            self.hover = None
        else:
            candidate, fraction = hit
            self.hover = self.policy.hover(forest, self.dragged_id, candidate.task_id, fraction, self.dx)
        return self.hover

    def drop(self, board: Any) -> Optional[Mutation]:
        """Apply the resolved mutation, if any, and return to Idle.

        The session is reset even when the board rejects the mutation; the
        board's error propagates to the caller.
        """
        if not self.active or self.dragged_id is None:
            raise DragStateError('Drop without an active drag.')
        try:
            mutation = self.policy.resolve(board.groups, self.dragged_id, self.hover)
            if mutation is not None:
                logger.debug('drop %s -> %s%s', self.dragged_id, mutation.operation, mutation.args)
                mutation.apply(board)
            return mutation
        finally:
            self.cancel()

    def cancel(self) -> None:
        self.state = DragState.IDLE
        self.dragged_id = None
        self.hover = None
        self.start_point = (0.0, 0.0)
        self.pointer = (0.0, 0.0)
