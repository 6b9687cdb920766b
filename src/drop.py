"""Drop resolution: turn a hovered row and pointer offsets into one mutation.

Two interchangeable policies share the DropPolicy interface:

- VerticalFractionPolicy (default): the pointer's vertical fraction within
  the hovered row selects before (< 0.33), inside (< 0.66) or after.
- HorizontalOffsetPolicy: rows split at 0.5 into before/after, and a
  horizontal drag of INDENT_THRESHOLD pixels or more indents a root task
  under its preceding sibling or outdents a subtask next to its root.

A session uses exactly one policy. Both reject targets inside the dragged
subtree and targets that would nest deeper than MAX_DEPTH.

resolve_list_drop covers the container/index style of drop (a row released
into a lane or a subtask list at a slot index) used by the CLI place command.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type
from models import Forest, Task
from traversal import (TaskLocation, find_group, find_task_by_id, find_task_location,
                       is_descendant_of, max_subtree_depth, root_ancestor_index)

logger = logging.getLogger(__name__)

MAX_DEPTH = 2
BEFORE_LIMIT = 0.33
AFTER_LIMIT = 0.66
INDENT_THRESHOLD = 28
SUBTASKS_PREFIX = 'subtasks-'


class DropPosition(Enum):
    BEFORE = 'before'
    INSIDE = 'inside'
    AFTER = 'after'


@dataclass(frozen=True)
class HoverTarget:
    task_id: str
    position: DropPosition


@dataclass(frozen=True)
class Mutation:
    """One Board method call, e.g. Mutation('reorder_tasks', ('todo', 0, 2))."""
    operation: str
    args: Tuple[Any, ...]

    def apply(self, board: Any) -> Any:
        return getattr(board, self.operation)(*self.args)


def position_for_fraction(fraction: float) -> DropPosition:
    if fraction < BEFORE_LIMIT:
        return DropPosition.BEFORE
    if fraction < AFTER_LIMIT:
        return DropPosition.INSIDE
    return DropPosition.AFTER


def fits_depth(location: TaskLocation, dragged: Task, position: DropPosition) -> bool:
    """Would the dragged subtree stay within MAX_DEPTH at this target?"""
    base = location.depth + 1 if position is DropPosition.INSIDE else location.depth
    return base + max_subtree_depth(dragged) <= MAX_DEPTH


def _in_dragged_subtree(forest: Forest, task_id: str, dragged_id: str) -> bool:
    return task_id == dragged_id or is_descendant_of(forest, task_id, dragged_id)


class DropPolicy:
    """Strategy interface shared by both drag policies."""
    name = ''

    def hover(self, forest: Forest, dragged_id: str, task_id: Optional[str],
              fraction: float, dx: float = 0.0) -> Optional[HoverTarget]:
        raise NotImplementedError

    def _inside_index(self, hovered: Task) -> int:
        return 0

    def resolve(self, forest: Forest, dragged_id: str,
                target: Optional[HoverTarget]) -> Optional[Mutation]:
        """Translate a resolved hover target into the mutation to apply on drop."""
        if target is None:
            return None
        hovered = find_task_by_id(forest, target.task_id)
        location = find_task_location(forest, target.task_id)
        source = find_task_location(forest, dragged_id)
        if hovered is None or location is None or source is None:
            return None
        if target.position is DropPosition.INSIDE:
            return Mutation('move_task_to_subtask',
                            (dragged_id, target.task_id, self._inside_index(hovered)))
        index = location.index + (1 if target.position is DropPosition.AFTER else 0)
        # The move detaches first; a later slot in the same list shifts down.
        same_list = (source.group_id, source.parent_id) == (location.group_id, location.parent_id)
        if same_list and source.index < index:
            index -= 1
        if location.parent_id is None:
            return Mutation('move_task_to_group', (dragged_id, location.group_id, index))
        return Mutation('move_task_to_subtask', (dragged_id, location.parent_id, index))

    def _checked(self, forest: Forest, dragged: Task, task_id: str,
                 position: DropPosition) -> Optional[HoverTarget]:
        if _in_dragged_subtree(forest, task_id, dragged.id):
            return None
        location = find_task_location(forest, task_id)
        if location is None or not fits_depth(location, dragged, position):
            return None
        return HoverTarget(task_id, position)


class VerticalFractionPolicy(DropPolicy):
    name = 'vertical'

    def hover(self, forest: Forest, dragged_id: str, task_id: Optional[str],
              fraction: float, dx: float = 0.0) -> Optional[HoverTarget]:
        dragged = find_task_by_id(forest, dragged_id)
        if dragged is None or task_id is None:
            return None
        return self._checked(forest, dragged, task_id, position_for_fraction(fraction))


class HorizontalOffsetPolicy(DropPolicy):
    name = 'horizontal'

    def __init__(self, threshold: float = INDENT_THRESHOLD):
        self.threshold = threshold

    def _inside_index(self, hovered: Task) -> int:
        return len(hovered.subtasks)

    def hover(self, forest: Forest, dragged_id: str, task_id: Optional[str],
              fraction: float, dx: float = 0.0) -> Optional[HoverTarget]:
        dragged = find_task_by_id(forest, dragged_id)
        source = find_task_location(forest, dragged_id)
        if dragged is None or source is None or task_id is None:
            return None
        if dx >= self.threshold and source.parent_id is None and source.index > 0:
            group = find_group(forest, source.group_id)
            previous = group.tasks[source.index - 1]
            return self._checked(forest, dragged, previous.id, DropPosition.INSIDE)
        if dx <= -self.threshold and source.parent_id is not None:
            root_index = root_ancestor_index(forest, dragged_id)
            root = find_group(forest, source.group_id).tasks[root_index]
            return self._checked(forest, dragged, root.id, DropPosition.AFTER)
        position = DropPosition.BEFORE if fraction < 0.5 else DropPosition.AFTER
        return self._checked(forest, dragged, task_id, position)


POLICIES: Dict[str, Type[DropPolicy]] = {
    VerticalFractionPolicy.name: VerticalFractionPolicy,
    HorizontalOffsetPolicy.name: HorizontalOffsetPolicy,
}


def policy_for_name(name: str) -> DropPolicy:
    try:
        return POLICIES[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown drop policy {name!r}; expected one of {', '.join(POLICIES)}") from None


# -------------------- container/index drops --------------------
@dataclass(frozen=True)
class ListSlot:
    """A slot in a droppable list: a lane id or 'subtasks-<taskId>'."""
    container_id: str
    index: int


def subtasks_container(task_id: str) -> str:
    return SUBTASKS_PREFIX + task_id


def _container_parent(container_id: str) -> Optional[str]:
    if container_id.startswith(SUBTASKS_PREFIX):
        return container_id[len(SUBTASKS_PREFIX):]
    return None


def resolve_list_drop(forest: Forest, dragged_id: str, source: ListSlot,
                      destination: Optional[ListSlot]) -> Optional[Mutation]:
    if destination is None:
        return None
    group_ids = {group.id for group in forest}
    same_container = source.container_id == destination.container_id
    if same_container and destination.container_id in group_ids:
        if source.index == destination.index:
            return None
        return Mutation('reorder_tasks', (source.container_id, source.index, destination.index))
    if destination.container_id in group_ids:
        return Mutation('move_task_to_group', (dragged_id, destination.container_id, destination.index))
    parent_id = _container_parent(destination.container_id)
    if parent_id is None:
        logger.info('resolve_list_drop: unknown container %s', destination.container_id)
        return None
    if same_container:
        location = find_task_location(forest, parent_id)
        if location is None or source.index == destination.index:
            return None
        return Mutation('reorder_subtasks', (location.group_id, parent_id, source.index, destination.index))
    if _in_dragged_subtree(forest, parent_id, dragged_id):
        return None
    dragged = find_task_by_id(forest, dragged_id)
    parent = find_task_location(forest, parent_id)
    if dragged is None or parent is None or not fits_depth(parent, dragged, DropPosition.INSIDE):
        return None
    return Mutation('move_task_to_subtask', (dragged_id, parent_id, destination.index))


def slot_of(forest: Forest, task_id: str) -> Optional[ListSlot]:
    """The container slot a task currently occupies."""
    location = find_task_location(forest, task_id)
    if location is None:
        return None
    if location.parent_id is None:
        return ListSlot(location.group_id, location.index)
    return ListSlot(subtasks_container(location.parent_id), location.index)
