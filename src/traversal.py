"""Read-only lookups over a forest snapshot.

Nothing here mutates its arguments. Every search is a plain depth-first
walk, O(tree size); boards stay in the tens-to-hundreds of nodes so no
index is cached between calls.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple
from models import Forest, Task, TaskGroup


@dataclass(frozen=True)
class TaskLocation:
    """Where a task sits: owning group, immediate parent (None for roots),
    index within the owning sequence and nesting depth (0 for roots)."""
    group_id: str
    parent_id: Optional[str]
    index: int
    depth: int


def iter_tasks(tasks: Sequence[Task], depth: int = 0) -> Iterator[Tuple[Task, int]]:
    """Yield (task, depth) pairs depth-first, parents before children."""
    for task in tasks:
        yield task, depth
        yield from iter_tasks(task.subtasks, depth + 1)


def find_group(forest: Forest, group_id: str) -> Optional[TaskGroup]:
    for group in forest:
        if group.id == group_id:
            return group
    return None


def find_task_by_id(forest: Forest, task_id: str) -> Optional[Task]:
    for group in forest:
        found = find_in_tasks(group.tasks, task_id)
        if found is not None:
            return found
    return None


def find_in_tasks(tasks: Sequence[Task], task_id: str) -> Optional[Task]:
    for task, _ in iter_tasks(tasks):
        if task.id == task_id:
            return task
    return None


def _locate(tasks: Sequence[Task], task_id: str, parent: Optional[Task],
            depth: int) -> Optional[Tuple[Optional[Task], int, int]]:
    for index, task in enumerate(tasks):
        if task.id == task_id:
            return parent, index, depth
        found = _locate(task.subtasks, task_id, task, depth + 1)
        if found is not None:
            return found
    return None


def find_task_location(forest: Forest, task_id: str) -> Optional[TaskLocation]:
    for group in forest:
        found = _locate(group.tasks, task_id, None, 0)
        if found is not None:
            parent, index, depth = found
            return TaskLocation(
                group_id=group.id,
                parent_id=parent.id if parent is not None else None,
                index=index,
                depth=depth,
            )
    return None


def owner_list(forest: Forest, location: TaskLocation) -> List[Task]:
    """Return the list that owns the task at `location` (a group's root
    sequence or a parent's subtasks)."""
    group = find_group(forest, location.group_id)
    if group is None:
        raise LookupError(location.group_id)
    if location.parent_id is None:
        return group.tasks
    parent = find_in_tasks(group.tasks, location.parent_id)
    if parent is None:
        raise LookupError(location.parent_id)
    return parent.subtasks


def root_ancestor_index(forest: Forest, task_id: str) -> Optional[int]:
    """Index, within its group's root sequence, of the root task whose
    subtree contains `task_id` (the task's own index if it is a root)."""
    for group in forest:
        for index, root in enumerate(group.tasks):
            if find_in_tasks([root], task_id) is not None:
                return index
    return None


def is_descendant_of(forest: Forest, candidate_id: str, ancestor_id: str) -> bool:
    """True iff candidate_id appears strictly below ancestor_id."""
    ancestor = find_task_by_id(forest, ancestor_id)
    if ancestor is None:
        return False
    return find_in_tasks(ancestor.subtasks, candidate_id) is not None


def max_subtree_depth(task: Task) -> int:
    if not task.subtasks:
        return 0
    return 1 + max(max_subtree_depth(child) for child in task.subtasks)


def count_descendants(task: Task) -> int:
    count = len(task.subtasks)
    for child in task.subtasks:
        count += count_descendants(child)
    return count
