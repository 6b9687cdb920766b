"""Board logic: holds the forest of lanes and applies task tree mutations.

Every mutation validates its inputs before touching the forest and then
performs a single splice sequence, so a failing call never leaves a partial
change behind. Readers that must not observe later mutations take a
snapshot() copy.

Index policy: reorder and move indices are clamped into the valid range of
the sequence they address instead of being rejected.
"""
from __future__ import annotations
import copy
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple
from errors import CycleError, DuplicateId, NotFound
from models import STATUSES, Forest, Task, TaskGroup
from traversal import (TaskLocation, count_descendants, find_group, find_in_tasks,
                       find_task_by_id, find_task_location, is_descendant_of, iter_tasks,
                       owner_list)

logger = logging.getLogger(__name__)

LANE_ORDER: Tuple[str, ...] = ("blocked", "todo", "in_progress", "done")
LANE_NAMES: Dict[str, str] = {
    "blocked": "BLOQUEADO",
    "todo": "A FAZER",
    "in_progress": "EM PROGRESSO",
    "done": "CONCLUÍDO",
}
UPDATABLE_FIELDS = frozenset({'title', 'status', 'is_expanded'})

IdFactory = Callable[[], str]
Clock = Callable[[], str]


def _uuid_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now().isoformat()


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def default_forest(id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None) -> Forest:
    """Four fixed lanes; the blocked lane carries a seeded parent task with
    two subtasks. Lane ids equal their status key."""
    new_id = id_factory or _uuid_id
    stamp = (clock or _now)()
    seed = Task(id=new_id(), title='Task (matriz)', status='blocked', is_expanded=True,
                created_at=stamp)
    for title in ('Subtask 1', 'Subtask 2'):
        seed.subtasks.append(Task(id=new_id(), title=title, created_at=stamp))
    forest: Forest = []
    for status in LANE_ORDER:
        forest.append(TaskGroup(id=status, name=LANE_NAMES[status], status=status))
    forest[0].tasks.append(seed)
    return forest


class Board:
    def __init__(self, forest: Optional[Forest] = None,
                 id_factory: Optional[IdFactory] = None,
                 clock: Optional[Clock] = None):
        self._new_id: IdFactory = id_factory or _uuid_id
        self._clock: Clock = clock or _now
        self.groups: Forest = forest if forest is not None else default_forest(self._new_id, self._clock)
        self._check_unique_ids()

    # -------------------- loading / serialization --------------------
    @classmethod
    def from_data(cls, data: Iterable[Mapping[str, Any]], **kwargs: Any) -> "Board":
        """Build a board from the persisted list of group dicts.

        Raises ValueError for malformed records and DuplicateId when ids
        collide.
        """
        return cls([TaskGroup.from_dict(raw) for raw in data], **kwargs)

    def to_data(self) -> List[Dict[str, Any]]:
        return [group.to_dict() for group in self.groups]

    def snapshot(self) -> Forest:
        """Deep copy of the forest; later mutations do not affect it."""
        return copy.deepcopy(self.groups)

    def _check_unique_ids(self) -> None:
        group_ids: Set[str] = set()
        task_ids: Set[str] = set()
        for group in self.groups:
            if group.id in group_ids:
                raise DuplicateId(f'Duplicate group id {group.id}')
            group_ids.add(group.id)
            for task, _ in iter_tasks(group.tasks):
                if task.id in task_ids:
                    raise DuplicateId(f'Duplicate task id {task.id}')
                task_ids.add(task.id)

    # -------------------- id management --------------------
    def _allocate_id(self) -> str:
        nid = self._new_id()
        if find_task_by_id(self.groups, nid) is not None:
            raise DuplicateId(f'Id factory returned existing id {nid}')
        return nid

    # -------------------- queries --------------------
    def get_group(self, group_id: str) -> Optional[TaskGroup]:
        return find_group(self.groups, group_id)

    def group_for_status(self, status: str) -> Optional[TaskGroup]:
        for group in self.groups:
            if group.status == status:
                return group
        return None

    def find_task_by_id(self, task_id: str) -> Optional[Task]:
        return find_task_by_id(self.groups, task_id)

    def find_task_location(self, task_id: str) -> Optional[TaskLocation]:
        return find_task_location(self.groups, task_id)

    @staticmethod
    def get_subtask_count(task: Task) -> int:
        """Number of descendants at any depth."""
        return count_descendants(task)

    def _require_group(self, group_id: str) -> TaskGroup:
        group = self.get_group(group_id)
        if group is None:
            raise NotFound(f'Group {group_id} not found.')
        return group

    def _require_task(self, group: TaskGroup, task_id: str) -> Task:
        task = find_in_tasks(group.tasks, task_id)
        if task is None:
            raise NotFound(f'Task {task_id} not found in {group.id}.')
        return task

    # -------------------- task operations --------------------
    def _new_task(self, title: str) -> Task:
        return Task(id=self._allocate_id(), title=title, created_at=self._clock())

    def add_task(self, group_id: str, title: str) -> Task:
        """Append a new collapsed todo task to the end of the lane."""
        group = self._require_group(group_id)
        task = self._new_task(title)
        group.tasks.append(task)
        logger.debug('add_task %s -> %s', task.id, group_id)
        return task

    def add_subtask(self, group_id: str, parent_id: str, title: str) -> Task:
        """Append a new task under parent_id and expand the parent."""
        parent = self._require_task(self._require_group(group_id), parent_id)
        task = self._new_task(title)
        parent.subtasks.append(task)
        parent.is_expanded = True
        logger.debug('add_subtask %s -> %s', task.id, parent_id)
        return task

    def update_task(self, group_id: str, task_id: str, **changes: Any) -> bool:
        """Merge title/status/is_expanded into the task. Empty update is a no-op."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f'Unknown task fields: {", ".join(sorted(unknown))}')
        if not changes:
            return False
        if 'status' in changes and changes['status'] not in STATUSES:
            raise ValueError(f'Invalid status: {changes["status"]!r}')
        task = self._require_task(self._require_group(group_id), task_id)
        for name, value in changes.items():
            setattr(task, name, value)
        logger.debug('update_task %s %s', task_id, sorted(changes))
        return True

    def delete_task(self, group_id: str, task_id: str) -> bool:
        """Remove the task and its subtree. Unknown ids are ignored."""
        group = self.get_group(group_id)
        location = find_task_location([group], task_id) if group else None
        if location is None:
            return False
        del owner_list(self.groups, location)[location.index]
        logger.debug('delete_task %s from %s', task_id, group_id)
        return True

    def toggle_task_expand(self, group_id: str, task_id: str) -> bool:
        group = self.get_group(group_id)
        task = find_in_tasks(group.tasks, task_id) if group else None
        if task is None:
            return False
        task.is_expanded = not task.is_expanded
        return True

    def toggle_group_expand(self, group_id: str) -> bool:
        group = self.get_group(group_id)
        if group is None:
            return False
        group.is_expanded = not group.is_expanded
        return True

    # -------------------- ordering --------------------
    @staticmethod
    def _splice(seq: List[Task], from_index: int, to_index: int) -> bool:
        """Remove at from_index, then insert at to_index of the shrunk list."""
        if not seq:
            return False
        src = _clamp(from_index, 0, len(seq) - 1)
        item = seq.pop(src)
        dst = _clamp(to_index, 0, len(seq))
        seq.insert(dst, item)
        return src != dst

    def reorder_tasks(self, group_id: str, from_index: int, to_index: int) -> bool:
        group = self.get_group(group_id)
        if group is None:
            logger.info('reorder_tasks: unknown group %s', group_id)
            return False
        return self._splice(group.tasks, from_index, to_index)

    def reorder_subtasks(self, group_id: str, parent_id: str, from_index: int, to_index: int) -> bool:
        group = self.get_group(group_id)
        parent = find_in_tasks(group.tasks, parent_id) if group else None
        if parent is None:
            logger.info('reorder_subtasks: %s not found in %s', parent_id, group_id)
            return False
        return self._splice(parent.subtasks, from_index, to_index)

    # -------------------- moves --------------------
    def _detach(self, location: TaskLocation) -> Task:
        return owner_list(self.groups, location).pop(location.index)

    def move_task_to_group(self, task_id: str, group_id: str, index: int) -> bool:
        """Detach the task (with its subtree) from wherever it lives and
        insert it as a root task of group_id."""
        location = self.find_task_location(task_id)
        if location is None:
            logger.info('move_task_to_group: %s not found', task_id)
            return False
        target = self._require_group(group_id)
        task = self._detach(location)
        target.tasks.insert(_clamp(index, 0, len(target.tasks)), task)
        logger.debug('move_task_to_group %s -> %s[%d]', task_id, group_id, index)
        return True

    def move_task_to_subtask(self, task_id: str, parent_id: str, index: int) -> bool:
        """Detach the task and insert it under parent_id, expanding the parent.

        Raises CycleError when parent_id is the task itself or lies inside
        its subtree.
        """
        location = self.find_task_location(task_id)
        if location is None:
            logger.info('move_task_to_subtask: %s not found', task_id)
            return False
        if parent_id == task_id or is_descendant_of(self.groups, parent_id, task_id):
            logger.info('move_task_to_subtask: rejected cycle %s -> %s', task_id, parent_id)
            raise CycleError(f'Cannot nest task {task_id} under its own subtree.')
        parent = self.find_task_by_id(parent_id)
        if parent is None:
            raise NotFound(f'Task {parent_id} not found.')
        task = self._detach(location)
        parent.subtasks.insert(_clamp(index, 0, len(parent.subtasks)), task)
        parent.is_expanded = True
        logger.debug('move_task_to_subtask %s -> %s[%d]', task_id, parent_id, index)
        return True

    def __str__(self) -> str:
        return ', '.join(f'{group.name}: {len(group.tasks)} tasks' for group in self.groups)
