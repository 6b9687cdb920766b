"""Data models for the task tree.

A forest is an ordered list of TaskGroup lanes; each lane owns its root
tasks and every task owns its subtasks. Persisted keys are camelCase
(isExpanded, createdAt) so stored data stays compatible with the browser
build of the board; attribute names are snake_case.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

STATUSES: Tuple[str, ...] = ("todo", "in_progress", "blocked", "done")


def _check_status(status: str) -> str:
    if status not in STATUSES:
        raise ValueError(f"Invalid status: {status!r}")
    return status


@dataclass
class Task:
    """A node in a task tree.

    Fields:
        id: Opaque unique string (uuid4 by default).
        title: Single-line title; may be empty (rendered as untitled).
        status: One of STATUSES. Independent of the owning lane.
        is_expanded: Whether subtasks are shown.
        created_at: ISO timestamp of creation.
        subtasks: Ordered children; insertion order is significant.
    """
    id: str
    title: str
    status: str = "todo"
    is_expanded: bool = False
    created_at: Optional[str] = None
    subtasks: List["Task"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'status': self.status,
            'isExpanded': self.is_expanded,
            'createdAt': self.created_at,
            'subtasks': [child.to_dict() for child in self.subtasks],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Task":
        tid = raw.get('id')
        title = raw.get('title')
        if not isinstance(tid, str) or not tid:
            raise ValueError(f"Task record without id: {raw!r}")
        if not isinstance(title, str):
            raise ValueError(f"Task {tid} has no title")
        status = raw.get('status')
        return cls(
            id=tid,
            title=title,
            status=status if status in STATUSES else 'todo',
            is_expanded=bool(raw.get('isExpanded', False)),
            created_at=raw.get('createdAt'),
            subtasks=[cls.from_dict(child) for child in raw.get('subtasks') or []],
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, title={self.title}, subtasks={len(self.subtasks)})"


@dataclass
class TaskGroup:
    """A status lane holding root-level tasks."""
    id: str
    name: str
    status: str
    is_expanded: bool = True
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'isExpanded': self.is_expanded,
            'tasks': [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TaskGroup":
        gid = raw.get('id')
        if not isinstance(gid, str) or not gid:
            raise ValueError(f"Group record without id: {raw!r}")
        status = _check_status(str(raw.get('status')))
        return cls(
            id=gid,
            name=str(raw.get('name') or status.upper()),
            status=status,
            is_expanded=bool(raw.get('isExpanded', True)),
            tasks=[Task.from_dict(t) for t in raw.get('tasks') or []],
        )


Forest = List[TaskGroup]
