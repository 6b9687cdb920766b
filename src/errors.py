"""Error taxonomy for the task tree engine.

Every error derives from TaskTreeError so the CLI can report any engine
failure with a single except clause. Each class also subclasses the closest
builtin so callers that only know the stdlib hierarchy still catch it.
"""


class TaskTreeError(Exception):
    """Base class for engine failures."""


class NotFound(TaskTreeError, LookupError):
    """A referenced group or task id does not exist."""


class CycleError(TaskTreeError, ValueError):
    """A reparent would nest a task under itself or its own descendant."""


class OutOfRange(TaskTreeError, IndexError):
    """An index or row number lies outside the current sequence."""


class DuplicateId(TaskTreeError, ValueError):
    """Two tasks or groups in one forest share the same id."""


class PersistenceFailure(TaskTreeError, OSError):
    """Reading or writing the stored forest failed."""


class DragStateError(TaskTreeError, RuntimeError):
    """A drag gesture event arrived in a state that cannot accept it."""
