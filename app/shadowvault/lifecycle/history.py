"""Lifecycle history recording.

Records lifecycle task outcomes to the shared history file, giving an
audit trail for retirements, renames and crushes.
"""

from shadowvault.core.state import StateManager
from shadowvault.lifecycle.models import LifecycleResult, TaskDescriptor
from shadowvault.models.history import (
    HistoryActionType,
    HistoryEntry,
    HistoryItem,
    PathRole,
    create_history_entry,
)


def record_lifecycle_result(
    task: TaskDescriptor,
    result: LifecycleResult,
    command: str = "shadowvault",
    state: StateManager | None = None,
) -> HistoryEntry:
    """Record the outcome of a lifecycle task to history.

    Failed tasks are recorded too: a crush that stopped part way still
    destroyed the backups listed in ``result.swept``.

    Args:
        task: The executed task.
        result: Its outcome.
        command: Command that triggered the task.
        state: StateManager to write to. If None, uses the default journal.

    Returns:
        The recorded entry.

    Raises:
        RuntimeError: If the state directory cannot be created.
        OSError: If the history file cannot be written.
    """
    items = [HistoryItem(path=task.path, role=PathRole.ORIGIN)]
    if task.new_path:
        items.append(HistoryItem(path=task.new_path, role=PathRole.DESTINATION))
    if result.backup_path:
        items.append(HistoryItem(path=result.backup_path, role=PathRole.BACKUP))
    items.extend(HistoryItem(path=p, role=PathRole.BACKUP) for p in result.swept)

    metadata: dict[str, object] = {"command": command, "target": task.target.name}
    if task.size:
        metadata["size"] = task.size
    if result.error:
        metadata["error"] = result.error
        metadata["error_kind"] = result.error_kind

    entry = create_history_entry(
        action_type=HistoryActionType(task.operation.value),
        items=items,
        success=result.success,
        metadata=metadata,
    )

    (state or StateManager()).record_action(entry)
    return entry
