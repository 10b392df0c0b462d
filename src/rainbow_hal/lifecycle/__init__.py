from .task_registry import TaskRegistry, TaskCategory, create_tracked_task
from .periodic_task import PeriodicTask


__all__ = ["TaskRegistry", "TaskCategory", "create_tracked_task", "PeriodicTask"]
