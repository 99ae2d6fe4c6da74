from .tasks import create_task, delete_task, get_tasks, toggle_task, update_task

__all__ = ["create_task", "delete_task", "get_tasks", "toggle_task", "update_task"]
