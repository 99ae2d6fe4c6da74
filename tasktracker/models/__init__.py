from .task import Task, as_utc, utcnow

# Export all models for easy importing
__all__ = ["Task", "as_utc", "utcnow"]
