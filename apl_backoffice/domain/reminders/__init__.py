"""Reminders domain - scheduling, generation, lifecycle and notification of reminders"""

from .router import router

__all__ = ["router"]
