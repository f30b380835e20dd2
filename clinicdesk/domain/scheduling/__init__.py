"""Scheduling domain - clinic agenda, recurring series and public booking"""

from .router import router

__all__ = ["router"]
