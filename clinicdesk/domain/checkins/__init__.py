"""Check-in domain - reception waiting queue"""

from .router import router

__all__ = ["router"]
