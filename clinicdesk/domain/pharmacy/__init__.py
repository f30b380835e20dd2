"""Pharmacy domain - medication inventory"""

from .router import router

__all__ = ["router"]
