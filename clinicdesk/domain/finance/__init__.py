"""Finance domain - income and expense ledger"""

from .router import router

__all__ = ["router"]
