"""
Database models
"""
from budget_app.models.store_entry import StoreEntry

__all__ = ["StoreEntry"]
