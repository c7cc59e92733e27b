"""
Data models for the sync pipeline.

Provides the validated Selector and the per-cycle Feed and Item models.
"""

from magbot.models.entities import Feed, Item, Selector

__all__ = [
    "Feed",
    "Item",
    "Selector",
]
