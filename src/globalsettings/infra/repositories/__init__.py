"""Concrete repository implementations using SQLModel."""

from .setting import SQLModelSettingRepository

__all__ = [
    "SQLModelSettingRepository",
]
