"""Repository protocol definitions for domain layer."""

from .setting import Page, SettingRepository

__all__ = [
    "Page",
    "SettingRepository",
]
