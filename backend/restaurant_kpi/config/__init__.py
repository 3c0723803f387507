"""Configuration package for the restaurant KPI service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
