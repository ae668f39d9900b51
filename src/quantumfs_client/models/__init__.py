"""Data models for command payloads."""

from .accessed import PathsAccessed
