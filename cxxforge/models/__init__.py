"""Shared model base classes."""

from .base import CxxforgeBaseModel


__all__ = ["CxxforgeBaseModel"]
