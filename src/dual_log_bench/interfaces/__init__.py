"""Protocols for external collaborators."""

from .store import OrderedLogStore

__all__ = ["OrderedLogStore"]
