"""Agora: social graph, visibility-aware content and reputation backend."""

__version__ = "0.1.0"
