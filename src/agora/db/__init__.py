# src/agora/db/__init__.py
"""Database configuration and utilities."""

from .session import SessionLocal, get_db
from .transaction import atomic

__all__ = ["get_db", "SessionLocal", "atomic"]
