# src/agora/services/__init__.py
"""Business logic services for the Agora application."""

from .auth import AuthService
from .content import ContentService, PhotoUpload
from .profiles import ProfileService
from .social_graph import SocialGraphService
from .storage import ObjectStore, S3ObjectStore
from .token_blacklist import TokenBlacklist
from .voting import VotingService

__all__ = [
    "AuthService",
    "ContentService",
    "PhotoUpload",
    "ProfileService",
    "SocialGraphService",
    "ObjectStore",
    "S3ObjectStore",
    "TokenBlacklist",
    "VotingService",
]
