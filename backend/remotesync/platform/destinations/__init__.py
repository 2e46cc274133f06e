"""Destinations module.

Contains the adapters the sync workflow writes into.

Key Classes:
- BaseDestination: Abstract base class for all destinations
- GitHubDestination: Repository contents API (base64 payloads, sha revisions)
- GoogleDriveDestination: Drive files API (search by name, multipart uploads)
"""

from ._base import BaseDestination
from .github import GitHubDestination
from .google_drive import GoogleDriveDestination

__all__ = [
    "BaseDestination",
    "GitHubDestination",
    "GoogleDriveDestination",
]
