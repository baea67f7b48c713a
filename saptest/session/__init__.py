"""
Session Module - In-memory play sessions.

A session is one player's run:
- A roster with an attached shop
- A turn counter that sets the shop tier
- A win/loss/draw record

Sessions are ephemeral and never persisted.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
