"""
In-memory Repository Implementations.

For testing and local development (USER_REPOSITORY=memory).
Data is lost on process restart.
"""

from .user import InMemoryUserRepository

__all__ = ["InMemoryUserRepository"]
