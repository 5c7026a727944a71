"""
PostgreSQL Repository Implementations.

Raw parameterized SQL over a psycopg_pool ConnectionPool.
"""

from .user import PostgresUserRepository

__all__ = ["PostgresUserRepository"]
