"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define the persistence contract for credential records (port).
- Keep the application/identity layers independent from infrastructure
  (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- identity.users: User, UserRole
- infrastructure.repositories: postgres/in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.
- Email uniqueness is enforced by the implementation itself (constraint or
  lock), surfacing ConflictError; callers may pre-check for a nicer message.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- "Not found" is None / False, never an exception.
"""

from typing import List, Optional, Protocol

from ..identity.users import User, UserRole


class UserRepository(Protocol):
    """
    R: Interface for credential record persistence.

    Implementations must provide:
      - Lookup by email (authentication) and by id
      - Stable listing (created_at DESC, id DESC)
      - Creation with store-assigned numeric id
      - Partial updates that always touch updated_at
    """

    def get_user_by_email(self, email: str) -> Optional[User]:
        """R: Exact (case-sensitive) email lookup."""
        ...

    def get_user_by_id(self, user_id: int) -> Optional[User]: ...

    def list_users(self, *, limit: int = 200, offset: int = 0) -> List[User]: ...

    def create_user(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole,
        avatar: str | None = None,
    ) -> User:
        """
        R: Insert a new record.

        Raises:
            ConflictError: email already registered
        """
        ...

    def update_user(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
        role: UserRole | None = None,
        password_hash: str | None = None,
    ) -> Optional[User]:
        """
        R: Partial update (None = unchanged). Returns None if the id is absent.

        Raises:
            ConflictError: new email belongs to another record
        """
        ...

    def delete_user(self, user_id: int) -> bool:
        """R: True if a record was deleted."""
        ...

    def ping(self) -> bool:
        """R: Backend reachability (health endpoint)."""
        ...
