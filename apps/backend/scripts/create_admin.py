"""
Name: Admin Bootstrap Script

Responsibilities:
  - Bootstrap an account (ADMIN by default) against PostgreSQL
  - Go through CreateUserUseCase so rules match POST /api/users
  - Do nothing when the email is already registered

Usage:
  DATABASE_URL=... python scripts/create_admin.py --email admin@corp.io
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from app.application.usecases.users import (  # noqa: E402
    CreateUserUseCase,
    NewAccountInput,
)
from app.crosscutting.exceptions import AppError, ValidationError  # noqa: E402
from app.identity.auth_users import hash_password  # noqa: E402
from app.identity.users import UserRole  # noqa: E402
from app.infrastructure.db.pool import close_pool, init_pool  # noqa: E402
from app.infrastructure.repositories import PostgresUserRepository  # noqa: E402


def _ask(label: str, *, secret: bool = False) -> str:
    value = getpass.getpass(f"{label}: ") if secret else input(f"{label}: ").strip()
    if not value:
        raise SystemExit(f"{label} cannot be empty.")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create_admin",
        description="Bootstrap a user account; no-op if the email exists.",
    )
    parser.add_argument("--email", help="account email (prompted if omitted)")
    parser.add_argument("--name", default="Admin", help="display name")
    parser.add_argument(
        "--password", help="account password (prompted without echo if omitted)"
    )
    parser.add_argument(
        "--role",
        type=UserRole,
        default=UserRole.ADMIN,
        choices=list(UserRole),
        help="account role",
    )
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="PostgreSQL DSN (default: $DATABASE_URL)",
    )
    return parser


def create_user(
    repository,
    *,
    email: str,
    name: str,
    password: str,
    confirm_password: str,
    role: UserRole,
) -> int:
    """Crea el usuario si no existe. Devuelve exit code."""
    existing = repository.get_user_by_email(email)
    if existing is not None:
        print(
            "User already exists: "
            f"id={existing.id} email={existing.email} role={existing.role.value}"
        )
        return 0

    use_case = CreateUserUseCase(repository, hash_password)
    try:
        user = use_case.execute(
            NewAccountInput(
                email=email,
                password=password,
                confirm_password=confirm_password,
                name=name,
                role=role,
            )
        )
    except ValidationError as exc:
        for error in exc.errors:
            print(f"{error.field}: {error.message}", file=sys.stderr)
        return 1
    except AppError as exc:
        print(exc.message, file=sys.stderr)
        return 1

    print(f"Created user: id={user.id} email={user.email} role={user.role.value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if not args.database_url:
        print("DATABASE_URL (or --database-url) is required.", file=sys.stderr)
        return 1

    email = (args.email or "").strip() or _ask("Email")
    if args.password:
        password = confirm = args.password
    else:
        password = _ask("Password", secret=True)
        confirm = getpass.getpass("Confirm password: ")

    init_pool(database_url=args.database_url, min_size=1, max_size=1)
    try:
        return create_user(
            PostgresUserRepository(),
            email=email,
            name=args.name,
            password=password,
            confirm_password=confirm,
            role=args.role,
        )
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
