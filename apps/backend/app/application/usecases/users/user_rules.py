"""
===============================================================================
USER RULES (Validación de entrada compartida)
===============================================================================

Reglas:
    - email bien formado (sin normalizar mayúsculas: case-sensitive)
    - password >= 6 caracteres y igual a la confirmación
    - name >= 2 caracteres

Las usan los casos de uso (contrato de dominio) y los DTOs HTTP (para que
pydantic reporte el mismo mensaje por campo).
===============================================================================
"""

from __future__ import annotations

import re

from ....crosscutting.exceptions import FieldError, ValidationError

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2
MAX_EMAIL_LENGTH = 320

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_EMAIL = "Email inválido."
PASSWORD_TOO_SHORT = f"El password debe tener al menos {MIN_PASSWORD_LENGTH} caracteres."
PASSWORDS_DONT_MATCH = "Los passwords no coinciden."
NAME_TOO_SHORT = f"El nombre debe tener al menos {MIN_NAME_LENGTH} caracteres."


def email_error(email: str | None) -> str | None:
    if not email or len(email) > MAX_EMAIL_LENGTH or not _EMAIL_RE.match(email):
        return INVALID_EMAIL
    return None


def password_error(password: str | None) -> str | None:
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        return PASSWORD_TOO_SHORT
    return None


def name_error(name: str | None) -> str | None:
    if name is None or len(name.strip()) < MIN_NAME_LENGTH:
        return NAME_TOO_SHORT
    return None


def _raise_if_any(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError("Datos de entrada inválidos.", errors=errors)


def validate_new_account(
    *, email: str, password: str, confirm_password: str, name: str
) -> None:
    """Reglas de alta (registro y creación admin). Junta todos los errores."""
    errors: list[FieldError] = []
    for field, message in (
        ("email", email_error(email)),
        ("password", password_error(password)),
        ("name", name_error(name)),
    ):
        if message:
            errors.append(FieldError(field, message))
    if password != confirm_password:
        errors.append(FieldError("confirmPassword", PASSWORDS_DONT_MATCH))
    _raise_if_any(errors)


def validate_profile_changes(*, email: str | None, name: str | None) -> None:
    """Reglas de update parcial: solo valida lo que viene."""
    errors: list[FieldError] = []
    if email is not None and (message := email_error(email)):
        errors.append(FieldError("email", message))
    if name is not None and (message := name_error(name)):
        errors.append(FieldError("name", message))
    _raise_if_any(errors)
