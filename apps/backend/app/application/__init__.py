"""
Capa de aplicación: casos de uso de cuentas (`usecases.users`) y el seed del
admin de desarrollo que corre en el arranque.
"""

from .dev_seed_admin import SeedOutcome, ensure_dev_admin

__all__ = ["SeedOutcome", "ensure_dev_admin"]
