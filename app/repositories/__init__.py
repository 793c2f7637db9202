"""
Stores sobre la sesión del request. No hacen commit: el servicio decide
dónde termina la transacción.
"""

from .users import UserStore
from .tokens import VerificationTokenStore
from .backup_codes import BackupCodeStore

__all__ = [
    "UserStore",
    "VerificationTokenStore",
    "BackupCodeStore",
]
