from app.models.user import User
from app.models.verification_token import VerificationToken, TokenType
from app.models.backup_code import BackupCode
