from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_two_factor_service
from app.core.security import qr_png_base64_from_text
from app.models.user import User
from app.schemas.two_factor import (
    BackupCodeIn, BackupCodeRedeemOut, BackupCodesOut, MessageOut, TwoFactorCodeIn,
    TwoFactorConfirmIn, TwoFactorSetupOut, TwoFactorStatusOut, TwoFactorVerifyOut,
)
from app.services.two_factor import TwoFactorService

router = APIRouter(prefix="/2fa", tags=["two-factor"])

# los TwoFactorError se traducen a HTTP en el handler de app.main

@router.post("/setup", response_model=TwoFactorSetupOut)
async def twofa_setup(
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    result = await service.initiate_setup(current_user.id)
    return TwoFactorSetupOut(
        secret=result.secret,
        otpauth_url=result.otpauth_url,
        setup_token=result.setup_token,
        backup_codes=result.backup_codes,
        expires_at=result.expires_at,
        qr_base64_png=qr_png_base64_from_text(result.otpauth_url),
    )

@router.post("/confirm", response_model=MessageOut)
async def twofa_confirm(
    body: TwoFactorConfirmIn,
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    await service.confirm_setup(current_user.id, body.setup_token, body.code)
    return MessageOut(message="Two-factor authentication enabled successfully")

@router.delete("", response_model=MessageOut)
async def twofa_disable(
    body: TwoFactorCodeIn,
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    await service.disable(current_user.id, body.code)
    return MessageOut(message="Two-factor authentication disabled")

@router.post("/verify", response_model=TwoFactorVerifyOut)
async def twofa_verify(
    body: TwoFactorCodeIn,
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    await service.verify(current_user.id, body.code)
    return TwoFactorVerifyOut()

@router.post("/backup-codes", response_model=BackupCodesOut)
async def twofa_regenerate_backup_codes(
    body: TwoFactorCodeIn,
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    codes = await service.regenerate_backup_codes(current_user.id, body.code)
    return BackupCodesOut(backup_codes=codes)

@router.post("/backup-codes/redeem", response_model=BackupCodeRedeemOut)
async def twofa_redeem_backup_code(
    body: BackupCodeIn,
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    remaining = await service.redeem_backup_code(current_user.id, body.code)
    return BackupCodeRedeemOut(remaining=remaining)

@router.get("/status", response_model=TwoFactorStatusOut)
async def twofa_status(
    current_user: User = Depends(get_current_user),
    service: TwoFactorService = Depends(get_two_factor_service),
):
    status = await service.get_status(current_user.id)
    return TwoFactorStatusOut(
        enabled=status.enabled,
        enabled_at=status.enabled_at,
        backup_codes_remaining=status.backup_codes_remaining,
    )
