from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from twofa.core.app_exceptions import app_error_from, raise_app_error
from twofa.core.config import settings
from twofa.core.db import get_db
from twofa.core.errors import InvalidCode, TwoFactorError
from twofa.core.logging import get_logger
from twofa.core.security import hash_password, verify_password, create_access_token, qr_png_base64_from_text
from twofa.models.user import User
from twofa.schemas.auth import (
    SetupStatusOut, SetupIn, LoginIn, TokenOut, UserOut,
    TwoFASetupIn, TwoFASetupOut, TwoFAVerifyIn, TwoFADisableIn, OkOut,
)
from twofa.api.deps import get_current_user, get_provisioner, get_verifier
from twofa.services.audit import write_audit
from twofa.services.provisioner import SecretProvisioner
from twofa.services.store import TwoFactorState
from twofa.services.verifier import OtpVerifier

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def _check_code(verifier: OtpVerifier, account_id: str, otp: str):
    """Run the verifier and turn any failure into the generic HTTP error."""
    try:
        result = await verifier.verify(account_id, otp)
        if not result.ok:
            raise InvalidCode()
        return result
    except TwoFactorError as exc:
        raise app_error_from(exc) from exc


# ---------- PRIMER ADMIN ----------
@router.get("/setup", response_model=SetupStatusOut)
async def setup_status(db: AsyncSession = Depends(get_db)):
    count = await db.scalar(select(func.count()).select_from(User))
    return SetupStatusOut(setup_required=count == 0)

@router.post("/setup", response_model=UserOut, status_code=201)
async def setup(payload: SetupIn, db: AsyncSession = Depends(get_db)):
    count = await db.scalar(select(func.count()).select_from(User))
    if count:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Setup already completed")

    email = payload.email.lower()
    if settings.ADMIN_EMAIL and email != settings.ADMIN_EMAIL.lower():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email does not match the expected admin email")

    user = User(email=email, hashed_password=hash_password(payload.password), totp_verified=False)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await write_audit(db, user.id, "auth.setup.complete", target=f"user:{user.id}", meta={"email": email})
    logger.info("Admin account created", extra={"account_id": user.id})
    return user

@router.post("/login", response_model=TokenOut)
async def login(
    payload: LoginIn,
    db: AsyncSession = Depends(get_db),
    verifier: OtpVerifier = Depends(get_verifier),
):
    result = await db.execute(select(User).where(User.email == payload.email.lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User inactive")

    # el store puede hacer rollback (expira el ORM); copiamos el id antes
    account_id = user.id
    # si 2FA está habilitado, el OTP es obligatorio
    if user.totp_verified:
        if not payload.otp:
            raise_app_error(status.HTTP_401_UNAUTHORIZED, "OTP_REQUIRED", "A one-time code is required for this account")
        await _check_code(verifier, account_id, payload.otp)

    return TokenOut(access_token=create_access_token(subject=account_id))

# ---------- 2FA FLOW ----------
@router.post("/2fa/setup", response_model=TwoFASetupOut)
async def twofa_setup(
    body: TwoFASetupIn | None = None,
    current_user: User = Depends(get_current_user),
    provisioner: SecretProvisioner = Depends(get_provisioner),
):
    # reemplazar un 2FA ya habilitado exige volver a ingresar la contraseña
    if current_user.totp_verified and settings.TOTP_REENROLL_REQUIRES_PASSWORD:
        password = body.password if body else None
        if not password or not verify_password(password, current_user.hashed_password):
            raise_app_error(status.HTTP_403_FORBIDDEN, "REAUTH_REQUIRED",
                            "Password confirmation is required to replace an enabled authenticator")

    try:
        provisioned = await provisioner.enroll(current_user.id, current_user.email)
    except TwoFactorError as exc:
        raise app_error_from(exc) from exc

    return TwoFASetupOut(
        secret=provisioned.secret,
        otpauth_url=provisioned.provisioning_uri,
        qr_base64_png=qr_png_base64_from_text(provisioned.provisioning_uri),
    )

@router.post("/2fa/enable", response_model=OkOut)
async def twofa_enable(
    body: TwoFAVerifyIn,
    current_user: User = Depends(get_current_user),
    verifier: OtpVerifier = Depends(get_verifier),
    db: AsyncSession = Depends(get_db),
):
    account_id = current_user.id
    result = await _check_code(verifier, account_id, body.otp)
    if result.newly_enabled:
        await write_audit(db, account_id, "auth.2fa.enabled", target=f"user:{account_id}")
    return OkOut()

@router.post("/2fa/disable", response_model=OkOut)
async def twofa_disable(
    body: TwoFADisableIn,
    current_user: User = Depends(get_current_user),
    provisioner: SecretProvisioner = Depends(get_provisioner),
    verifier: OtpVerifier = Depends(get_verifier),
    db: AsyncSession = Depends(get_db),
):
    account_id = current_user.id
    try:
        record = await provisioner.store.get(account_id)
    except TwoFactorError as exc:
        raise app_error_from(exc) from exc

    # con 2FA habilitado, deshabilitarlo requiere un OTP válido
    if record.state is TwoFactorState.ENABLED:
        if not body.otp:
            raise_app_error(status.HTTP_401_UNAUTHORIZED, "OTP_REQUIRED", "A one-time code is required to disable 2FA")
        await _check_code(verifier, account_id, body.otp)

    try:
        await provisioner.disable(account_id)
    except TwoFactorError as exc:
        raise app_error_from(exc) from exc

    await write_audit(db, account_id, "auth.2fa.disabled", target=f"user:{account_id}",
                      meta={"previous_state": record.state.value})
    return OkOut()


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
