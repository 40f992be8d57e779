from pydantic import BaseModel, ConfigDict, EmailStr, Field

class SetupStatusOut(BaseModel):
    setup_required: bool

class SetupIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=12)

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    otp: str | None = None   # <-- requerido si la cuenta tiene 2FA habilitado

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    is_active: bool
    totp_verified: bool

# --- 2FA ---
class TwoFASetupIn(BaseModel):
    password: str | None = None   # re-autenticación al reemplazar un 2FA ya habilitado

class TwoFASetupOut(BaseModel):
    secret: str
    otpauth_url: str
    qr_base64_png: str | None = None

class TwoFAVerifyIn(BaseModel):
    otp: str = Field(..., pattern=r"^[0-9]{6}$")

class TwoFADisableIn(BaseModel):
    otp: str | None = None

class OkOut(BaseModel):
    ok: bool = True
