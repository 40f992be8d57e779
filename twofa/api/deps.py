from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from twofa.core.db import get_db
from twofa.core.security import decode_access_token
from twofa.models.user import User
from twofa.services.provisioner import SecretProvisioner
from twofa.services.store import SqlAlchemyTwoFactorStore, TwoFactorStore
from twofa.services.verifier import OtpVerifier


bearer = HTTPBearer(auto_error=True)

# --- identidad: (account_id, email) a partir del bearer token ---
async def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    try:
        payload = decode_access_token(creds.credentials)
        sub: str | None = payload.get("sub")
        if not sub:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    result = await db.execute(select(User).where(User.id == sub))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User inactive")

    return user

# --- core 2FA (inyectado por request) ---
def get_twofa_store(db: AsyncSession = Depends(get_db)) -> TwoFactorStore:
    return SqlAlchemyTwoFactorStore(db)

def get_provisioner(store: TwoFactorStore = Depends(get_twofa_store)) -> SecretProvisioner:
    return SecretProvisioner(store)

def get_verifier(store: TwoFactorStore = Depends(get_twofa_store)) -> OtpVerifier:
    return OtpVerifier(store)
