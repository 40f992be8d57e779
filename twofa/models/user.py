import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from twofa.core.db import Base

class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # 2FA: solo SecretProvisioner / OtpVerifier escriben estas columnas (vía TwoFactorStore)
    totp_secret: Mapped[str | None] = mapped_column(String(64), nullable=True)
    totp_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # último time-step aceptado; un código de ese step o anterior es replay
    totp_last_timecode: Mapped[int | None] = mapped_column(Integer, nullable=True)
    totp_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
