"""SecretProvisioner: issue a fresh TOTP secret and its provisioning URI."""

from dataclasses import dataclass, field

from twofa.core.config import settings
from twofa.core.logging import get_logger
from twofa.core.totp import generate_totp_secret, provisioning_uri
from twofa.services.store import TwoFactorRecord, TwoFactorStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProvisioningResult:
    secret: str = field(repr=False)
    provisioning_uri: str = field(repr=False)


class SecretProvisioner:
    def __init__(self, store: TwoFactorStore, issuer: str | None = None):
        self.store = store
        self.issuer = issuer or settings.TOTP_ISSUER

    async def enroll(self, account_id: str, email: str) -> ProvisioningResult:
        """Replace whatever secret the account had with a new, unverified one.

        The new secret and the reset of `totp_verified` land in one write, so an
        enabled account drops straight back to pending. Raises AccountNotFound
        or StoreUnavailable; on either, the stored record is untouched.
        """
        if not email or not email.strip():
            raise ValueError("email is required to label the TOTP secret")

        previous = await self.store.get(account_id)
        secret = generate_totp_secret()
        await self.store.set(account_id, TwoFactorRecord(totp_secret=secret))

        logger.info("TOTP enrollment started",
                    extra={"account_id": account_id, "previous_state": previous.state.value})
        return ProvisioningResult(
            secret=secret,
            provisioning_uri=provisioning_uri(secret, email.strip(), self.issuer),
        )

    async def disable(self, account_id: str) -> None:
        previous = await self.store.get(account_id)
        await self.store.set(account_id, TwoFactorRecord())
        logger.info("TOTP disabled",
                    extra={"account_id": account_id, "previous_state": previous.state.value})
