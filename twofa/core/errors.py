"""Error taxonomy for the 2FA core.

These are raised by the provisioner, the verifier and the record store. The
HTTP layer translates them into `AppError` responses; nothing in the core
retries or swallows them.
"""


class TwoFactorError(Exception):
    """Base class for 2FA core failures."""


class AccountNotFound(TwoFactorError):
    def __init__(self, account_id: str):
        super().__init__(f"account {account_id} not found")
        self.account_id = account_id


class NotEnrolled(TwoFactorError):
    """Verification was attempted on an account without a TOTP secret."""

    def __init__(self, account_id: str):
        super().__init__(f"account {account_id} has no TOTP secret")
        self.account_id = account_id


class InvalidCode(TwoFactorError):
    """The submitted code matched none of the accepted time steps."""


class StoreUnavailable(TwoFactorError):
    """The record store could not complete a read or write."""
