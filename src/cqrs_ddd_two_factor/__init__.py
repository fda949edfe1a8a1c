"""CQRS-DDD Two-Factor Package

Second factor for an already authenticated subject: TOTP and email OTP.

Decides which factors a subject must satisfy, checks submitted codes
(consuming email OTP codes exactly once) and issues email OTP codes behind a
cooldown.

Usage:
    ```python
    from cqrs_ddd_two_factor import (
        EmailOtpDispatcher,
        InMemoryCodeStore,
        InMemoryEmailChannel,
        SubmittedCodes,
        TwoFactorConfig,
        TwoFactorVerifier,
    )

    config = TwoFactorConfig()
    store = InMemoryCodeStore()
    dispatcher = EmailOtpDispatcher(
        code_store=store, email_channel=InMemoryEmailChannel(), config=config
    )
    verifier = TwoFactorVerifier(code_store=store, dispatcher=dispatcher, config=config)

    await verifier.require(
        SubmittedCodes.from_body(body), subject=subject, auto_send_email_otp=True
    )
    ```

Submodules:
    - `stores`: in-memory and Redis code stores
    - `delivery`: SMTP, console and in-memory email channels
    - `contrib.fastapi`: FastAPI dependencies, error handlers and router
"""

from __future__ import annotations

from .config import TwoFactorConfig
from .context import (
    clear_current_subject,
    get_current_subject,
    get_current_subject_or_none,
    reset_current_subject,
    set_current_subject,
)
from .delivery import (
    ConsoleEmailChannel,
    DeliveryRecord,
    DeliveryStatus,
    InMemoryEmailChannel,
    RenderedEmail,
    SmtpEmailChannel,
)
from .dispatcher import EmailOtpDispatcher
from .exceptions import (
    CodeStoreError,
    CooldownActiveError,
    CryptoSourceError,
    DispatchError,
    DispatchFailedError,
    Factor,
    InvalidCodeError,
    MissingCodeError,
    NoEmailBoundError,
    TwoFactorError,
    UnauthenticatedError,
    VerificationError,
)
from .ports import ICodeStore, IEmailChannel
from .stores import InMemoryCodeStore, RedisCodeStore
from .subject import RequiredFactors, SubmittedCodes, TwoFactorStatus, TwoFactorSubject
from .totp import TotpCodeChecker, TotpSecretData, generate_totp_secret_data
from .verifier import TwoFactorVerifier, compute_required_factors

__all__: list[str] = [
    # Config
    "TwoFactorConfig",
    # Subject
    "TwoFactorSubject",
    "TwoFactorStatus",
    "RequiredFactors",
    "SubmittedCodes",
    # Context
    "get_current_subject",
    "get_current_subject_or_none",
    "set_current_subject",
    "reset_current_subject",
    "clear_current_subject",
    # Ports
    "ICodeStore",
    "IEmailChannel",
    # TOTP
    "TotpSecretData",
    "TotpCodeChecker",
    "generate_totp_secret_data",
    # Verification / Dispatch
    "TwoFactorVerifier",
    "compute_required_factors",
    "EmailOtpDispatcher",
    # Stores
    "InMemoryCodeStore",
    "RedisCodeStore",
    # Delivery
    "DeliveryRecord",
    "DeliveryStatus",
    "RenderedEmail",
    "SmtpEmailChannel",
    "ConsoleEmailChannel",
    "InMemoryEmailChannel",
    # Exceptions
    "Factor",
    "TwoFactorError",
    "UnauthenticatedError",
    "VerificationError",
    "MissingCodeError",
    "InvalidCodeError",
    "DispatchFailedError",
    "DispatchError",
    "NoEmailBoundError",
    "CooldownActiveError",
    "CryptoSourceError",
    "CodeStoreError",
]
