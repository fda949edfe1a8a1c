"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from cqrs_ddd_two_factor import (
    EmailOtpDispatcher,
    InMemoryCodeStore,
    InMemoryEmailChannel,
    TotpCodeChecker,
    TwoFactorConfig,
    TwoFactorStatus,
    TwoFactorSubject,
    TwoFactorVerifier,
)
from cqrs_ddd_two_factor.context import clear_current_subject

TOTP_SECRET = "JBSWY3DPEHPK3PXP"


class FakeClock:
    """Manually advanced clock returning Unix seconds."""

    def __init__(self, now: float = 1_700_000_015.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clear_subject_context() -> Iterator[None]:
    clear_current_subject()
    yield
    clear_current_subject()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> TwoFactorConfig:
    return TwoFactorConfig(
        email_otp_expiration_seconds=300,
        send_email_otp_code_cooling_seconds=60,
    )


@pytest.fixture
def store(clock: FakeClock) -> InMemoryCodeStore:
    return InMemoryCodeStore(clock=clock)


@pytest.fixture
def channel() -> InMemoryEmailChannel:
    return InMemoryEmailChannel()


@pytest.fixture
def dispatcher(
    store: InMemoryCodeStore,
    channel: InMemoryEmailChannel,
    config: TwoFactorConfig,
    clock: FakeClock,
) -> EmailOtpDispatcher:
    return EmailOtpDispatcher(
        code_store=store, email_channel=channel, config=config, clock=clock
    )


@pytest.fixture
def verifier(
    store: InMemoryCodeStore,
    dispatcher: EmailOtpDispatcher,
    config: TwoFactorConfig,
    clock: FakeClock,
) -> TwoFactorVerifier:
    return TwoFactorVerifier(
        code_store=store,
        dispatcher=dispatcher,
        config=config,
        totp_checker=TotpCodeChecker(clock=clock),
    )


@pytest.fixture
def email_subject() -> TwoFactorSubject:
    """Email OTP enabled, TOTP disabled."""
    return TwoFactorSubject(
        subject_id="admin-1",
        email="root@example.com",
        status=TwoFactorStatus(email_otp=True, totp=False),
        account="root",
    )


@pytest.fixture
def full_subject() -> TwoFactorSubject:
    """Both email OTP and TOTP enabled."""
    return TwoFactorSubject(
        subject_id="admin-2",
        email="ops@example.com",
        totp_secret=TOTP_SECRET,
        status=TwoFactorStatus(email_otp=True, totp=True),
        account="ops",
    )
