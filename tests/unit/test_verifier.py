"""Tests for TwoFactorVerifier and compute_required_factors."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pyotp
import pytest

from cqrs_ddd_two_factor import (
    CodeStoreError,
    DispatchFailedError,
    EmailOtpDispatcher,
    Factor,
    InMemoryCodeStore,
    InMemoryEmailChannel,
    InvalidCodeError,
    MissingCodeError,
    RequiredFactors,
    SubmittedCodes,
    TwoFactorStatus,
    TwoFactorSubject,
    TwoFactorVerifier,
    UnauthenticatedError,
    compute_required_factors,
    set_current_subject,
)


def codes(email_otp: str | None = None, totp: str | None = None) -> SubmittedCodes:
    return SubmittedCodes(email_otp_code=email_otp, totp_code=totp)


class TestComputeRequiredFactors:
    @pytest.mark.parametrize(
        ("status", "email", "want_email", "expected"),
        [
            (TwoFactorStatus(email_otp=True), "a@example.com", True, True),
            (TwoFactorStatus(email_otp=True), "a@example.com", False, False),
            (TwoFactorStatus(email_otp=True), None, True, False),
            (TwoFactorStatus(email_otp=True), "", True, False),
            (TwoFactorStatus(email_otp=False), "a@example.com", True, False),
        ],
    )
    def test_email_otp(
        self,
        status: TwoFactorStatus,
        email: str | None,
        want_email: bool,
        expected: bool,
    ) -> None:
        subject = TwoFactorSubject(subject_id="s", email=email, status=status)
        assert compute_required_factors(subject, want_email, True).email_otp is expected

    @pytest.mark.parametrize(
        ("status", "secret", "want_totp", "expected"),
        [
            (TwoFactorStatus(totp=True), "JBSWY3DPEHPK3PXP", True, True),
            (TwoFactorStatus(totp=True), "JBSWY3DPEHPK3PXP", False, False),
            (TwoFactorStatus(totp=True), None, True, False),
            (TwoFactorStatus(totp=False), "JBSWY3DPEHPK3PXP", True, False),
        ],
    )
    def test_totp(
        self,
        status: TwoFactorStatus,
        secret: str | None,
        want_totp: bool,
        expected: bool,
    ) -> None:
        subject = TwoFactorSubject(subject_id="s", totp_secret=secret, status=status)
        assert compute_required_factors(subject, True, want_totp).totp is expected

    def test_email_only_subject_asked_for_both(
        self, email_subject: TwoFactorSubject
    ) -> None:
        required = compute_required_factors(email_subject, True, True)
        assert required == RequiredFactors(email_otp=True, totp=False)


class TestEmailOtpVerification:
    @pytest.mark.asyncio
    async def test_missing_code_without_auto_send(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
        channel: InMemoryEmailChannel,
    ) -> None:
        with pytest.raises(MissingCodeError) as exc_info:
            await verifier.require(codes(), subject=email_subject)

        assert exc_info.value.factor is Factor.EMAIL_OTP
        assert exc_info.value.required_factors == RequiredFactors(
            email_otp=True, totp=False
        )
        assert channel.sent_messages == []

    @pytest.mark.asyncio
    async def test_missing_code_with_auto_send_sends_and_still_fails(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
        channel: InMemoryEmailChannel,
        store: InMemoryCodeStore,
    ) -> None:
        with pytest.raises(MissingCodeError):
            await verifier.require(
                codes(), subject=email_subject, auto_send_email_otp=True
            )

        channel.assert_sent("root@example.com")
        assert await store.get("admin-1") is not None

    @pytest.mark.asyncio
    async def test_auto_send_swallows_cooldown(
        self,
        verifier: TwoFactorVerifier,
        dispatcher: EmailOtpDispatcher,
        email_subject: TwoFactorSubject,
        channel: InMemoryEmailChannel,
    ) -> None:
        await dispatcher.dispatch(email_subject)

        with pytest.raises(MissingCodeError):
            await verifier.require(
                codes(), subject=email_subject, auto_send_email_otp=True
            )

        channel.assert_sent("root@example.com", count=1)

    @pytest.mark.asyncio
    async def test_auto_send_unsuccessful_delivery_raises_dispatch_failed(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
        channel: InMemoryEmailChannel,
    ) -> None:
        channel.succeed = False

        with pytest.raises(DispatchFailedError) as exc_info:
            await verifier.require(
                codes(), subject=email_subject, auto_send_email_otp=True
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.required_factors.email_otp is True

    @pytest.mark.asyncio
    async def test_auto_send_store_failure_raises_dispatch_failed(
        self, email_subject: TwoFactorSubject
    ) -> None:
        broken_store = AsyncMock()
        broken_store.ttl.return_value = -2
        broken_store.set.side_effect = CodeStoreError("set")
        verifier = TwoFactorVerifier(
            code_store=broken_store,
            dispatcher=EmailOtpDispatcher(
                code_store=broken_store, email_channel=InMemoryEmailChannel()
            ),
        )

        with pytest.raises(DispatchFailedError) as exc_info:
            await verifier.require(
                codes(), subject=email_subject, auto_send_email_otp=True
            )

        assert isinstance(exc_info.value.__cause__, CodeStoreError)

    @pytest.mark.asyncio
    async def test_auto_send_without_dispatcher(
        self, store: InMemoryCodeStore, email_subject: TwoFactorSubject
    ) -> None:
        verifier = TwoFactorVerifier(code_store=store)

        with pytest.raises(DispatchFailedError):
            await verifier.require(
                codes(), subject=email_subject, auto_send_email_otp=True
            )

    @pytest.mark.asyncio
    async def test_code_validates_exactly_once(
        self,
        verifier: TwoFactorVerifier,
        dispatcher: EmailOtpDispatcher,
        email_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
    ) -> None:
        await dispatcher.dispatch(email_subject)
        code = await store.get("admin-1")
        assert code is not None

        required = await verifier.require(codes(email_otp=code), subject=email_subject)
        assert required.email_otp is True

        with pytest.raises(InvalidCodeError) as exc_info:
            await verifier.require(codes(email_otp=code), subject=email_subject)
        assert exc_info.value.factor is Factor.EMAIL_OTP

    @pytest.mark.asyncio
    async def test_wrong_code_does_not_consume(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
    ) -> None:
        await store.set("admin-1", "AbC123", 300)

        with pytest.raises(InvalidCodeError):
            await verifier.require(codes(email_otp="zzzzzz"), subject=email_subject)

        await verifier.require(codes(email_otp="AbC123"), subject=email_subject)

    @pytest.mark.asyncio
    async def test_match_is_case_sensitive(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
    ) -> None:
        await store.set("admin-1", "AbC123", 300)

        with pytest.raises(InvalidCodeError):
            await verifier.require(codes(email_otp="abc123"), subject=email_subject)

    @pytest.mark.asyncio
    async def test_expired_code_is_invalid(
        self,
        verifier: TwoFactorVerifier,
        dispatcher: EmailOtpDispatcher,
        email_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
        clock,
    ) -> None:
        await dispatcher.dispatch(email_subject)
        code = await store.get("admin-1")
        clock.advance(301)

        with pytest.raises(InvalidCodeError):
            await verifier.require(codes(email_otp=code), subject=email_subject)

    @pytest.mark.asyncio
    async def test_never_issued_code_is_invalid(
        self, verifier: TwoFactorVerifier, email_subject: TwoFactorSubject
    ) -> None:
        with pytest.raises(InvalidCodeError):
            await verifier.require(codes(email_otp="abcdef"), subject=email_subject)


class TestTotpVerification:
    @pytest.mark.asyncio
    async def test_missing_totp_code(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
    ) -> None:
        with pytest.raises(MissingCodeError) as exc_info:
            await verifier.require(codes(), subject=full_subject, email_otp=False)

        assert exc_info.value.factor is Factor.TOTP
        assert exc_info.value.required_factors == RequiredFactors(
            email_otp=False, totp=True
        )

    @pytest.mark.asyncio
    async def test_valid_totp_code(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
        clock,
    ) -> None:
        code = pyotp.TOTP(full_subject.totp_secret).at(clock())

        required = await verifier.require(
            codes(totp=code), subject=full_subject, email_otp=False
        )

        assert required == RequiredFactors(email_otp=False, totp=True)

    @pytest.mark.asyncio
    async def test_previous_step_code_is_rejected(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
        clock,
    ) -> None:
        totp = pyotp.TOTP(full_subject.totp_secret)
        previous = totp.at(clock() - 30)
        assert previous != totp.at(clock())

        with pytest.raises(InvalidCodeError) as exc_info:
            await verifier.require(
                codes(totp=previous), subject=full_subject, email_otp=False
            )
        assert exc_info.value.factor is Factor.TOTP

    @pytest.mark.asyncio
    async def test_full_width_digits_are_rejected(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
        clock,
    ) -> None:
        code = pyotp.TOTP(full_subject.totp_secret).at(clock())
        full_width = "".join(chr(ord(c) + 0xFEE0) for c in code)

        with pytest.raises(InvalidCodeError):
            await verifier.require(
                codes(totp=full_width), subject=full_subject, email_otp=False
            )


class TestCombinedVerification:
    @pytest.mark.asyncio
    async def test_email_code_consumed_even_when_totp_fails(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
    ) -> None:
        await store.set("admin-2", "Xy_9-q", 300)

        with pytest.raises(InvalidCodeError) as exc_info:
            await verifier.require(
                codes(email_otp="Xy_9-q", totp="000000"), subject=full_subject
            )

        assert exc_info.value.factor is Factor.TOTP
        assert await store.get("admin-2") is None

    @pytest.mark.asyncio
    async def test_email_checked_before_totp(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
    ) -> None:
        with pytest.raises(MissingCodeError) as exc_info:
            await verifier.require(codes(totp="000000"), subject=full_subject)

        assert exc_info.value.factor is Factor.EMAIL_OTP
        assert exc_info.value.required_factors == RequiredFactors(
            email_otp=True, totp=True
        )

    @pytest.mark.asyncio
    async def test_both_factors_pass(
        self,
        verifier: TwoFactorVerifier,
        full_subject: TwoFactorSubject,
        store: InMemoryCodeStore,
        clock,
    ) -> None:
        await store.set("admin-2", "Xy_9-q", 300)
        totp_code = pyotp.TOTP(full_subject.totp_secret).at(clock())

        required = await verifier.require(
            codes(email_otp="Xy_9-q", totp=totp_code), subject=full_subject
        )

        assert required == RequiredFactors(email_otp=True, totp=True)

    @pytest.mark.asyncio
    async def test_nothing_required_is_noop(self, verifier: TwoFactorVerifier) -> None:
        subject = TwoFactorSubject(subject_id="plain")

        required = await verifier.require(codes(), subject=subject)

        assert required.any is False


class TestSubjectResolution:
    @pytest.mark.asyncio
    async def test_resolves_subject_from_context(
        self,
        verifier: TwoFactorVerifier,
        email_subject: TwoFactorSubject,
    ) -> None:
        set_current_subject(email_subject)

        with pytest.raises(MissingCodeError):
            await verifier.require(codes())

    @pytest.mark.asyncio
    async def test_no_subject_raises_unauthenticated(
        self, verifier: TwoFactorVerifier
    ) -> None:
        with pytest.raises(UnauthenticatedError):
            await verifier.require(codes())
