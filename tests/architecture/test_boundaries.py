from pytest_archon import archrule

CORE_MODULES = [
    "cqrs_ddd_two_factor.config",
    "cqrs_ddd_two_factor.context",
    "cqrs_ddd_two_factor.dispatcher",
    "cqrs_ddd_two_factor.exceptions",
    "cqrs_ddd_two_factor.ports",
    "cqrs_ddd_two_factor.subject",
    "cqrs_ddd_two_factor.totp",
    "cqrs_ddd_two_factor.verifier",
]


def test_core_framework_independence() -> None:
    """
    Verification and dispatch logic must not depend on the web framework,
    the Redis client or the SMTP client. Those live in adapters.
    """
    for module in CORE_MODULES:
        (
            archrule(f"framework_independence:{module}")
            .match(module)
            .should_not_import("fastapi*")
            .should_not_import("starlette*")
            .should_not_import("redis*")
            .should_not_import("aiosmtplib*")
            .check("cqrs_ddd_two_factor", only_direct_imports=True)
        )


def test_core_does_not_import_adapters() -> None:
    """
    Core modules talk to stores and channels through ports only.
    """
    for module in CORE_MODULES:
        (
            archrule(f"ports_only:{module}")
            .match(module)
            .should_not_import("cqrs_ddd_two_factor.stores*")
            .should_not_import("cqrs_ddd_two_factor.contrib*")
            .should_not_import("cqrs_ddd_two_factor.delivery.smtp")
            .should_not_import("cqrs_ddd_two_factor.delivery.console")
            .should_not_import("cqrs_ddd_two_factor.delivery.fake")
            .check("cqrs_ddd_two_factor", only_direct_imports=True)
        )


def test_adapters_do_not_import_contrib() -> None:
    """
    Store and delivery adapters must stay usable without FastAPI.
    """
    for package in ("stores", "delivery"):
        (
            archrule(f"adapter_independence:{package}")
            .match(f"cqrs_ddd_two_factor.{package}*")
            .should_not_import("cqrs_ddd_two_factor.contrib*")
            .should_not_import("fastapi*")
            .check("cqrs_ddd_two_factor", only_direct_imports=True)
        )
