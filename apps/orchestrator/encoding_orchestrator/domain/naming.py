"""Run-scoped resource naming."""

from __future__ import annotations

from uuid import uuid4

from encoding_orchestrator.schemas.run import RunNames


def new_uniqueness_token() -> str:
    return uuid4().hex


def derive_run_names(token: str | None = None, *, input_prefix: str | None = None) -> RunNames:
    """Derive every name of one run from a single uniqueness token.

    ``input_prefix`` replaces the default ``input`` prefix of the input asset name.
    """
    token = token or new_uniqueness_token()
    prefix = (input_prefix or "").strip() or "input"
    return RunNames(
        uniqueness=token,
        job_name=f"job-{token}",
        input_asset_name=f"{prefix}-{token}",
        output_asset_name=f"output-{token}",
        locator_name=f"locator-{token}",
    )


def with_unique_suffix(name: str) -> str:
    """Return ``name`` with a random suffix, keeping the original as prefix."""
    return f"{name}-{uuid4().hex}"
