from __future__ import annotations

import asyncio

import pytest

from asset_orchestrator.credentials import CredentialContext, CredentialGate

from tests.mocks.credentials import ScriptedCredentialProvider


def make_gate(provider: ScriptedCredentialProvider, *, has_credential: bool = False) -> CredentialGate:
    return CredentialGate(CredentialContext(provider=provider, has_credential=has_credential))


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_ensure_credential_returns_immediately_when_held() -> None:
    provider = ScriptedCredentialProvider(selected=True)
    gate = make_gate(provider, has_credential=True)

    assert await gate.ensure_credential() is True
    assert provider.open_calls == 0


@pytest.mark.asyncio
async def test_ensure_credential_prompts_and_records_selection() -> None:
    provider = ScriptedCredentialProvider(selected=False, select_result=True)
    gate = make_gate(provider)

    assert await gate.ensure_credential() is True
    assert gate.context.has_credential is True
    assert provider.open_calls == 1
    assert gate.prompt_in_flight is False


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_prompt() -> None:
    hold = asyncio.Event()
    provider = ScriptedCredentialProvider(selected=False, hold=hold)
    gate = make_gate(provider)

    waiters = [asyncio.create_task(gate.ensure_credential()) for _ in range(3)]
    await settle()

    assert provider.open_calls == 1
    assert gate.prompt_in_flight is True

    hold.set()
    results = await asyncio.gather(*waiters)

    assert results == [True, True, True]
    assert provider.open_calls == 1


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_abort_shared_prompt() -> None:
    hold = asyncio.Event()
    provider = ScriptedCredentialProvider(selected=False, hold=hold)
    gate = make_gate(provider)

    first = asyncio.create_task(gate.ensure_credential())
    second = asyncio.create_task(gate.ensure_credential())
    await settle()
    first.cancel()
    await settle()
    hold.set()

    assert await second is True
    assert first.cancelled()
    assert provider.open_calls == 1


@pytest.mark.asyncio
async def test_declined_selection_returns_false() -> None:
    provider = ScriptedCredentialProvider(selected=False, select_result=False)
    gate = make_gate(provider)

    assert await gate.ensure_credential() is False
    assert gate.context.has_credential is False

    # A later call opens a fresh prompt.
    assert await gate.ensure_credential() is False
    assert provider.open_calls == 2


@pytest.mark.asyncio
async def test_failed_selection_is_reported_as_false() -> None:
    provider = ScriptedCredentialProvider(selected=False, fail_selection=True)
    gate = make_gate(provider)

    assert await gate.ensure_credential() is False
    assert gate.context.has_credential is False


@pytest.mark.asyncio
async def test_probe_initialises_context_without_prompting() -> None:
    provider = ScriptedCredentialProvider(selected=True)
    gate = make_gate(provider)

    assert await gate.probe() is True
    assert gate.context.has_credential is True
    assert provider.open_calls == 0


@pytest.mark.asyncio
async def test_probe_failure_counts_as_no_credential() -> None:
    class BrokenProvider(ScriptedCredentialProvider):
        async def has_selected_credential(self) -> bool:
            raise RuntimeError("host bridge unavailable")

    gate = make_gate(BrokenProvider(), has_credential=True)

    assert await gate.probe() is False
    assert gate.context.has_credential is False


def test_revoke_clears_flag() -> None:
    gate = make_gate(ScriptedCredentialProvider(selected=True), has_credential=True)

    gate.revoke()

    assert gate.context.has_credential is False
