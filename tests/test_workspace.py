"""Tests for the Password Workspace."""

from __future__ import annotations

import asyncio
import random

import pytest

from conftest import BlockingStorage, FakeIdentityBackend, RecordingStorage, make_session, run
from keysmith.controller import AppController
from keysmith.exceptions import (
    FetchFailedError,
    InsertRejectedError,
    NotAuthenticatedError,
)
from keysmith.models.state import AppState
from keysmith.services.generator import active_charset
from keysmith.services.workspace import PasswordWorkspace


@pytest.fixture()
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture()
def state() -> AppState:
    s = AppState(loading=False)
    s.identity = make_session().user
    return s


@pytest.fixture()
def workspace(storage, state) -> PasswordWorkspace:
    return PasswordWorkspace(storage, state)


class TestPolicy:

    def test_partial_update_keeps_other_fields(self, workspace):
        workspace.update_policy(length=20)
        policy = workspace.update_policy(include_symbols=False)
        assert policy.length == 20
        assert policy.include_numbers is True
        assert policy.include_symbols is False

    def test_policy_persists_across_generations(self, workspace):
        workspace.update_policy(length=9, include_numbers=False, include_symbols=False)
        for _ in range(5):
            value = workspace.generate()
            assert len(value) == 9
            assert value.isalpha()

    def test_out_of_range_length_clamped(self, workspace):
        assert workspace.update_policy(length=3).length == 8
        assert workspace.update_policy(length=99).length == 32

    def test_generate_replaces_current_credential(self, storage, state):
        ws = PasswordWorkspace(storage, state, rng=random.Random(3))
        first = ws.generate()
        second = ws.generate()
        assert state.generated == second
        assert first != second
        assert set(second) <= set(active_charset(state.policy))


class TestSave:

    @pytest.mark.parametrize("label,value", [("", "x"), ("acct", ""), ("", "")])
    def test_empty_input_is_a_silent_noop(self, workspace, storage, label, value):
        assert run(workspace.save_password(label, value)) is False
        assert storage.inserts == []
        assert storage.list_calls == 0

    def test_save_refetches_instead_of_appending(self, workspace, storage):
        assert run(workspace.save_password("github", "pw-1")) is True
        assert storage.inserts == [("github", "pw-1")]
        assert storage.list_calls == 1
        assert [r.account_name for r in workspace.saved] == ["github"]

    def test_newest_record_first(self, workspace):
        run(workspace.save_password("first", "pw-1"))
        run(workspace.save_password("second", "pw-2"))
        assert [r.account_name for r in workspace.saved] == ["second", "first"]

    def test_saved_generated_value_is_cleared(self, workspace, state):
        value = workspace.generate()
        run(workspace.save_password("mail", value))
        assert state.generated is None

    def test_other_value_keeps_generated(self, workspace, state):
        value = workspace.generate()
        run(workspace.save_password("mail", "typed-by-hand"))
        assert state.generated == value

    def test_rejected_insert_leaves_listing(self, workspace, storage):
        run(workspace.save_password("kept", "pw"))
        before = list(workspace.saved)
        storage.fail_insert = True

        with pytest.raises(InsertRejectedError):
            run(workspace.save_password("lost", "pw-2"))

        assert workspace.saved == before
        assert storage.list_calls == 1

    def test_refetch_failure_still_reports_saved(self, workspace, storage, state):
        value = workspace.generate()
        storage.fail_list = True

        assert run(workspace.save_password("mail", value)) is True
        assert storage.inserts == [("mail", value)]
        assert state.generated is None

    def test_no_client_side_ownership_check(self, storage):
        """Without an identity the insert still goes to storage, which decides."""
        ws = PasswordWorkspace(storage, AppState(loading=False))
        storage.fail_insert = True
        with pytest.raises(InsertRejectedError):
            run(ws.save_password("acct", "pw"))
        assert storage.inserts == [("acct", "pw")]


class TestFetch:

    def test_requires_identity(self, storage):
        ws = PasswordWorkspace(storage, AppState(loading=False))
        with pytest.raises(NotAuthenticatedError):
            run(ws.list_saved_passwords())
        assert storage.list_calls == 0

    def test_replaces_listing_wholesale(self, workspace, storage):
        run(workspace.save_password("a", "1"))
        listing = workspace.saved
        storage.records = []
        run(workspace.list_saved_passwords())
        assert workspace.saved == []
        assert listing is not workspace.saved

    def test_failure_keeps_previous_listing(self, workspace, storage):
        run(workspace.save_password("a", "1"))
        storage.fail_list = True
        with pytest.raises(FetchFailedError):
            run(workspace.list_saved_passwords())
        assert [r.account_name for r in workspace.saved] == ["a"]

    def test_result_for_previous_identity_is_dropped(self, state):
        storage = BlockingStorage()
        ws = PasswordWorkspace(storage, state)

        async def scenario():
            await ws.save_password("a", "1")
            storage.block()
            fetch = asyncio.create_task(ws.list_saved_passwords())
            await storage.entered.wait()
            state.identity = make_session("other@example.com").user
            ws.clear()
            storage.release.set()
            return await fetch

        assert run(scenario()) == []
        assert ws.saved == []

    def test_clear(self, workspace):
        run(workspace.save_password("a", "1"))
        workspace.clear()
        assert workspace.saved == []


class TestControllerGating:

    def test_workspace_requires_sign_in(self):
        ctrl = AppController(FakeIdentityBackend(), RecordingStorage())
        run(ctrl.start())
        with pytest.raises(NotAuthenticatedError):
            ctrl.generate()
        with pytest.raises(NotAuthenticatedError):
            ctrl.update_policy(length=10)
        with pytest.raises(NotAuthenticatedError):
            run(ctrl.save_password("acct", "pw"))

    def test_save_defaults_to_generated_value(self):
        storage = RecordingStorage()
        ctrl = AppController(FakeIdentityBackend(), storage)
        run(ctrl.start())
        run(ctrl.sign_in("carol@example.com", "pw"))

        value = ctrl.generate()
        assert run(ctrl.save_password("bank")) is True
        assert storage.inserts == [("bank", value)]

    def test_save_without_generated_value_is_noop(self):
        storage = RecordingStorage()
        ctrl = AppController(FakeIdentityBackend(), storage)
        run(ctrl.start())
        run(ctrl.sign_in("carol@example.com", "pw"))

        assert run(ctrl.save_password("bank")) is False
        assert storage.inserts == []

    def test_default_policy_from_settings(self, settings):
        settings = settings.model_copy(update={
            "default_password_length": 24,
            "default_include_symbols": False,
        })
        ctrl = AppController(FakeIdentityBackend(), RecordingStorage(), settings)
        assert ctrl.state.policy.length == 24
        assert ctrl.state.policy.include_symbols is False
