from __future__ import annotations

import json
import threading
from datetime import timedelta
from typing import Dict, List

import pytest

from services.feature_flags.errors import NetworkFailure
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.registry import FeatureFlag
from services.feature_flags.service_base import ServicePhase, SyncPolicy
from services.feature_flags.state import FlagState
from services.feature_flags.storage import FLAGS_STATE_KEY, flag_state_storage


def test_fresh_service_resolves_registered_defaults(make_flag_service, remote):
    service = make_flag_service()

    assert service.phase is ServicePhase.READY
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is True
    assert service.is_enabled("show_subjects_tab") is False
    assert set(service.snapshot()) == set(FeatureFlag)
    assert service.last_sync is None
    assert remote.flag_calls == 0


def test_reset_restores_default(make_flag_service):
    service = make_flag_service()

    service.set_enabled(FeatureFlag.SHOW_ADS, False)
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is False
    assert service.has_local_override(FeatureFlag.SHOW_ADS) is True

    service.reset(FeatureFlag.SHOW_ADS)
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is True
    assert service.has_local_override(FeatureFlag.SHOW_ADS) is False


def test_reset_is_idempotent(make_flag_service):
    service = make_flag_service()
    service.set_enabled(FeatureFlag.DARK_MODE_ONLY, True)

    service.reset(FeatureFlag.DARK_MODE_ONLY)
    once = service.snapshot()
    service.reset(FeatureFlag.DARK_MODE_ONLY)

    assert service.snapshot() == once


def test_override_beats_remote_after_sync(make_flag_service, remote, clock):
    remote.flags = {"show_ads": False}
    service = make_flag_service()

    service.sync_from_remote()
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is False
    assert service.last_sync == clock.now
    assert service.version == "1"

    service.set_enabled(FeatureFlag.SHOW_ADS, True)
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is True


def test_failed_sync_leaves_snapshot_untouched(make_flag_service, remote):
    remote.flags = {"enable_analytics": True}
    service = make_flag_service()
    service.sync_from_remote()
    service.set_enabled(FeatureFlag.SHOW_TEACHERS_TAB, True)
    before = service.snapshot()
    last_sync = service.last_sync

    remote.fail = True
    remote.flags = {"enable_analytics": False}
    with pytest.raises(NetworkFailure):
        service.sync_from_remote()

    assert service.snapshot() == before
    assert service.last_sync == last_sync


def test_sync_replaces_remote_values_wholesale(make_flag_service, remote):
    remote.flags = {"enable_analytics": True, "dark_mode_only": True}
    service = make_flag_service()
    service.sync_from_remote()

    remote.flags = {"dark_mode_only": True}
    service.sync_from_remote()

    assert service.is_enabled(FeatureFlag.ENABLE_ANALYTICS) is False
    assert service.is_enabled(FeatureFlag.DARK_MODE_ONLY) is True


def test_reset_all_clears_overrides_only(make_flag_service, remote):
    remote.flags = {"show_subjects_tab": True}
    service = make_flag_service()
    service.sync_from_remote()
    service.set_enabled(FeatureFlag.SHOW_SUBJECTS_TAB, False)
    service.set_enabled(FeatureFlag.SHOW_ADS, False)

    service.reset_all()

    assert service.is_enabled(FeatureFlag.SHOW_SUBJECTS_TAB) is True
    assert service.is_enabled(FeatureFlag.SHOW_ADS) is True


def test_unknown_flag_key_raises(make_flag_service):
    service = make_flag_service()
    with pytest.raises(ValueError):
        service.is_enabled("no_such_flag")
    with pytest.raises(ValueError):
        service.set_enabled("no_such_flag", True)


def test_state_survives_restart(make_flag_service, backend, remote):
    remote.flags = {"enable_analytics": True}
    first = make_flag_service()
    first.sync_from_remote()
    first.set_enabled(FeatureFlag.SHOW_ADS, False)
    first.flush(timeout=2.0)

    stored = json.loads(backend.get(FLAGS_STATE_KEY))
    assert stored["localOverrides"] == {"show_ads": False}
    assert stored["remoteFlags"] == {"enable_analytics": True}

    second = make_flag_service()
    assert second.is_enabled(FeatureFlag.SHOW_ADS) is False
    assert second.is_enabled(FeatureFlag.ENABLE_ANALYTICS) is True
    assert second.version == "1"


def test_corrupt_persisted_state_starts_from_defaults(make_flag_service, backend):
    backend.set(FLAGS_STATE_KEY, "not json at all")
    service = make_flag_service()

    assert service.phase is ServicePhase.READY
    assert service.snapshot() == {flag: flag.default_value for flag in FeatureFlag}


def test_auto_sync_runs_when_never_synced(make_flag_service, remote):
    remote.flags = {"show_teachers_tab": True}
    service = make_flag_service(auto_sync=True)

    assert remote.flag_calls == 1
    assert service.is_enabled(FeatureFlag.SHOW_TEACHERS_TAB) is True


def test_auto_sync_skips_fresh_state(make_flag_service, backend, remote, clock):
    flag_state_storage(backend).save_state(FlagState(last_sync=clock.now - timedelta(minutes=30)))

    make_flag_service(auto_sync=True)

    assert remote.flag_calls == 0


def test_auto_sync_refreshes_stale_state(make_flag_service, backend, remote, clock):
    flag_state_storage(backend).save_state(FlagState(last_sync=clock.now - timedelta(hours=2)))
    remote.flags = {"dark_mode_only": True}

    service = make_flag_service(auto_sync=True)

    assert remote.flag_calls == 1
    assert service.last_sync == clock.now
    assert service.is_enabled(FeatureFlag.DARK_MODE_ONLY) is True


def test_background_sync_failure_is_not_raised(make_flag_service, remote):
    remote.fail = True
    service = make_flag_service(auto_sync=True)

    assert remote.flag_calls == 1
    assert service.phase is ServicePhase.READY
    assert service.last_sync is None


def test_custom_sync_interval(make_flag_service, backend, remote, clock):
    flag_state_storage(backend).save_state(FlagState(last_sync=clock.now - timedelta(minutes=10)))

    make_flag_service(auto_sync=True, sync_policy=SyncPolicy(interval=timedelta(minutes=5)))

    assert remote.flag_calls == 1


def test_subscribers_receive_full_snapshots(make_flag_service):
    service = make_flag_service()
    received: List[Dict[FeatureFlag, bool]] = []

    unsubscribe = service.subscribe(received.append)
    assert received[0] == service.snapshot()

    service.set_enabled(FeatureFlag.DARK_MODE_ONLY, True)
    assert len(received) == 2
    assert set(received[1]) == set(FeatureFlag)
    assert received[1][FeatureFlag.DARK_MODE_ONLY] is True

    unsubscribe()
    service.reset(FeatureFlag.DARK_MODE_ONLY)
    assert len(received) == 2


def test_failing_subscriber_does_not_break_mutations(make_flag_service):
    service = make_flag_service()

    def _boom(snapshot):
        raise RuntimeError("observer failure")

    service.subscribe(_boom)
    service.set_enabled(FeatureFlag.SHOW_ADS, False)

    assert service.is_enabled(FeatureFlag.SHOW_ADS) is False


def test_sync_policy_staleness(clock):
    policy = SyncPolicy(interval=timedelta(hours=1))

    assert policy.should_sync(None, now=clock.now) is True
    assert policy.should_sync(clock.now - timedelta(minutes=59), now=clock.now) is False
    assert policy.should_sync(clock.now - timedelta(hours=1), now=clock.now) is False
    assert policy.should_sync(clock.now - timedelta(hours=1, seconds=1), now=clock.now) is True


class _SlowFlagStore:
    """Holds ``load_state`` until released; records every saved state."""

    def __init__(self, persisted: FlagState) -> None:
        self.release = threading.Event()
        self.persisted = persisted
        self.saved: List[FlagState] = []

    def load_state(self) -> FlagState:
        self.release.wait(timeout=5.0)
        return self.persisted.copy()

    def save_state(self, state: FlagState) -> None:
        self.saved.append(state.copy())


def test_change_made_during_slow_hydration_is_kept(remote, clock):
    store = _SlowFlagStore(FlagState(local_overrides={"dark_mode_only": True}))
    service = DefaultFeatureFlagService(
        storage=store,
        remote=remote,
        clock=clock,
        auto_sync=False,
        hydration_timeout=0.05,
    )
    try:
        service.set_enabled(FeatureFlag.SHOW_ADS, False)
        assert service.phase is ServicePhase.HYDRATING
        assert service.is_enabled(FeatureFlag.SHOW_ADS) is False
        assert store.saved == []

        store.release.set()
        assert service.wait_until_ready(timeout=2.0)
        service.flush(timeout=2.0)

        assert service.is_enabled(FeatureFlag.SHOW_ADS) is False
        assert service.is_enabled(FeatureFlag.DARK_MODE_ONLY) is True
        assert store.saved[-1].local_overrides == {"dark_mode_only": True, "show_ads": False}
    finally:
        store.release.set()
        service.close()


def test_debug_build_enables_debug_menu_by_default(make_flag_service):
    release = make_flag_service()
    debug = make_flag_service(debug=True)

    assert release.debug is False
    assert release.is_enabled(FeatureFlag.SHOW_DEBUG_MENU) is False
    assert debug.is_enabled(FeatureFlag.SHOW_DEBUG_MENU) is True
    assert debug.snapshot()[FeatureFlag.SHOW_DEBUG_MENU] is True

    debug.set_enabled(FeatureFlag.SHOW_DEBUG_MENU, False)
    assert debug.is_enabled(FeatureFlag.SHOW_DEBUG_MENU) is False


def test_snapshot_with_overrides_reads_both_together(make_flag_service):
    service = make_flag_service()
    service.set_enabled(FeatureFlag.DARK_MODE_ONLY, True)

    snapshot, overridden = service.snapshot_with_overrides()

    assert snapshot == service.snapshot()
    assert overridden == frozenset({"dark_mode_only"})

    service.reset_all()
    assert service.snapshot_with_overrides()[1] == frozenset()
