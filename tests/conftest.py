from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterator, List, Optional

import pytest

from services.feature_flags.errors import NetworkFailure
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.parameter_service import DefaultParameterService
from services.feature_flags.remote import FlagsSnapshot, ParametersSnapshot
from services.feature_flags.service_base import SyncPolicy
from services.feature_flags.storage import flag_state_storage, parameter_state_storage
from services.feature_flags.values import ParameterValue
from services.json_store import InMemoryKeyValueStore
from services.premium.app_state import app_state_storage
from services.premium.app_state_service import DefaultAppStateService

START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Manually advanced clock injected into services."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeRemote:
    """In-process stand-in for the flags/parameters backend."""

    def __init__(self) -> None:
        self.flags: Dict[str, bool] = {}
        self.parameters: Dict[str, ParameterValue] = {}
        self.version = "1"
        self.updated_at = "2025-03-01T09:00:00Z"
        self.fail = False
        self.flag_calls = 0
        self.parameter_calls = 0

    def fetch_flags(self) -> FlagsSnapshot:
        self.flag_calls += 1
        if self.fail:
            raise NetworkFailure("backend unavailable", status_code=503, endpoint="/api/feature-flags")
        return FlagsSnapshot(values=dict(self.flags), version=self.version, updated_at=self.updated_at)

    def fetch_parameters(self) -> ParametersSnapshot:
        self.parameter_calls += 1
        if self.fail:
            raise NetworkFailure("backend unavailable", status_code=503, endpoint="/api/feature-parameters")
        return ParametersSnapshot(values=dict(self.parameters), version=self.version, updated_at=self.updated_at)


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def make_flag_service(
    backend: InMemoryKeyValueStore,
    remote: FakeRemote,
    clock: FrozenClock,
) -> Iterator[Callable[..., DefaultFeatureFlagService]]:
    """Build hydrated flag services; background work is flushed before returning."""
    created: List[DefaultFeatureFlagService] = []

    def _factory(
        *,
        auto_sync: bool = False,
        sync_policy: Optional[SyncPolicy] = None,
        debug: bool = False,
    ) -> DefaultFeatureFlagService:
        service = DefaultFeatureFlagService(
            storage=flag_state_storage(backend),
            remote=remote,
            sync_policy=sync_policy,
            clock=clock,
            auto_sync=auto_sync,
            hydration_timeout=1.0,
            debug=debug,
        )
        created.append(service)
        assert service.wait_until_ready(timeout=2.0)
        service.flush(timeout=2.0)
        return service

    yield _factory
    for service in created:
        service.close()


@pytest.fixture()
def make_parameter_service(
    backend: InMemoryKeyValueStore,
    remote: FakeRemote,
    clock: FrozenClock,
) -> Iterator[Callable[..., DefaultParameterService]]:
    created: List[DefaultParameterService] = []

    def _factory(*, auto_sync: bool = False, sync_policy: Optional[SyncPolicy] = None) -> DefaultParameterService:
        service = DefaultParameterService(
            storage=parameter_state_storage(backend),
            remote=remote,
            sync_policy=sync_policy,
            clock=clock,
            auto_sync=auto_sync,
            hydration_timeout=1.0,
        )
        created.append(service)
        assert service.wait_until_ready(timeout=2.0)
        service.flush(timeout=2.0)
        return service

    yield _factory
    for service in created:
        service.close()


@pytest.fixture()
def make_app_state_service(
    backend: InMemoryKeyValueStore,
    clock: FrozenClock,
) -> Iterator[Callable[..., DefaultAppStateService]]:
    created: List[DefaultAppStateService] = []

    def _factory(*, parameters: Optional[DefaultParameterService] = None) -> DefaultAppStateService:
        service = DefaultAppStateService(
            storage=app_state_storage(backend),
            parameters=parameters,
            clock=clock,
        )
        created.append(service)
        return service

    yield _factory
    for service in created:
        service.close()
