"""Composition root wiring flag, parameter and premium services together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.settings import Settings, load_settings
from services.ads.eligibility import AdEligibility
from services.feature_flags.flag_service import DefaultFeatureFlagService
from services.feature_flags.parameter_service import DefaultParameterService
from services.feature_flags.remote import FeatureFlagsApiClient
from services.feature_flags.service_base import SyncPolicy
from services.feature_flags.storage import flag_state_storage, parameter_state_storage
from services.json_store import JsonFileKeyValueStore, KeyValueStore
from services.premium.app_state import app_state_storage
from services.premium.app_state_service import DefaultAppStateService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppServices:
    settings: Settings
    flags: DefaultFeatureFlagService
    parameters: DefaultParameterService
    app_state: DefaultAppStateService
    ads: AdEligibility

    def close(self) -> None:
        self.app_state.close()
        self.flags.close()
        self.parameters.close()


def build_app_services(
    settings: Optional[Settings] = None,
    *,
    backend: Optional[KeyValueStore] = None,
    remote: Optional[FeatureFlagsApiClient] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AppServices:
    """Create every service once; consumers receive them explicitly."""

    settings = settings or load_settings()
    backend = backend or JsonFileKeyValueStore(settings.app_state_path)
    remote = remote or FeatureFlagsApiClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
    )
    policy = SyncPolicy(interval=timedelta(seconds=settings.sync_interval_seconds))

    flags = DefaultFeatureFlagService(
        storage=flag_state_storage(backend),
        remote=remote,
        sync_policy=policy,
        clock=clock,
        auto_sync=settings.auto_sync,
        hydration_timeout=settings.hydration_timeout_seconds,
        debug=settings.debug,
    )
    parameters = DefaultParameterService(
        storage=parameter_state_storage(backend),
        remote=remote,
        sync_policy=policy,
        clock=clock,
        auto_sync=settings.auto_sync,
        hydration_timeout=settings.hydration_timeout_seconds,
    )
    app_state = DefaultAppStateService(
        storage=app_state_storage(backend),
        parameters=parameters,
        clock=clock,
        default_temporary_duration=timedelta(seconds=settings.temporary_premium_seconds),
    )
    logger.info("Feature flag services started (base url %s)", settings.api_base_url)
    return AppServices(
        settings=settings,
        flags=flags,
        parameters=parameters,
        app_state=app_state,
        ads=AdEligibility(flags=flags, app_state=app_state),
    )


__all__ = ["AppServices", "build_app_services"]
