"""Typed remote parameters with the same precedence rules as flags."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Protocol, Type, TypeVar, Union

from services.feature_flags.broadcast import Observer
from services.feature_flags.errors import ParameterKindError
from services.feature_flags.registry import ParameterKey, parse_parameter
from services.feature_flags.remote import ParametersRemoteSource, ParametersSnapshot
from services.feature_flags.resolver import resolve_all_parameters, resolve_parameter
from services.feature_flags.service_base import Clock, ResolvedStateService, SyncPolicy
from services.feature_flags.state import ParameterState
from services.feature_flags.storage import StateStore
from services.feature_flags.values import ParameterValue

T = TypeVar("T")

ParameterKeyLike = Union[ParameterKey, str]


class ParameterService(Protocol):
    def resolve(self, key: ParameterKeyLike) -> ParameterValue:
        ...

    def get_value(self, key: ParameterKeyLike, as_type: Type[T]) -> Optional[T]:
        ...

    def set_value(self, key: ParameterKeyLike, value: ParameterValue) -> None:
        ...

    def reset(self, key: ParameterKeyLike) -> None:
        ...

    def reset_all(self) -> None:
        ...

    def sync_from_remote(self) -> None:
        ...

    def has_local_override(self, key: ParameterKeyLike) -> bool:
        ...

    def snapshot(self) -> Dict[ParameterKey, ParameterValue]:
        ...

    def subscribe(self, observer: Observer):
        ...


class DefaultParameterService(ResolvedStateService[ParameterKey, ParameterValue, ParameterState]):
    label = "feature_parameters"

    def __init__(
        self,
        *,
        storage: StateStore[ParameterState],
        remote: ParametersRemoteSource,
        sync_policy: Optional[SyncPolicy] = None,
        clock: Optional[Clock] = None,
        auto_sync: bool = True,
        hydration_timeout: float = 5.0,
    ) -> None:
        self._remote = remote
        super().__init__(
            storage=storage,
            sync_policy=sync_policy,
            clock=clock,
            auto_sync=auto_sync,
            hydration_timeout=hydration_timeout,
        )

    def _empty_state(self) -> ParameterState:
        return ParameterState.empty()

    def _resolve_all(self, state: ParameterState) -> Dict[ParameterKey, ParameterValue]:
        return resolve_all_parameters(state.local_overrides, state.remote_parameters)

    def _fetch_remote(self) -> ParametersSnapshot:
        return self._remote.fetch_parameters()

    def _apply_remote(self, state: ParameterState, snapshot: ParametersSnapshot, synced_at: datetime) -> None:
        state.remote_parameters = dict(snapshot.values)
        state.last_sync = synced_at
        self._logger.info("Received %d remote parameters (version %s)", len(snapshot.values), snapshot.version)

    def _last_sync(self, state: ParameterState) -> Optional[datetime]:
        return state.last_sync

    def resolve(self, key: ParameterKeyLike) -> ParameterValue:
        key = parse_parameter(key)
        with self._lock:
            return resolve_parameter(
                key,
                local_overrides=self._state.local_overrides,
                remote_values=self._state.remote_parameters,
            )

    def get_value(self, key: ParameterKeyLike, as_type: Type[T]) -> Optional[T]:
        """Return the resolved value, or ``None`` when it is not ``as_type``."""
        return self.resolve(key).as_type(as_type)

    def get_string(self, key: ParameterKeyLike) -> Optional[str]:
        return self.get_value(key, str)

    def get_int(self, key: ParameterKeyLike) -> Optional[int]:
        return self.get_value(key, int)

    def get_double(self, key: ParameterKeyLike) -> Optional[float]:
        return self.get_value(key, float)

    def get_bool(self, key: ParameterKeyLike) -> Optional[bool]:
        return self.get_value(key, bool)

    def get_string_list(self, key: ParameterKeyLike) -> Optional[List[str]]:
        return self.get_value(key, list)

    def set_value(self, key: ParameterKeyLike, value: ParameterValue) -> None:
        key = parse_parameter(key)
        if value.kind is not key.kind:
            raise ParameterKindError(key.value, key.kind.value, value.kind.value)

        def _apply(state: ParameterState) -> None:
            state.local_overrides[key.value] = value

        self._mutate(_apply)

    def reset(self, key: ParameterKeyLike) -> None:
        key = parse_parameter(key)
        self._mutate(lambda state: state.local_overrides.pop(key.value, None))

    def reset_all(self) -> None:
        self._mutate(lambda state: state.local_overrides.clear())

    def has_local_override(self, key: ParameterKeyLike) -> bool:
        key = parse_parameter(key)
        with self._lock:
            return key.value in self._state.local_overrides


__all__ = ["DefaultParameterService", "ParameterKeyLike", "ParameterService"]
