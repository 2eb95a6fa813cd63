"""Best-effort persistence of resolved state under a single key."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Generic, Mapping, Protocol, TypeVar

from services.feature_flags.state import FlagState, ParameterState
from services.json_store import KeyValueStore

logger = logging.getLogger(__name__)

S = TypeVar("S")

FLAGS_STATE_KEY = "feature_flags_state"
PARAMETERS_STATE_KEY = "feature_flag_parameters_state"


class StateStore(Protocol[S]):
    def load_state(self) -> S:
        ...

    def save_state(self, state: S) -> None:
        ...


class JsonStateStorage(Generic[S]):
    """Load/save one state object as a JSON blob.

    Missing or undecodable blobs load as the empty state; write failures are
    logged and dropped. The in-memory state stays authoritative either way.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        *,
        key: str,
        empty: Callable[[], S],
        decode: Callable[[Mapping[str, Any]], S],
        encode: Callable[[S], Dict[str, Any]],
    ) -> None:
        self._backend = backend
        self._key = key
        self._empty = empty
        self._decode = decode
        self._encode = encode

    @property
    def key(self) -> str:
        return self._key

    def load_state(self) -> S:
        try:
            blob = self._backend.get(self._key)
            if blob is None:
                return self._empty()
            payload = json.loads(blob)
            if not isinstance(payload, Mapping):
                raise ValueError("persisted state is not a JSON object")
            return self._decode(payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Discarding persisted state %s: %s", self._key, exc)
            return self._empty()

    def save_state(self, state: S) -> None:
        try:
            blob = json.dumps(self._encode(state), ensure_ascii=False)
            self._backend.set(self._key, blob)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to persist state %s: %s", self._key, exc)
            return
        logger.debug("Persisted state %s", self._key)


def flag_state_storage(backend: KeyValueStore, *, key: str = FLAGS_STATE_KEY) -> JsonStateStorage[FlagState]:
    return JsonStateStorage(
        backend,
        key=key,
        empty=FlagState.empty,
        decode=FlagState.from_document,
        encode=lambda state: state.to_document(),
    )


def parameter_state_storage(
    backend: KeyValueStore,
    *,
    key: str = PARAMETERS_STATE_KEY,
) -> JsonStateStorage[ParameterState]:
    return JsonStateStorage(
        backend,
        key=key,
        empty=ParameterState.empty,
        decode=ParameterState.from_document,
        encode=lambda state: state.to_document(),
    )


__all__ = [
    "FLAGS_STATE_KEY",
    "JsonStateStorage",
    "PARAMETERS_STATE_KEY",
    "StateStore",
    "flag_state_storage",
    "parameter_state_storage",
]
