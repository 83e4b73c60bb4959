"""Versioned approximation settings.

The settings value handed to strategies is immutable. Updates go through
``SettingsModel.update``: a partial mapping is deep-merged over the current
value, the result is resolved (global flags pushed into every option bag) and,
when it differs from the current value, the version is bumped and listeners
are notified.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from strokefit.config.settings import ApproximatorSettings, StrategyName

logger = structlog.get_logger("strokefit.settings")


@dataclass(frozen=True)
class SettingsChanged:
    """Notification emitted when the resolved settings change.

    Attributes:
        source: Who requested the change (e.g. "cli", "curve-manager")
        settings: The new resolved settings
        persist: Whether listeners should persist the new value
        version: Version number of the new value
    """

    source: str
    settings: ApproximatorSettings
    persist: bool
    version: int


SettingsListener = Callable[[SettingsChanged], None]


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` recursively, key by key.

    Nested mappings are merged; any other value in ``override`` replaces the
    one in ``base``. Neither input is modified.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _normalize_keys(partial: Mapping[str, Any]) -> dict[str, Any]:
    normalized = dict(partial)
    if "global_" in normalized:
        normalized["global"] = deep_merge(normalized.get("global", {}), normalized.pop("global_"))
    return normalized


def merge_settings(
    base: ApproximatorSettings, partial: Mapping[str, Any] | ApproximatorSettings
) -> ApproximatorSettings:
    """Return a new settings value with ``partial`` merged over ``base``."""
    if isinstance(partial, ApproximatorSettings):
        partial = partial.model_dump(by_alias=True)
    merged = deep_merge(base.model_dump(by_alias=True), _normalize_keys(partial))
    return ApproximatorSettings.model_validate(merged)


def resolve_settings(settings: ApproximatorSettings) -> ApproximatorSettings:
    """Propagate global flags into every per-strategy option bag."""
    snap = settings.global_.snap
    strategies = settings.strategies.model_copy(
        update={
            name.value: settings.strategies.get(name).model_copy(update={"snap": snap})
            for name in StrategyName
        }
    )
    return settings.model_copy(update={"strategies": strategies})


class SettingsModel:
    """Holds the current approximation settings as a versioned value.

    Example:
        model = SettingsModel()
        model.subscribe(print)
        model.update({"global": {"snap": True}}, source="cli")
    """

    def __init__(self, settings: ApproximatorSettings | None = None) -> None:
        """Initialize with a base settings value.

        Args:
            settings: Initial (unresolved) settings, defaults if None
        """
        self._model = settings or ApproximatorSettings()
        self._resolved = resolve_settings(self._model)
        self._version = 0
        self._listeners: list[SettingsListener] = []

    @property
    def model(self) -> ApproximatorSettings:
        """The merged, unresolved settings value."""
        return self._model

    @property
    def resolved(self) -> ApproximatorSettings:
        """The resolved settings value handed to strategies."""
        return self._resolved

    @property
    def version(self) -> int:
        """Number of effective changes applied so far."""
        return self._version

    def subscribe(self, listener: SettingsListener) -> None:
        """Register a listener for settings-change events."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SettingsListener) -> None:
        """Remove a previously registered listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update(
        self,
        partial: Mapping[str, Any] | ApproximatorSettings,
        source: str = "curve-manager",
        persist: bool = True,
        silent: bool = False,
    ) -> ApproximatorSettings:
        """Merge a partial override and resolve the result.

        Args:
            partial: Partial settings mapping (or a full settings value)
            source: Origin of the change, forwarded to listeners
            persist: Forwarded to listeners
            silent: Apply without notifying listeners

        Returns:
            The current resolved settings (unchanged if the merge was a no-op)
        """
        merged = merge_settings(self._model, partial)
        resolved = resolve_settings(merged)

        if resolved == self._resolved:
            return self._resolved

        self._model = merged
        self._resolved = resolved
        self._version += 1
        logger.debug("Settings updated", source=source, version=self._version)

        if not silent:
            event = SettingsChanged(
                source=source,
                settings=resolved,
                persist=persist,
                version=self._version,
            )
            for listener in list(self._listeners):
                listener(event)

        return self._resolved
