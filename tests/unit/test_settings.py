"""Tests for configuration models and the versioned settings holder."""

from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from strokefit.config import (
    ApproximatorSettings,
    SettingsChanged,
    SettingsModel,
    StrategyName,
    StrokefitSettings,
    deep_merge,
    get_default_settings,
    merge_settings,
    resolve_settings,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_priority_tiers(self) -> None:
        """Test default ranking tiers."""
        priorities = ApproximatorSettings().priorities
        assert priorities.piecewise_linear == 0
        assert priorities.constant == 1
        assert priorities.linear == 2
        assert priorities.single_quadratic == 3
        assert priorities.single_circle == 4
        assert priorities.quadratic_bspline == 5
        assert priorities.quadratic_chain == 6
        assert priorities.selective == 7

    def test_quadratic_chain_disabled_by_default(self) -> None:
        strategies = ApproximatorSettings().strategies
        assert not strategies.quadratic_chain.enabled
        assert all(
            strategies.get(name).enabled
            for name in StrategyName
            if name != StrategyName.QUADRATIC_CHAIN
        )

    def test_scoring_constants(self) -> None:
        scoring = ApproximatorSettings().scoring
        assert scoring.linearity_baseline == 1.0
        assert scoring.linearity_floor == 0.0

    def test_application_defaults(self) -> None:
        """Test root settings defaults."""
        settings = get_default_settings()
        assert isinstance(settings, StrokefitSettings)
        assert settings.curves.color == "#000000"
        assert settings.curves.size == 2.0
        assert settings.curves.min_knots == 2
        assert settings.curves.max_knots == 10
        assert settings.debounce_seconds == 0.1

    def test_global_accepts_alias_and_field_name(self) -> None:
        """Test that the global block is reachable under both names."""
        by_alias = ApproximatorSettings.model_validate({"global": {"snap": True}})
        by_name = ApproximatorSettings(global_={"snap": True})
        assert by_alias.global_.snap
        assert by_name.global_.snap

    def test_settings_are_frozen(self) -> None:
        settings = ApproximatorSettings()
        with pytest.raises(ValidationError):
            settings.strategies.linear.tolerance = 0.5  # type: ignore

    def test_invalid_tolerance_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ApproximatorSettings.model_validate({"strategies": {"linear": {"tolerance": -1}}})


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_nested_keys_merge(self) -> None:
        """Test that nested mappings merge key by key."""
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        merged = deep_merge(base, {"a": {"y": 5}})
        assert merged == {"a": {"x": 1, "y": 5}, "b": 3}

    def test_scalar_replaces_mapping(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": 2}) == {"a": 2}

    def test_inputs_not_modified(self) -> None:
        base = {"a": {"x": 1}}
        override = {"a": {"x": 2}}
        deep_merge(base, override)
        assert base == {"a": {"x": 1}}
        assert override == {"a": {"x": 2}}


class TestMergeAndResolve:
    """Tests for merge_settings and resolve_settings."""

    def test_partial_override_keeps_siblings(self) -> None:
        """Test that a partial strategy override keeps the other fields."""
        merged = merge_settings(
            ApproximatorSettings(), {"strategies": {"linear": {"tolerance": 0.05}}}
        )
        assert merged.strategies.linear.tolerance == 0.05
        assert merged.strategies.linear.flat_slope == 0.05
        assert merged.strategies.piecewise_linear.max_segments == 4

    def test_field_name_key_for_global(self) -> None:
        merged = merge_settings(ApproximatorSettings(), {"global_": {"snap": True}})
        assert merged.global_.snap

    def test_priorities_configurable(self) -> None:
        merged = merge_settings(ApproximatorSettings(), {"priorities": {"selective": 6}})
        assert merged.priorities.selective == 6
        assert merged.priorities.quadratic_bspline == 5

    def test_resolve_propagates_snap(self) -> None:
        """Test that the global snap flag reaches every option bag."""
        settings = ApproximatorSettings.model_validate({"global": {"snap": True}})
        resolved = resolve_settings(settings)
        assert all(resolved.strategies.get(name).snap for name in StrategyName)

    def test_resolve_overrides_strategy_snap(self) -> None:
        settings = ApproximatorSettings.model_validate(
            {"global": {"snap": False}, "strategies": {"linear": {"snap": True}}}
        )
        assert not resolve_settings(settings).strategies.linear.snap


class TestSettingsModel:
    """Tests for SettingsModel class."""

    @pytest.fixture
    def model(self) -> SettingsModel:
        """Create a settings model with defaults."""
        return SettingsModel()

    def test_initial_state(self, model: SettingsModel) -> None:
        assert model.version == 0
        assert model.resolved == resolve_settings(ApproximatorSettings())

    def test_update_bumps_version_and_notifies(self, model: SettingsModel) -> None:
        """Test that a real change bumps the version and emits one event."""
        listener = Mock()
        model.subscribe(listener)

        resolved = model.update({"global": {"snap": True}}, source="ui", persist=False)

        assert model.version == 1
        assert resolved.strategies.linear.snap
        listener.assert_called_once()
        event = listener.call_args.args[0]
        assert isinstance(event, SettingsChanged)
        assert event.source == "ui"
        assert event.persist is False
        assert event.settings is resolved
        assert event.version == 1

    def test_identical_update_is_silent(self, model: SettingsModel) -> None:
        """Test that a no-op update neither bumps nor notifies."""
        listener = Mock()
        model.subscribe(listener)
        model.update({"global": {"snap": True}})
        listener.reset_mock()

        before = model.resolved
        result = model.update({"global": {"snap": True}})

        assert result is before
        assert model.version == 1
        listener.assert_not_called()

    def test_silent_update_applies_without_event(self, model: SettingsModel) -> None:
        listener = Mock()
        model.subscribe(listener)
        model.update({"strategies": {"selective": {"line_weight": 2.0}}}, silent=True)
        assert model.resolved.strategies.selective.line_weight == 2.0
        assert model.version == 1
        listener.assert_not_called()

    def test_unsubscribe(self, model: SettingsModel) -> None:
        listener = Mock()
        model.subscribe(listener)
        model.unsubscribe(listener)
        model.update({"global": {"snap": True}})
        listener.assert_not_called()

    def test_update_with_full_value(self, model: SettingsModel) -> None:
        """Test that a complete settings value can be applied."""
        target = ApproximatorSettings.model_validate({"scoring": {"linearity_floor": 0.1}})
        resolved = model.update(target)
        assert resolved.scoring.linearity_floor == 0.1

    def test_model_keeps_unresolved_value(self, model: SettingsModel) -> None:
        model.update({"global": {"snap": True}})
        assert model.model.global_.snap
        assert not model.model.strategies.linear.snap
        assert model.resolved.strategies.linear.snap
