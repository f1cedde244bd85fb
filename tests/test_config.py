"""Tests du module config."""

import json
from pathlib import Path

import pytest

from colocmatch.config import (
    AttributeDefinition,
    AttributeModel,
    AttributeNotFound,
    ConfigurationError,
    EngineConfig,
)


def region_budget() -> list[dict]:
    return [
        {"key": "region", "domain": "categorical", "weight": 50, "hard_filter": True},
        {
            "key": "budget",
            "domain": "numeric_range",
            "weight": 50,
            "min_value": 500,
            "max_value": 3000,
            "range_span": 500,
        },
    ]


def test_attribute_model_preserves_registration_order() -> None:
    model = AttributeModel.from_list(region_budget())
    assert model.keys() == ["region", "budget"]
    assert [d.key for d in model.list_attributes()] == ["region", "budget"]
    assert len(model) == 2
    assert "budget" in model


def test_get_attribute() -> None:
    model = AttributeModel.from_list(region_budget())
    budget = model.get_attribute("budget")
    assert budget.domain == "numeric_range"
    assert budget.range_span == 500.0
    assert budget.hard_filter is False


def test_get_attribute_unknown() -> None:
    model = AttributeModel.from_list(region_budget())
    with pytest.raises(AttributeNotFound, match="Attribut inconnu"):
        model.get_attribute("hobbies")
    # AttributeNotFound reste un KeyError
    with pytest.raises(KeyError):
        model.get_attribute("hobbies")


def test_config_validation_duplicate_key() -> None:
    items = region_budget() + [{"key": "region", "domain": "categorical"}]
    with pytest.raises(ConfigurationError, match="Attribut en double"):
        AttributeModel.from_list(items)


def test_config_validation_negative_weight() -> None:
    with pytest.raises(ConfigurationError, match="weight doit être >= 0"):
        AttributeDefinition.from_dict({"key": "a", "domain": "boolean", "weight": -1})


def test_config_validation_zero_weight_allowed() -> None:
    d = AttributeDefinition.from_dict({"key": "a", "domain": "boolean", "weight": 0})
    assert d.weight == 0.0


def test_config_validation_invalid_domain() -> None:
    with pytest.raises(ConfigurationError, match="domain invalide"):
        AttributeDefinition.from_dict({"key": "a", "domain": "fuzzy"})


def test_config_validation_missing_key() -> None:
    with pytest.raises(ConfigurationError, match="key requis"):
        AttributeDefinition.from_dict({"domain": "boolean"})


def test_config_validation_numeric_requires_span() -> None:
    with pytest.raises(ConfigurationError, match="range_span"):
        AttributeDefinition.from_dict({"key": "budget", "domain": "numeric_range"})


def test_config_validation_numeric_bounds() -> None:
    with pytest.raises(ConfigurationError, match="min_value > max_value"):
        AttributeDefinition.from_dict(
            {"key": "budget", "domain": "numeric_range", "range_span": 10, "min_value": 5, "max_value": 1}
        )


def test_config_validation_threshold_range() -> None:
    with pytest.raises(ConfigurationError, match="threshold"):
        AttributeDefinition.from_dict({"key": "tags", "domain": "multi_select", "threshold": 1.5})


def test_config_validation_weight_not_number() -> None:
    with pytest.raises(ConfigurationError, match="weight doit être un nombre"):
        AttributeDefinition.from_dict({"key": "a", "domain": "boolean", "weight": "lots"})


def test_filter_threshold_defaults() -> None:
    cat = AttributeDefinition("region", "categorical", hard_filter=True, threshold=0.2)
    num = AttributeDefinition("budget", "numeric_range", range_span=100, hard_filter=True, threshold=0.6)
    tags = AttributeDefinition("tags", "multi_select", hard_filter=True)
    assert cat.filter_threshold == 1.0
    assert num.filter_threshold == 0.6
    assert tags.filter_threshold == 1.0


def test_engine_config_defaults() -> None:
    config = EngineConfig.from_dict({"attributes": region_budget()})
    assert config.min_score == 0.0
    assert config.top_k is None
    assert config.include_excluded is False
    assert config.id_column == "user_id"


def test_engine_config_requires_attributes() -> None:
    with pytest.raises(ConfigurationError, match="au moins un attribut"):
        EngineConfig.from_dict({"attributes": []})


def test_engine_config_min_score_out_of_range() -> None:
    with pytest.raises(ConfigurationError, match="min_score"):
        EngineConfig.from_dict({"attributes": region_budget(), "min_score": 150})


def test_engine_config_top_k() -> None:
    with pytest.raises(ConfigurationError, match="top_k doit être >= 1"):
        EngineConfig.from_dict({"attributes": region_budget(), "top_k": 0})
    config = EngineConfig.from_dict({"attributes": region_budget(), "top_k": "5"})
    assert config.top_k == 5


def test_engine_config_load(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"attributes": region_budget(), "min_score": 40, "id_column": "email"}),
        encoding="utf-8",
    )
    config = EngineConfig.load(config_path)
    assert config.model.keys() == ["region", "budget"]
    assert config.min_score == 40.0
    assert config.id_column == "email"
