"""Tests des filtres durs."""

from colocmatch.config import AttributeDefinition
from colocmatch.matching.comparators import NO_DATA, FieldComparison
from colocmatch.matching.filters import hard_filter_failed


def test_soft_attribute_never_fails() -> None:
    d = AttributeDefinition("region", "categorical")
    assert not hard_filter_failed(d, FieldComparison(0.0, 1.0, "mismatch"))


def test_categorical_requires_exact_match() -> None:
    d = AttributeDefinition("region", "categorical", hard_filter=True)
    assert hard_filter_failed(d, FieldComparison(0.0, 1.0, "mismatch"))
    assert not hard_filter_failed(d, FieldComparison(1.0, 1.0, "exact match"))


def test_numeric_uses_threshold() -> None:
    d = AttributeDefinition("budget", "numeric_range", range_span=500, hard_filter=True, threshold=0.5)
    assert hard_filter_failed(d, FieldComparison(0.4, 1.0, ""))
    assert not hard_filter_failed(d, FieldComparison(0.5, 1.0, ""))


def test_missing_data_fails() -> None:
    d = AttributeDefinition("region", "categorical", hard_filter=True)
    assert hard_filter_failed(d, NO_DATA)


def test_missing_data_fails_numeric_threshold() -> None:
    d = AttributeDefinition("budget", "numeric_range", range_span=500, hard_filter=True, threshold=0.2)
    assert hard_filter_failed(d, NO_DATA)


def test_missing_data_on_soft_attribute_is_neutral() -> None:
    d = AttributeDefinition("region", "categorical")
    assert not hard_filter_failed(d, NO_DATA)
