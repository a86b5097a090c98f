import logging

import pytest

from trainlog.schemas.records import CircumferenceUnit, WeightUnit
from trainlog.services.unit_service import UnitConverter, round_half_up


@pytest.fixture
def converter():
    return UnitConverter()


def test_kg_to_lbs_rounds_to_whole_pounds(converter):
    assert converter.convert_weight(80, "kg", "lbs") == 176


def test_lbs_to_kg(converter):
    assert converter.convert_weight(100, WeightUnit.LBS, WeightUnit.KG) == 45


def test_same_unit_is_identity(converter):
    assert converter.convert_weight(72.5, "kg", "kg", rounded=False) == 72.5


def test_unrounded_conversion_keeps_precision(converter):
    assert converter.convert_weight(100, "lbs", "kg", rounded=False) == pytest.approx(45.3592)


@pytest.mark.parametrize("pounds", [45, 100, 135, 225, 315])
def test_round_trip_stays_within_one_unit(converter, pounds):
    kilograms = converter.convert_weight(pounds, "lbs", "kg", rounded=False)
    assert abs(converter.convert_weight(kilograms, "kg", "lbs") - pounds) <= 1


@pytest.mark.parametrize("source, target", [("lbs", "kg"), ("kg", "lbs")])
def test_rounded_round_trip_stays_within_one_unit(converter, source, target):
    for value in range(0, 1000):
        there = converter.convert_weight(value, source, target)
        back = converter.convert_weight(there, target, source)
        assert abs(back - value) <= 1, value


def test_missing_unit_defaults_to_lbs(converter, caplog):
    with caplog.at_level(logging.WARNING):
        assert converter.normalize_weight_unit(None) == WeightUnit.LBS
    assert "assuming lbs" in caplog.text
    assert converter.convert_weight(100, None, "lbs") == 100


def test_unit_tags_are_case_insensitive(converter):
    assert converter.normalize_weight_unit(" KG ") == WeightUnit.KG


def test_circumference_unit_follows_weight_unit(converter):
    assert converter.get_circumference_unit("lbs") == CircumferenceUnit.INCHES
    assert converter.get_circumference_unit("kg") == CircumferenceUnit.CM


def test_circumference_conversion_from_canonical_cm(converter):
    assert converter.convert_circumference(38.1, "lbs") == pytest.approx(15.0)
    assert converter.convert_circumference(38.1, "kg") == 38.1


def test_format_helpers(converter):
    assert converter.format_weight(176.4, "lbs") == "176 lbs"
    assert converter.format_circumference(38.1, "lbs") == "15 in"
    assert converter.format_circumference(38.14, "kg") == "38.1 cm"
    assert converter.format_circumference(None, "kg") == "N/A"


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2
