from __future__ import annotations

import pandas as pd
import pytest

from core.filters import (
    ALL,
    VehicleFilters,
    apply_filters,
    car_type_options,
    manufacturer_options,
    model_options,
    normalize_filters,
    year_options,
)


def test_unrestricted_filters_return_full_input_in_order(records: pd.DataFrame) -> None:
    out = apply_filters(records, VehicleFilters())

    pd.testing.assert_frame_equal(out, records)


def test_filters_are_anded_and_keep_input_order(records: pd.DataFrame) -> None:
    out = apply_filters(records, VehicleFilters(manufacturer="Toyota", car_type="Midsize Cars"))

    assert out["carline_name"].tolist() == ["Camry", "ES 350"]
    assert out.index.tolist() == [0, 3]


def test_year_filter_matches_string_and_int_years(records: pd.DataFrame) -> None:
    by_int = apply_filters(records, VehicleFilters(year=2022))
    by_str = apply_filters(records, VehicleFilters(year="2022"))

    assert by_int["carline_name"].tolist() == ["Corolla", "ES 350"]
    assert by_str.index.tolist() == by_int.index.tolist()


def test_car_model_filter_is_exact(records: pd.DataFrame) -> None:
    assert apply_filters(records, VehicleFilters(car_model="Civic")).index.tolist() == [1]
    assert apply_filters(records, VehicleFilters(car_model="civic")).empty


def test_transmission_filter_drops_blank_and_missing_descriptions() -> None:
    df = pd.DataFrame({"transmission": ["Automatic 6-Spd", "Manual 5-Spd", "", None]})

    out = apply_filters(df, VehicleFilters(transmission_type="Automatic"))

    assert out.index.tolist() == [0]


def test_transmission_filter_excludes_descriptions_outside_vocabulary(records: pd.DataFrame) -> None:
    automatic = apply_filters(records, VehicleFilters(transmission_type="Automatic"))
    manual = apply_filters(records, VehicleFilters(transmission_type="Manual"))

    assert automatic["carline_name"].tolist() == ["Camry", "Corolla", "ES 350"]
    assert manual["carline_name"].tolist() == ["Civic", "Mustang"]
    assert "Accord" not in set(automatic["carline_name"]) | set(manual["carline_name"])


def test_mpg_type_does_not_filter(records: pd.DataFrame) -> None:
    out = apply_filters(records, VehicleFilters(mpg_type="City"))

    assert len(out) == len(records)


def test_filtering_does_not_modify_input(records: pd.DataFrame) -> None:
    before = records.copy()

    apply_filters(records, VehicleFilters(manufacturer="Honda", transmission_type="Manual"))

    pd.testing.assert_frame_equal(records, before)


def test_empty_input_returns_empty_result() -> None:
    out = apply_filters(pd.DataFrame(columns=["manufacturer_name"]), VehicleFilters(manufacturer="Toyota"))

    assert out.empty


def test_missing_column_for_active_predicate_yields_nothing(records: pd.DataFrame) -> None:
    out = apply_filters(records.drop(columns=["carline_class"]), VehicleFilters(car_type="Compact Cars"))

    assert out.empty


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({}, VehicleFilters()),
        ({"year": "2023"}, VehicleFilters(year=2023)),
        ({"year": "bogus"}, VehicleFilters()),
        ({"transmission_type": "CVT"}, VehicleFilters()),
        ({"mpg_type": "Offroad"}, VehicleFilters()),
        ({"manufacturer": "Honda", "mpg_type": "Highway"}, VehicleFilters(manufacturer="Honda", mpg_type="Highway")),
    ],
)
def test_normalize_filters(raw: dict, expected: VehicleFilters) -> None:
    assert normalize_filters(raw) == expected


def test_mpg_column_follows_mpg_type() -> None:
    assert VehicleFilters(mpg_type="City").mpg_column == "city_mpg"
    assert VehicleFilters(mpg_type="Highway").mpg_column == "highway_mpg"
    assert VehicleFilters().mpg_column == "combined_mpg"


def test_filter_options(records: pd.DataFrame) -> None:
    assert year_options(records) == [ALL, 2021, 2022, 2023]
    assert manufacturer_options(records) == [ALL, "Ford", "Honda", "Toyota"]
    assert car_type_options(records) == [ALL, "Compact Cars", "Midsize Cars", "Subcompact Cars"]


def test_model_options_are_scoped_to_manufacturer(records: pd.DataFrame) -> None:
    assert model_options(records, ALL) == [ALL]
    assert model_options(records, "Toyota") == [ALL, "Camry", "Corolla", "ES 350"]
    assert model_options(records, "Tesla") == [ALL]


def test_is_unrestricted_ignores_mpg_type() -> None:
    assert VehicleFilters().is_unrestricted()
    assert VehicleFilters(mpg_type="City").is_unrestricted()
    assert not VehicleFilters(year=2021).is_unrestricted()
    assert not VehicleFilters(transmission_type="Manual").is_unrestricted()
