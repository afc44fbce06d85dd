from __future__ import annotations

import pandas as pd
import pytest


def make_records() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "model_year": 2021,
                "manufacturer_name": "Toyota",
                "carline_name": "Camry",
                "carline_class": "Midsize Cars",
                "division": "Toyota",
                "transmission": "Automatic (S8)",
                "engine_displacement": 2.5,
                "city_mpg": 28,
                "highway_mpg": 39,
                "combined_mpg": 32,
            },
            {
                "model_year": 2021,
                "manufacturer_name": "Honda",
                "carline_name": "Civic",
                "carline_class": "Compact Cars",
                "division": "Honda",
                "transmission": "Manual(M6)",
                "engine_displacement": 2.0,
                "city_mpg": 26,
                "highway_mpg": 36,
                "combined_mpg": 30,
            },
            {
                "model_year": 2022,
                "manufacturer_name": "Toyota",
                "carline_name": "Corolla",
                "carline_class": "Compact Cars",
                "division": "Toyota",
                "transmission": "Auto(AV-S10)",
                "engine_displacement": 1.8,
                "city_mpg": 30,
                "highway_mpg": 38,
                "combined_mpg": 33,
            },
            {
                "model_year": 2022,
                "manufacturer_name": "Toyota",
                "carline_name": "ES 350",
                "carline_class": "Midsize Cars",
                "division": "Lexus",
                "transmission": "Automatic (S8)",
                "engine_displacement": 3.5,
                "city_mpg": 22,
                "highway_mpg": 32,
                "combined_mpg": 26,
            },
            {
                "model_year": 2023,
                "manufacturer_name": "Honda",
                "carline_name": "Accord",
                "carline_class": "Midsize Cars",
                "division": "Honda",
                "transmission": "Selectable CVT",
                "engine_displacement": 1.5,
                "city_mpg": 29,
                "highway_mpg": 37,
                "combined_mpg": 32,
            },
            {
                "model_year": 2023,
                "manufacturer_name": "Ford",
                "carline_name": "Mustang",
                "carline_class": "Subcompact Cars",
                "division": "Ford",
                "transmission": "Manual(M6)",
                "engine_displacement": 5.0,
                "city_mpg": "N/A",
                "highway_mpg": 24,
                "combined_mpg": None,
            },
        ]
    )


@pytest.fixture
def records() -> pd.DataFrame:
    return make_records()


@pytest.fixture
def data_ctx(records: pd.DataFrame) -> dict:
    return {"files": ["2021.xlsx", "2022.xlsx", "2023.xlsx"], "years": [2021, 2022, 2023], "records": records}
