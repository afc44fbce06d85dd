from __future__ import annotations

from typing import Union

from pydantic import BaseModel


class VehicleFiltersModel(BaseModel):
    year: Union[int, str] = "All"
    manufacturer: str = "All"
    car_model: str = "All"
    car_type: str = "All"
    transmission_type: str = "All"
    mpg_type: str = "Combined"
