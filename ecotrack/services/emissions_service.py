"""
Carbon footprint estimation.
Converts onboarding survey answers into yearly emissions per category.

All intermediate figures are kg CO2 per year; the result is converted to
metric tons and rounded to 2 decimals. Every field is optional: missing or
unparsable numbers count as 0 and unknown options fall back to the
documented defaults, so the calculation never fails.
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from ecotrack.schemas import EmissionsBreakdown
from ecotrack.constants import (
    KG_PER_TON,
    WEEKS_PER_YEAR,
    MONTHS_PER_YEAR,
    CAR_EMISSION_FACTORS,
    DEFAULT_CAR_EMISSION_FACTOR,
    KG_PER_FLIGHT,
    PUBLIC_TRANSPORT_MULTIPLIERS,
    KWH_PER_DOLLAR,
    ENERGY_SOURCE_FACTORS,
    DEFAULT_ENERGY_SOURCE_FACTOR,
    HOME_SIZE_MULTIPLIERS,
    DIET_BASE_EMISSIONS,
    DEFAULT_DIET_EMISSIONS,
    LOCAL_FOOD_MULTIPLIERS,
    FOOD_WASTE_MULTIPLIERS,
    CLOTHES_BASE_EMISSIONS,
    DEFAULT_CLOTHES_EMISSIONS,
    SECOND_HAND_MULTIPLIERS,
    KG_PER_PACKAGE,
    WASTE_BASE_EMISSIONS,
    RECYCLING_MULTIPLIERS,
    COMPOSTING_MULTIPLIERS,
    PLASTIC_MULTIPLIERS,
)


class EmissionsService:
    """Pure emissions calculator (no database access)"""

    @staticmethod
    def calculate_emissions(answers: Mapping[str, Any]) -> EmissionsBreakdown:
        """
        Calculate category and total emissions from survey answers.

        Args:
            answers: Question key -> answer (numeric string/number or option string)

        Returns:
            EmissionsBreakdown in metric tons
        """
        transportation = EmissionsService.calculate_transportation(answers)
        energy = EmissionsService.calculate_energy(answers)
        diet = EmissionsService.calculate_diet(answers)
        shopping = EmissionsService.calculate_shopping(answers)
        waste = EmissionsService.calculate_waste(answers)

        yearly_total = transportation + energy + diet + shopping + waste
        monthly_total = yearly_total / MONTHS_PER_YEAR

        return EmissionsBreakdown(
            yearly=_to_tons(yearly_total),
            monthly=_to_tons(monthly_total),
            transportation=_to_tons(transportation),
            energy=_to_tons(energy),
            diet=_to_tons(diet),
            shopping=_to_tons(shopping),
            waste=_to_tons(waste),
        )

    @staticmethod
    def calculate_transportation(answers: Mapping[str, Any]) -> float:
        """
        Driving plus flights, reduced by public transport use.

        Car factor (kg/mile): Gas 0.404 (default), Hybrid 0.25, Electric 0.1, No car 0
        """
        miles_per_year = _number(answers, "carMiles") * WEEKS_PER_YEAR
        car_factor = CAR_EMISSION_FACTORS.get(_option(answers, "carType"), DEFAULT_CAR_EMISSION_FACTOR)

        transportation = miles_per_year * car_factor
        transportation += _number(answers, "flights") * KG_PER_FLIGHT

        return transportation * PUBLIC_TRANSPORT_MULTIPLIERS.get(_option(answers, "publicTransport"), 1.0)

    @staticmethod
    def calculate_energy(answers: Mapping[str, Any]) -> float:
        """Home energy: monthly bill -> yearly kWh -> kg, scaled by home size"""
        annual_kwh = _number(answers, "monthlyBill") * MONTHS_PER_YEAR * KWH_PER_DOLLAR
        source_factor = ENERGY_SOURCE_FACTORS.get(_option(answers, "energySource"), DEFAULT_ENERGY_SOURCE_FACTOR)

        energy = annual_kwh * source_factor
        return energy * HOME_SIZE_MULTIPLIERS.get(_option(answers, "homeSize"), 1.0)

    @staticmethod
    def calculate_diet(answers: Mapping[str, Any]) -> float:
        diet = DIET_BASE_EMISSIONS.get(_option(answers, "dietType"), DEFAULT_DIET_EMISSIONS)
        diet *= LOCAL_FOOD_MULTIPLIERS.get(_option(answers, "localFood"), 1.0)
        diet *= FOOD_WASTE_MULTIPLIERS.get(_option(answers, "foodWaste"), 1.0)
        return diet

    @staticmethod
    def calculate_shopping(answers: Mapping[str, Any]) -> float:
        """Clothes (reduced by second-hand buying) plus online packages"""
        shopping = CLOTHES_BASE_EMISSIONS.get(_option(answers, "clothesShopping"), DEFAULT_CLOTHES_EMISSIONS)
        shopping *= SECOND_HAND_MULTIPLIERS.get(_option(answers, "secondHand"), 1.0)

        packages_per_year = _number(answers, "onlineShopping") * MONTHS_PER_YEAR
        return shopping + packages_per_year * KG_PER_PACKAGE

    @staticmethod
    def calculate_waste(answers: Mapping[str, Any]) -> float:
        waste = WASTE_BASE_EMISSIONS
        waste *= RECYCLING_MULTIPLIERS.get(_option(answers, "recycling"), 1.0)
        waste *= COMPOSTING_MULTIPLIERS.get(_option(answers, "composting"), 1.0)
        waste *= PLASTIC_MULTIPLIERS.get(_option(answers, "plastic"), 1.0)
        return waste


def _number(answers: Mapping[str, Any], key: str) -> float:
    """Parse a numeric answer; anything unusable is 0"""
    value = answers.get(key)
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _option(answers: Mapping[str, Any], key: str) -> Optional[str]:
    """Get an enumerated answer; non-string values are treated as missing"""
    value = answers.get(key)
    if not isinstance(value, str):
        return None
    return value.strip()


def _to_tons(kg: float) -> float:
    """kg -> metric tons, rounded half-up to 2 decimals"""
    tons = Decimal(repr(kg)) / Decimal(repr(KG_PER_TON))
    return float(tons.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
