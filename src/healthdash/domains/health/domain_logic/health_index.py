"""Body-composition formulas: BMI, BMI category and target daily calories.

All functions are deterministic. Missing profile attributes yield documented
defaults instead of errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from healthdash.domains.health.domain_logic.reading_models import round_half_up

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TARGET_CALORIES = 2000
DEFAULT_ACTIVITY_LEVEL = "sedentary"

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "lightly_active": 1.375,
    "moderately_active": 1.55,
    "very_active": 1.725,
    "extremely_active": 1.9,
}

# Upper bounds are exclusive: a BMI of exactly 25.0 is "Overweight".
BMI_CATEGORIES = [
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
]
BMI_TOP_CATEGORY = "Obese"


@dataclass
class BodyProfile:
    """Profile attributes used by the calculators. Any of them may be unknown."""

    height_cm: float | None = None
    weight_kg: float | None = None
    age: float | None = None
    gender: str | None = None
    activity_level: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BodyProfile:
        """Accepts both ``height_cm``/``weight_kg`` and the short ``height``/``weight`` keys."""
        return cls(
            height_cm=_optional_number(data.get("height_cm", data.get("height"))),
            weight_kg=_optional_number(data.get("weight_kg", data.get("weight"))),
            age=_optional_number(data.get("age")),
            gender=data.get("gender") or None,
            activity_level=data.get("activity_level") or None,
        )


def _optional_number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# BMI
# ---------------------------------------------------------------------------

def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Body mass index rounded to one decimal.

    Raises:
        ValueError: If height is not positive.
    """
    if height_cm <= 0:
        raise ValueError(f"Height must be positive, got {height_cm!r}")
    height_m = height_cm / 100
    return round_half_up(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: float) -> str:
    """WHO adult category for a BMI value."""
    for upper, label in BMI_CATEGORIES:
        if bmi < upper:
            return label
    return BMI_TOP_CATEGORY


# ---------------------------------------------------------------------------
# Calories
# ---------------------------------------------------------------------------

def basal_metabolic_rate(weight_kg: float, height_cm: float, age: float, gender: str) -> float:
    """Mifflin-St Jeor BMR. Any gender other than ``male`` uses the -161 offset."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == "male":
        return base + 5
    return base - 161


def activity_multiplier(activity_level: str | None) -> float:
    if activity_level and activity_level in ACTIVITY_MULTIPLIERS:
        return ACTIVITY_MULTIPLIERS[activity_level]
    if activity_level:
        logger.debug("Unknown activity level %r; using sedentary", activity_level)
    return ACTIVITY_MULTIPLIERS[DEFAULT_ACTIVITY_LEVEL]


def calculate_target_calories(profile: BodyProfile) -> int:
    """Daily calorie target: BMR times the activity multiplier.

    Returns ``DEFAULT_TARGET_CALORIES`` when age, weight, height or gender is
    missing (zero counts as missing).
    """
    if not profile.age or not profile.weight_kg or not profile.height_cm or not profile.gender:
        return DEFAULT_TARGET_CALORIES

    bmr = basal_metabolic_rate(
        profile.weight_kg, profile.height_cm, profile.age, profile.gender
    )
    return int(round_half_up(bmr * activity_multiplier(profile.activity_level)))


def body_metrics(profile: BodyProfile) -> dict[str, Any]:
    """BMI, its category and the calorie target for a profile."""
    bmi: float | None = None
    category: str | None = None
    if profile.height_cm and profile.weight_kg and profile.height_cm > 0:
        bmi = calculate_bmi(profile.height_cm, profile.weight_kg)
        category = bmi_category(bmi)

    return {
        "bmi": bmi,
        "bmi_category": category,
        "target_calories": calculate_target_calories(profile),
    }
