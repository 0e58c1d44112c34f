"""Energy expenditure estimates used as prompt context."""

from fitness_planner.domain.profiles import ActivityLevel, Gender, Goal, Profile

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

GOAL_ADJUSTMENT_KCAL = 400


def mifflin_st_jeor_bmr(profile: Profile) -> float:
    """Return basal metabolic rate in kcal/day (Mifflin-St Jeor)."""
    base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
    return base + (5 if profile.gender is Gender.MALE else -161)


def daily_calorie_target(profile: Profile) -> int:
    """Return a goal-adjusted daily calorie target."""
    tdee = mifflin_st_jeor_bmr(profile) * ACTIVITY_MULTIPLIERS[profile.activity_level]
    if profile.goal is Goal.WEIGHT_LOSS:
        tdee -= GOAL_ADJUSTMENT_KCAL
    elif profile.goal is Goal.MUSCLE_GAIN:
        tdee += GOAL_ADJUSTMENT_KCAL
    return round(tdee)
