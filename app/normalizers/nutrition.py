"""Schema normalizer for nutrition plans, plus the calorie/macro calculators."""
from __future__ import annotations

import logging
from typing import Any

from app.models.records import (
    BudgetBreakdown,
    BudgetCategories,
    MacroAmount,
    MealPlan,
    MealSuggestion,
    NutritionMacros,
    NutritionPlan,
)
from app.models.schemas import NutritionRequest
from app.normalizers.common import (
    as_mapping,
    as_number,
    as_text,
    clamp,
    positive_number,
    round_half_up,
    string_list,
    string_list_or,
)


logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "very_active": 1.725,
    "extra_active": 1.9,
}
GOAL_CALORIE_FACTORS = {"lose_weight": 0.8, "build_muscle": 1.1, "maintain": 1.0}

# Percentages of daily calories: protein / carbs / fats
MACRO_PERCENTAGES: dict[str, tuple[int, int, int]] = {
    "build_muscle": (30, 45, 25),
    "lose_weight": (40, 30, 30),
    "maintain": (30, 40, 30),
}
KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fats": 9}

MEALS = ("breakfast", "lunch", "dinner", "snacks")
MAX_MEAL_OPTIONS = 2

# Share of the day per meal: calories, protein, carbs, fats
_MEAL_SHARES = {
    "breakfast": (0.25, 0.25, 0.30, 0.20),
    "lunch": (0.30, 0.35, 0.35, 0.25),
    "dinner": (0.30, 0.35, 0.25, 0.45),
    "snacks": (0.15, 0.15, 0.10, 0.10),
}
# Two canned options per meal: name, ingredients, prep minutes, cost
_CANNED_MEALS: dict[str, tuple[tuple[str, tuple[str, ...], int, float], ...]] = {
    "breakfast": (
        ("Protein Oatmeal with Berries", ("Rolled oats", "Whey protein powder", "Mixed berries", "Almond milk", "Chia seeds"), 10, 2.5),
        ("Veggie Egg Scramble with Toast", ("Eggs", "Spinach", "Bell peppers", "Whole grain bread"), 15, 2.0),
    ),
    "lunch": (
        ("Chicken and Vegetable Stir Fry with Rice", ("Chicken breast", "Brown rice", "Mixed vegetables", "Olive oil", "Low-sodium soy sauce"), 20, 3.5),
        ("Turkey and Quinoa Power Bowl", ("Ground turkey", "Quinoa", "Black beans", "Avocado", "Salsa"), 20, 4.0),
    ),
    "dinner": (
        ("Baked Salmon with Sweet Potato and Broccoli", ("Salmon fillet", "Sweet potato", "Broccoli", "Olive oil", "Lemon", "Herbs and spices"), 25, 5.0),
        ("Lean Beef Chili", ("Lean ground beef", "Kidney beans", "Tomatoes", "Onion", "Chili spices"), 30, 4.0),
    ),
    "snacks": (
        ("Greek Yogurt with Honey and Nuts", ("Greek yogurt", "Honey", "Mixed nuts"), 5, 1.5),
        ("Protein Shake", ("Whey protein powder", "Banana", "Almond milk", "Ice"), 5, 1.5),
    ),
}
_OPTION_SPLIT = (0.6, 0.4)

COMMON_TIPS = (
    "Stay hydrated by drinking at least 2-3 liters of water daily",
    "Eat protein with every meal to support muscle maintenance and growth",
    "Include a variety of colorful vegetables for micronutrients",
    "Plan and prep meals in advance to stay consistent",
    "Listen to your body and adjust portions based on hunger and fullness cues",
)
GOAL_TIPS = {
    "build_muscle": (
        "Consume protein within 30 minutes after your workout",
        "Ensure you are in a slight caloric surplus to support muscle growth",
        "Prioritize sleep for optimal recovery and hormone regulation",
    ),
    "lose_weight": (
        "Focus on high-volume, low-calorie foods to stay full while in a deficit",
        "Incorporate protein at every meal to preserve muscle mass",
        "Track your food intake to ensure you stay in a calorie deficit",
    ),
    "maintain": (
        "Monitor your weight weekly to ensure you are maintaining",
        "Adjust calories up or down based on weight trends",
        "Balance your macronutrients for optimal energy and recovery",
    ),
}
COMMON_SUPPLEMENTS = (
    "Whey protein powder for convenient protein intake",
    "Creatine monohydrate for improved strength and performance",
    "Vitamin D3 for immune function and bone health",
    "Omega-3 fatty acids for inflammation reduction and heart health",
)
GOAL_SUPPLEMENTS = {
    "build_muscle": ("Casein protein for slow-release protein before bed",),
    "lose_weight": ("Fiber supplements for increased satiety",),
    "maintain": ("Multivitamin for nutritional insurance",),
}

BUDGET_SHARES = {"protein": 0.40, "produce": 0.25, "grains": 0.15, "dairy": 0.10, "other": 0.10}
BUDGET_TIPS = (
    "Buy protein in bulk when on sale and freeze portions",
    "Choose seasonal produce for better prices",
    "Consider frozen vegetables as a cost-effective alternative",
    "Buy grains and legumes in bulk from wholesale stores",
    "Compare prices across different stores for the best deals",
)


# Calculators -------------------------------------------------------------------


def calculate_bmr(request: NutritionRequest) -> float:
    """Basal metabolic rate via the Mifflin-St Jeor equation."""

    base = 10 * request.weight + 6.25 * request.height - 5 * request.age
    return base + 5 if request.gender == "male" else base - 161


def calculate_daily_calories(request: NutritionRequest) -> int:
    """BMR scaled by activity level, then adjusted for the goal."""

    tdee = calculate_bmr(request) * ACTIVITY_MULTIPLIERS.get(request.activity_level, 1.55)
    calories = tdee * GOAL_CALORIE_FACTORS.get(request.goal, 1.0)
    return max(round_half_up(calories), 0)


def macro_percentages(goal: str) -> dict[str, int]:
    protein, carbs, fats = MACRO_PERCENTAGES.get(goal, MACRO_PERCENTAGES["maintain"])
    return {"protein": protein, "carbs": carbs, "fats": fats}


def calculate_macros(calories: float, goal: str) -> NutritionMacros:
    """Gram/percentage pairs for each macro from the goal's percentage table."""

    amounts = {
        name: MacroAmount(
            grams=round_half_up(calories * percentage / 100 / KCAL_PER_GRAM[name]),
            percentage=percentage,
        )
        for name, percentage in macro_percentages(goal).items()
    }
    return NutritionMacros(**amounts)


def budget_breakdown(weekly_budget: float) -> BudgetBreakdown:
    return BudgetBreakdown(
        weekly_total=weekly_budget,
        categories=BudgetCategories(
            **{name: round_half_up(weekly_budget * share) for name, share in BUDGET_SHARES.items()}
        ),
        tips=list(BUDGET_TIPS),
    )


def default_meals(meal: str, calories: float, macros: NutritionMacros) -> list[MealSuggestion]:
    """The canned two-option list for ``meal`` sized from the day's targets."""

    calorie_share, protein_share, carb_share, fat_share = _MEAL_SHARES[meal]
    options = []
    for (name, ingredients, prep_time, cost), split in zip(_CANNED_MEALS[meal], _OPTION_SPLIT):
        options.append(
            MealSuggestion(
                name=name,
                calories=round_half_up(calories * calorie_share * split),
                protein=round_half_up(macros.protein.grams * protein_share * split),
                carbs=round_half_up(macros.carbs.grams * carb_share * split),
                fats=round_half_up(macros.fats.grams * fat_share * split),
                ingredients=list(ingredients),
                prep_time=prep_time,
                cost=cost,
            )
        )
    return options


# Normalization -----------------------------------------------------------------


def _non_negative(value: Any) -> float:
    number = as_number(value)
    return max(number, 0.0) if number is not None else 0.0


def normalize_meal(value: Any, meal: str, position: int) -> MealSuggestion:
    data = as_mapping(value)
    prep_time = as_number(data.get("prepTime"))
    cost = as_number(data.get("cost"))
    return MealSuggestion(
        name=as_text(data.get("name"), f"{meal.capitalize()} option {position + 1}"),
        calories=_non_negative(data.get("calories")),
        protein=_non_negative(data.get("protein")),
        carbs=_non_negative(data.get("carbs")),
        fats=_non_negative(data.get("fats")),
        ingredients=string_list(data.get("ingredients")),
        prep_time=max(prep_time, 0.0) if prep_time is not None else None,
        cost=max(cost, 0.0) if cost is not None else None,
    )


def normalize_meal_plan(value: Any, calories: float, macros: NutritionMacros) -> MealPlan:
    """Keep at most two options per meal; empty or missing meals get the canned pair."""

    plan = as_mapping(value)
    meals: dict[str, list[MealSuggestion]] = {}
    for meal in MEALS:
        raw = plan.get(meal)
        options = []
        if isinstance(raw, list):
            options = [
                normalize_meal(item, meal, index)
                for index, item in enumerate(raw[:MAX_MEAL_OPTIONS])
                if isinstance(item, dict)
            ]
            if len(raw) > MAX_MEAL_OPTIONS:
                logger.debug("Truncated %s from %d to %d options", meal, len(raw), MAX_MEAL_OPTIONS)
        meals[meal] = options or default_meals(meal, calories, macros)
    return MealPlan(**meals)


def _normalize_macro(value: Any, name: str, calories: float, fallback: MacroAmount) -> MacroAmount:
    """Accept ``{grams, percentage}``, a bare gram number, or fall back."""

    if isinstance(value, dict):
        grams = as_number(value.get("grams"))
        percentage = as_number(value.get("percentage"))
        if grams is not None and percentage is not None:
            return MacroAmount(grams=max(grams, 0.0), percentage=clamp(percentage, 0, 100))
        return fallback

    grams = as_number(value)
    if grams is not None and grams >= 0:
        share = grams * KCAL_PER_GRAM[name] / calories * 100 if calories > 0 else 0
        return MacroAmount(grams=grams, percentage=clamp(round(share, 1), 0, 100))
    return fallback


def normalize_macros(value: Any, calories: float, goal: str) -> NutritionMacros:
    data = as_mapping(value)
    computed = calculate_macros(calories, goal)
    return NutritionMacros(
        protein=_normalize_macro(data.get("protein"), "protein", calories, computed.protein),
        carbs=_normalize_macro(data.get("carbs"), "carbs", calories, computed.carbs),
        fats=_normalize_macro(data.get("fats"), "fats", calories, computed.fats),
    )


def normalize_budget(value: Any, weekly_budget: float) -> BudgetBreakdown | None:
    if weekly_budget <= 0:
        return None
    data = as_mapping(value)
    if not data:
        return budget_breakdown(weekly_budget)

    fallback = budget_breakdown(weekly_budget)
    categories = as_mapping(data.get("categories"))
    total = positive_number(data.get("weeklyTotal"))
    return BudgetBreakdown(
        weekly_total=total if total is not None else weekly_budget,
        categories=BudgetCategories(
            **{
                name: _non_negative(categories[name]) if as_number(categories.get(name)) is not None
                else getattr(fallback.categories, name)
                for name in BUDGET_SHARES
            }
        ),
        tips=string_list_or(data.get("tips"), BUDGET_TIPS),
    )


def normalize_nutrition_plan(tree: Any, request: NutritionRequest | None = None) -> NutritionPlan:
    """Map a recovered generic tree onto a :class:`NutritionPlan`.

    ``dailyCalories`` falls back to the Mifflin-St Jeor estimate for the
    request and every macro default is derived from the final calorie
    figure. Never raises.
    """

    request = request or NutritionRequest()
    tree = as_mapping(tree)

    supplied = positive_number(tree.get("dailyCalories"))
    if supplied is None:
        calories = calculate_daily_calories(request)
        logger.debug("dailyCalories missing, estimated %d kcal", calories)
    else:
        calories = round_half_up(supplied)

    macros = normalize_macros(tree.get("macros"), calories, request.goal)
    return NutritionPlan(
        daily_calories=calories,
        macros=macros,
        meal_plan=normalize_meal_plan(tree.get("mealPlan"), calories, macros),
        tips=string_list_or(tree.get("tips"), COMMON_TIPS + GOAL_TIPS.get(request.goal, ())),
        supplements=string_list_or(
            tree.get("supplements"), COMMON_SUPPLEMENTS + GOAL_SUPPLEMENTS.get(request.goal, ())
        ),
        budget_breakdown=normalize_budget(tree.get("budgetBreakdown"), request.weekly_budget),
    )
