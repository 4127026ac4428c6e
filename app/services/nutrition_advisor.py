"""Nutrition plan generation."""
from __future__ import annotations

from app.models.schemas import NutritionRequest
from app.normalizers.nutrition import calculate_daily_calories, calculate_macros
from app.services.analyzer_base import DomainAnalyzer
from app.services.recovery_pipeline import Domain


RESPONSE_SHAPE = """{
  "dailyCalories": 2400,
  "macros": {"protein": {"grams": 180, "percentage": 30}, "carbs": {"grams": 240, "percentage": 40}, "fats": {"grams": 80, "percentage": 30}},
  "mealPlan": {
    "breakfast": [{"name": "...", "calories": 500, "protein": 30, "carbs": 60, "fats": 15, "ingredients": ["..."], "prepTime": 10, "cost": 3.5}],
    "lunch": [],
    "dinner": [],
    "snacks": []
  },
  "tips": ["..."],
  "supplements": ["..."],
  "budgetBreakdown": {"weeklyTotal": 100, "categories": {"protein": 40, "produce": 25, "grains": 15, "dairy": 10, "other": 10}, "tips": ["..."]}
}"""


class NutritionAdvisor(DomainAnalyzer):
    domain = Domain.NUTRITION

    def build_prompt(self, request: NutritionRequest) -> str:
        calories = calculate_daily_calories(request)
        macros = calculate_macros(calories, request.goal)
        lines = [
            "Create a personalised daily nutrition plan.",
            "",
            "USER:",
            f"- Goal: {request.goal}",
            f"- Age: {request.age}, gender: {request.gender}",
            f"- Weight: {request.weight} kg, height: {request.height} cm",
            f"- Activity level: {request.activity_level}",
            "",
            "TARGETS:",
            f"- Daily calories: {calories} kcal",
            f"- Protein: {macros.protein.grams:.0f} g ({macros.protein.percentage:.0f}%)",
            f"- Carbs: {macros.carbs.grams:.0f} g ({macros.carbs.percentage:.0f}%)",
            f"- Fats: {macros.fats.grams:.0f} g ({macros.fats.percentage:.0f}%)",
        ]
        if request.dietary_restrictions:
            lines.append(f"- Dietary restrictions: {', '.join(request.dietary_restrictions)}")
        if request.preferences:
            lines.append(f"- Food preferences: {', '.join(request.preferences)}")
        if request.weekly_budget > 0:
            lines.append(f"- Weekly grocery budget: ${request.weekly_budget:.0f}")
        if request.zip_code:
            lines.append(f"- Shopping area ZIP code: {request.zip_code} (use typical local prices)")
        if request.physique_analysis is not None:
            metrics = request.physique_analysis.metrics
            lines.append(f"- Current body fat estimate: {metrics.body_fat}%, muscle mass: {metrics.muscle_mass}%")
        lines.extend(
            [
                "",
                "Give at most 2 options for each meal.",
                "Respond with JSON in exactly this shape:",
                RESPONSE_SHAPE,
            ]
        )
        return "\n".join(lines)
