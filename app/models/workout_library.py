"""Static exercise templates used to build default weekly schedules."""
from typing import Dict, List


WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

REST_DAY_TYPE = "Rest & Recovery"

# Exercises shown per session by experience level
EXERCISES_PER_SESSION = {"beginner": 4, "intermediate": 6, "advanced": 8}

# "primary" lifts get 3 sets for beginners and 4 otherwise
EXERCISE_LIBRARY: Dict[str, List[dict]] = {
    "push": [
        {"name": "Bench Press", "primary": True, "reps": "8-10", "targetMuscles": ["Chest", "Triceps", "Shoulders"]},
        {"name": "Overhead Press", "primary": True, "reps": "8-10", "targetMuscles": ["Shoulders", "Triceps"]},
        {"name": "Incline Dumbbell Press", "sets": 3, "reps": "10-12", "targetMuscles": ["Upper Chest", "Shoulders"]},
        {"name": "Tricep Pushdowns", "sets": 3, "reps": "12-15", "targetMuscles": ["Triceps"]},
        {"name": "Lateral Raises", "sets": 3, "reps": "12-15", "targetMuscles": ["Lateral Deltoids"]},
        {"name": "Chest Flyes", "sets": 3, "reps": "12-15", "targetMuscles": ["Chest"]},
        {"name": "Skull Crushers", "sets": 3, "reps": "10-12", "targetMuscles": ["Triceps"]},
        {"name": "Push-Ups", "sets": 3, "reps": "AMRAP", "targetMuscles": ["Chest", "Shoulders", "Triceps"]},
    ],
    "pull": [
        {"name": "Pull-Ups/Lat Pulldowns", "primary": True, "reps": "8-10", "targetMuscles": ["Back", "Biceps"]},
        {"name": "Bent Over Rows", "primary": True, "reps": "8-10", "targetMuscles": ["Back", "Biceps"]},
        {"name": "Face Pulls", "sets": 3, "reps": "12-15", "targetMuscles": ["Rear Deltoids", "Upper Back"]},
        {"name": "Bicep Curls", "sets": 3, "reps": "10-12", "targetMuscles": ["Biceps"]},
        {"name": "Seated Cable Rows", "sets": 3, "reps": "10-12", "targetMuscles": ["Mid Back"]},
        {"name": "Hammer Curls", "sets": 3, "reps": "10-12", "targetMuscles": ["Biceps", "Forearms"]},
        {"name": "Shrugs", "sets": 3, "reps": "12-15", "targetMuscles": ["Traps"]},
        {"name": "Reverse Flyes", "sets": 3, "reps": "12-15", "targetMuscles": ["Rear Deltoids"]},
    ],
    "legs": [
        {"name": "Squats", "primary": True, "reps": "8-10", "targetMuscles": ["Quads", "Glutes", "Hamstrings"]},
        {"name": "Romanian Deadlifts", "primary": True, "reps": "8-10", "targetMuscles": ["Hamstrings", "Glutes", "Lower Back"]},
        {"name": "Leg Press", "sets": 3, "reps": "10-12", "targetMuscles": ["Quads", "Glutes"]},
        {"name": "Calf Raises", "sets": 3, "reps": "15-20", "targetMuscles": ["Calves"]},
        {"name": "Leg Extensions", "sets": 3, "reps": "12-15", "targetMuscles": ["Quads"]},
        {"name": "Leg Curls", "sets": 3, "reps": "12-15", "targetMuscles": ["Hamstrings"]},
        {"name": "Hip Thrusts", "sets": 3, "reps": "10-12", "targetMuscles": ["Glutes"]},
        {"name": "Walking Lunges", "sets": 3, "reps": "10 per leg", "targetMuscles": ["Quads", "Glutes", "Hamstrings"]},
    ],
    "full_body": [
        {"name": "Squats", "primary": True, "reps": "8-10", "targetMuscles": ["Quads", "Glutes", "Hamstrings"]},
        {"name": "Bench Press", "primary": True, "reps": "8-10", "targetMuscles": ["Chest", "Triceps", "Shoulders"]},
        {"name": "Bent Over Rows", "sets": 3, "reps": "8-10", "targetMuscles": ["Back", "Biceps"]},
        {"name": "Overhead Press", "sets": 3, "reps": "8-10", "targetMuscles": ["Shoulders", "Triceps"]},
        {"name": "Romanian Deadlifts", "sets": 3, "reps": "8-10", "targetMuscles": ["Hamstrings", "Glutes", "Lower Back"]},
        {"name": "Pull-Ups/Lat Pulldowns", "sets": 3, "reps": "8-10", "targetMuscles": ["Back", "Biceps"]},
        {"name": "Bicep Curls", "sets": 3, "reps": "10-12", "targetMuscles": ["Biceps"]},
        {"name": "Tricep Pushdowns", "sets": 3, "reps": "10-12", "targetMuscles": ["Triceps"]},
    ],
}

CONDITIONING_LIBRARY: Dict[str, dict] = {
    "hiit": {
        "name": "HIIT Circuit",
        "sets": 1,
        "reps": "20 minutes",
        "notes": "30 seconds work, 30 seconds rest for 20 minutes",
        "targetMuscles": ["Cardiovascular System", "Full Body"],
    },
    "cardio": {
        "name": "Steady State Cardio",
        "sets": 1,
        "reps": "20-30 minutes",
        "notes": "Moderate intensity (65-75% max heart rate)",
        "targetMuscles": ["Cardiovascular System"],
    },
}


def template_for_session(session_type: str) -> str | None:
    """Map a session label such as ``"Upper Body + Cardio"`` to a library key."""

    label = session_type.lower()
    if "full body" in label:
        return "full_body"
    if "push" in label or "upper" in label:
        return "push"
    if "pull" in label:
        return "pull"
    if "legs" in label or "lower" in label:
        return "legs"
    return None


def conditioning_for_session(session_type: str) -> str | None:
    label = session_type.lower()
    if "hiit" in label:
        return "hiit"
    if "cardio" in label:
        return "cardio"
    return None
