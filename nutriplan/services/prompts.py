"""
Prompt construction helpers.
"""
import json
from typing import Any

from pydantic import BaseModel

from nutriplan.models.diet import UserData


NUTRITIONIST_ROLE = (
    "You are an expert nutritionist and diet planner. "
    "Be practical, precise with numbers, and respect every dietary restriction."
)


def _join(values: list[str]) -> str:
    return ", ".join(values) if values else "None"


def build_user_profile(user: UserData) -> str:
    """Render the user profile as a markdown block for prompts."""
    prefs = user.dietaryPreferences
    macros = user.macros

    lines = ["### User Profile"]
    if user.name:
        lines.append(f"- **Name:** {user.name}")
    lines.extend([
        f"- **Age:** {user.age}, **Gender:** {user.gender}, "
        f"**Height:** {user.height} cm, **Current Weight:** {user.weight} kg",
        f"- **Activity Level:** {user.activityLevel}, **Weight Goal:** {user.weightGoal} kg",
        f"- **Diets:** {_join(prefs.diets)}, **Restrictions:** {_join(prefs.restrictions)}",
        f"- **Daily Macro Goals:** Calories: {macros.calories.goal:g} kcal, "
        f"Protein: {macros.protein.goal:g} g, Carbs: {macros.carbs.goal:g} g, "
        f"Fat: {macros.fat.goal:g} g",
    ])

    if user.adminSettings and user.adminSettings.permanentPrompt:
        lines.append("")
        lines.append("### Standing Instruction from the Nutritionist")
        lines.append(user.adminSettings.permanentPrompt)

    return "\n".join(lines)


def optional_profile(user: UserData | None) -> str:
    return f"\n\n{build_user_profile(user)}" if user else ""


def to_json(value: Any) -> str:
    """Serialize a model or plain value for embedding in a prompt."""
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_unset=True)
    if isinstance(value, dict):
        return json.dumps({
            k: v.model_dump(exclude_unset=True) if isinstance(v, BaseModel) else v for k, v in value.items()
        })
    if isinstance(value, list):
        return json.dumps([v.model_dump(exclude_unset=True) if isinstance(v, BaseModel) else v for v in value])
    return json.dumps(value)


def json_shape(model: type[BaseModel]) -> str:
    """JSON schema of the expected answer, for the structured-output hint."""
    return json.dumps(model.model_json_schema(), indent=2)


def structured(instruction: str, model: type[BaseModel]) -> str:
    """Append the JSON-only rule and the expected shape to an instruction."""
    return (
        f"{NUTRITIONIST_ROLE}\n\n{instruction}\n\n"
        "Return JSON ONLY, matching this JSON schema:\n"
        f"{json_shape(model)}"
    )


def plain(instruction: str) -> str:
    """Instruction whose answer is free markdown text."""
    return f"{NUTRITIONIST_ROLE}\n\n{instruction}\n\nFormat the answer in Markdown."
