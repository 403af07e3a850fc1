"""
Action catalog.

Each action the router accepts is one ActionSpec: the payload model it
validates, the prompt it builds, the response mode it expects, and an
optional post-processing step on the parsed result.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from nutriplan.core.config import settings
from nutriplan.models import schemas
from nutriplan.models.diet import (
    ChatTurn,
    DailyPlan,
    FoodItem,
    MacroData,
    Meal,
    RecipeList,
    WeeklyPlanDays,
)
from nutriplan.services import prompts
from nutriplan.services.image_payload import MultimodalPrompt, decode_data_url
from nutriplan.services.normalize import fold_weekly_plan, unwrap_list
from nutriplan.services.stream_relay import build_chat_turns


class ResponseMode(str, Enum):
    STRUCTURED_JSON = "structured-json"
    PLAIN_TEXT = "plain-text"
    BINARY_IMAGE = "binary-image"
    STREAMED_TEXT = "streamed-text"


PromptSpec = str | MultimodalPrompt | list[ChatTurn]


@dataclass(frozen=True)
class ActionSpec:
    payload_model: type[BaseModel]
    build_prompt: Callable[[Any], PromptSpec]
    mode: ResponseMode
    postprocess: Callable[[Any], Any] | None = None
    temperature: float = settings.TEMPERATURE_CREATIVE


# --- Daily plans ---

def _daily_plan_prompt(p: schemas.GenerateDailyPlanPayload) -> str:
    return prompts.structured(
        f"Based on the user profile, create a complete meal plan for {p.dateString}. "
        "The plan must be detailed and aligned with the user's goals. Compute calorie "
        "and macro totals for every meal and for the whole day, and set a daily water "
        f"goal in liters. Use {p.dateString} as the plan date.\n\n"
        f"{prompts.build_user_profile(p.userData)}",
        DailyPlan,
    )


def _regenerate_daily_plan_prompt(p: schemas.RegenerateDailyPlanPayload) -> str:
    meal_count = f" The plan must have exactly {p.numberOfMeals} meals." if p.numberOfMeals else ""
    return prompts.structured(
        f"Based on the user profile, create a new meal plan for {p.currentPlan.date}.{meal_count} "
        "It must be an alternative to the current plan while keeping the same goals.\n\n"
        f"Current plan:\n{prompts.to_json(p.currentPlan)}\n\n"
        f"{prompts.build_user_profile(p.userData)}",
        DailyPlan,
    )


def _adjust_daily_plan_prompt(p: schemas.AdjustDailyPlanForMacroPayload) -> str:
    return prompts.structured(
        f"Adjust this meal plan so it gets closer to the user's {p.macroToFix} goal. "
        "Keep total calories as close to the calorie goal as possible and recompute "
        "all totals.\n\n"
        f"Original plan:\n{prompts.to_json(p.currentPlan)}\n\n"
        f"{prompts.build_user_profile(p.userData)}",
        DailyPlan,
    )


def _weekly_plan_prompt(p: schemas.GenerateWeeklyPlanPayload) -> str:
    observation = f"\nObservation from the user: {p.observation}" if p.observation else ""
    return prompts.structured(
        f"Create a 7-day meal plan starting on {p.weekStartDate}. Return one daily plan "
        "per consecutive day under \"days\", each with its own date (YYYY-MM-DD)."
        f"{observation}\n\n{prompts.build_user_profile(p.userData)}",
        WeeklyPlanDays,
    )


def _fold_days(result: Any) -> dict:
    return fold_weekly_plan(unwrap_list(result, "days"))


def _regenerate_meal_prompt(p: schemas.RegenerateMealFromPromptPayload) -> str:
    return prompts.structured(
        f"Regenerate the meal \"{p.meal.name}\" following this instruction: \"{p.prompt}\". "
        "Recompute the calorie and macro totals.\n\n"
        f"Current meal:\n{prompts.to_json(p.meal)}"
        f"{prompts.optional_profile(p.userData)}",
        Meal,
    )


def _parse_plan_text_prompt(p: schemas.ParseMealPlanTextPayload) -> str:
    return prompts.structured(
        f"Convert the following meal plan text into a structured daily plan.\n\nText:\n{p.text}",
        DailyPlan,
    )


# --- Meal analysis ---

def _analyze_text_prompt(p: schemas.AnalyzeMealFromTextPayload) -> str:
    return prompts.structured(
        f"Analyze this meal description and estimate its macronutrients.\n\nDescription: {p.description}",
        MacroData,
    )


def _analyze_image_prompt(p: schemas.AnalyzeMealFromImagePayload) -> MultimodalPrompt:
    image = decode_data_url(p.imageDataUrl)
    return MultimodalPrompt(
        text=prompts.structured(
            "Analyze this photo of a meal and estimate its macronutrients.",
            MacroData,
        ),
        image=image,
    )


def _substitution_prompt(p: schemas.GetFoodSubstitutionPayload) -> str:
    return prompts.structured(
        f"Suggest a substitute for \"{p.itemToSwap.name}\" in the meal \"{p.mealContext.name}\". "
        "The substitute must have similar macros and fit the meal.\n\n"
        f"Item to swap:\n{prompts.to_json(p.itemToSwap)}\n\n"
        f"Meal:\n{prompts.to_json(p.mealContext)}"
        f"{prompts.optional_profile(p.userData)}",
        FoodItem,
    )


def _find_recipes_prompt(p: schemas.FindRecipesPayload) -> str:
    return prompts.structured(
        f"Find {p.numRecipes} recipes for the search: \"{p.query}\". For each recipe, "
        "write an imagePrompt optimized for an image generator."
        f"{prompts.optional_profile(p.userData)}",
        RecipeList,
    )


def _unwrap_recipes(result: Any) -> list:
    return unwrap_list(result, "recipes")


# --- Plain text ---

def _progress_prompt(p: schemas.AnalyzeProgressPayload) -> str:
    return prompts.plain(
        "Analyze the user's progress data and write a motivating summary with tips. "
        f"Speak directly to the user.\n\n{prompts.build_user_profile(p.userData)}"
    )


def _shopping_list_prompt(p: schemas.GenerateShoppingListPayload) -> str:
    return prompts.plain(
        "Create a detailed shopping list grouped by category (e.g. Fruits, Vegetables, "
        f"Meat) for the following weekly meal plan.\n\n{prompts.to_json(p.weekPlan)}"
    )


def _food_info_prompt(p: schemas.GetFoodInfoPayload) -> str:
    context = f"\n\nMeal context:\n{prompts.to_json(p.mealContext)}" if p.mealContext else ""
    return prompts.plain(
        f"Answer this question about food clearly and concisely.\n\nQuestion: \"{p.question}\"{context}"
    )


# --- Image and chat ---

def _image_prompt(p: schemas.GenerateImageFromPromptPayload) -> str:
    return p.prompt


def _chat_prompt(p: schemas.SendMessageToAIPayload) -> list[ChatTurn]:
    return build_chat_turns(p.history, p.message)


ACTIONS: dict[str, ActionSpec] = {
    "generateDailyPlan": ActionSpec(
        schemas.GenerateDailyPlanPayload, _daily_plan_prompt, ResponseMode.STRUCTURED_JSON,
    ),
    "regenerateDailyPlan": ActionSpec(
        schemas.RegenerateDailyPlanPayload, _regenerate_daily_plan_prompt, ResponseMode.STRUCTURED_JSON,
    ),
    "adjustDailyPlanForMacro": ActionSpec(
        schemas.AdjustDailyPlanForMacroPayload, _adjust_daily_plan_prompt, ResponseMode.STRUCTURED_JSON,
        temperature=settings.TEMPERATURE_ANALYSIS,
    ),
    "generateWeeklyPlan": ActionSpec(
        schemas.GenerateWeeklyPlanPayload, _weekly_plan_prompt, ResponseMode.STRUCTURED_JSON,
        postprocess=_fold_days,
    ),
    "regenerateMealFromPrompt": ActionSpec(
        schemas.RegenerateMealFromPromptPayload, _regenerate_meal_prompt, ResponseMode.STRUCTURED_JSON,
    ),
    "parseMealPlanText": ActionSpec(
        schemas.ParseMealPlanTextPayload, _parse_plan_text_prompt, ResponseMode.STRUCTURED_JSON,
        temperature=settings.TEMPERATURE_EXTRACTION,
    ),
    "analyzeMealFromText": ActionSpec(
        schemas.AnalyzeMealFromTextPayload, _analyze_text_prompt, ResponseMode.STRUCTURED_JSON,
        temperature=settings.TEMPERATURE_EXTRACTION,
    ),
    "analyzeMealFromImage": ActionSpec(
        schemas.AnalyzeMealFromImagePayload, _analyze_image_prompt, ResponseMode.STRUCTURED_JSON,
        temperature=settings.TEMPERATURE_EXTRACTION,
    ),
    "getFoodSubstitution": ActionSpec(
        schemas.GetFoodSubstitutionPayload, _substitution_prompt, ResponseMode.STRUCTURED_JSON,
    ),
    "findRecipes": ActionSpec(
        schemas.FindRecipesPayload, _find_recipes_prompt, ResponseMode.STRUCTURED_JSON,
        postprocess=_unwrap_recipes,
    ),
    "analyzeProgress": ActionSpec(
        schemas.AnalyzeProgressPayload, _progress_prompt, ResponseMode.PLAIN_TEXT,
        temperature=settings.TEMPERATURE_ANALYSIS,
    ),
    "generateShoppingList": ActionSpec(
        schemas.GenerateShoppingListPayload, _shopping_list_prompt, ResponseMode.PLAIN_TEXT,
        temperature=settings.TEMPERATURE_EXTRACTION,
    ),
    "getFoodInfo": ActionSpec(
        schemas.GetFoodInfoPayload, _food_info_prompt, ResponseMode.PLAIN_TEXT,
        temperature=settings.TEMPERATURE_ANALYSIS,
    ),
    "generateImageFromPrompt": ActionSpec(
        schemas.GenerateImageFromPromptPayload, _image_prompt, ResponseMode.BINARY_IMAGE,
    ),
    "sendMessageToAI": ActionSpec(
        schemas.SendMessageToAIPayload, _chat_prompt, ResponseMode.STREAMED_TEXT,
    ),
}
