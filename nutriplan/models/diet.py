"""
Pydantic value models for profiles, plans, meals and recipes.

Field names follow the camelCase wire format used by the web client.
Models tolerate unknown fields so that client-side additions pass through
untouched when a plan or meal is echoed back into a prompt.
"""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# Ints stay ints so echoed plans read exactly as the client sent them
Number = int | float


class DietModel(BaseModel):
    """Common configuration for diet value models."""

    model_config = ConfigDict(extra="allow", frozen=True)


# --- Profile ---

class MacroGoal(DietModel):
    """Daily target for one macro, with optional progress."""

    goal: Number
    current: Optional[Number] = None


class UserMacros(DietModel):
    calories: MacroGoal
    protein: MacroGoal
    carbs: MacroGoal
    fat: MacroGoal


class DietaryPreferences(DietModel):
    diets: list[str] = Field(default=[], description="e.g. vegetarian, low-carb")
    restrictions: list[str] = Field(default=[], description="Allergies or intolerances")


class AdminSettings(DietModel):
    permanentPrompt: Optional[str] = Field(None, description="Standing instruction from the nutritionist")


class UserData(DietModel):
    """User profile interpolated into prompts."""

    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=1, le=120)
    gender: Optional[str] = None
    height: Optional[Number] = Field(None, description="Height in cm")
    weight: Optional[Number] = Field(None, description="Current weight in kg")
    activityLevel: Optional[str] = None
    weightGoal: Optional[Number] = Field(None, description="Target weight in kg")
    dietaryPreferences: DietaryPreferences = DietaryPreferences()
    macros: UserMacros
    adminSettings: Optional[AdminSettings] = None

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Ana",
                "age": 31,
                "gender": "female",
                "height": 165,
                "weight": 68,
                "activityLevel": "moderate",
                "weightGoal": 62,
                "dietaryPreferences": {"diets": ["mediterranean"], "restrictions": ["lactose"]},
                "macros": {
                    "calories": {"goal": 1800},
                    "protein": {"goal": 120},
                    "carbs": {"goal": 180},
                    "fat": {"goal": 60}
                }
            }
        },
    )


# --- Plans ---

class MacroData(DietModel):
    """Macro estimate. Plain numbers, no goals."""

    calories: Number = 0
    protein: Number = 0
    carbs: Number = 0
    fat: Number = 0


class FoodItem(DietModel):
    name: str
    portion: str = ""
    calories: Number = 0
    protein: Number = 0
    carbs: Number = 0
    fat: Number = 0


class Meal(DietModel):
    id: str = ""
    name: str
    time: str = ""
    items: list[FoodItem] = []
    totalCalories: Number = 0
    totalMacros: MacroData = MacroData()


class DailyPlan(DietModel):
    date: str = Field("", description="YYYY-MM-DD")
    meals: list[Meal] = []
    totalCalories: Number = 0
    totalMacros: MacroData = MacroData()
    waterGoal: Number = Field(0, description="Liters")


class WeeklyPlanDays(DietModel):
    """Upstream shape for weekly plans; folded into a date-keyed mapping."""

    days: list[DailyPlan]


# --- Recipes ---

class RecipeNutrition(DietModel):
    calories: str
    protein: str
    carbs: str
    fat: str


class Recipe(DietModel):
    id: str
    title: str
    description: str
    prepTime: str
    difficulty: Literal["Easy", "Medium", "Hard"]
    servings: int
    ingredients: list[str]
    instructions: list[str]
    nutritionalInfo: RecipeNutrition
    imagePrompt: str = Field(..., description="Prompt for an image generator")


class RecipeList(DietModel):
    """Upstream shape for recipe searches; unwrapped to a plain list."""

    recipes: list[Recipe]


# --- Chat ---

class ChatMessage(DietModel):
    """One message from the client-side chat history."""

    sender: str = Field(..., description="'user' or 'ai'")
    text: str


class ChatTurn(DietModel):
    """One turn sent to the completion service."""

    role: Literal["user", "model"]
    text: str
