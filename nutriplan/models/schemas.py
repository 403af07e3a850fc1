"""
Pydantic models for request validation.

The HTTP boundary only knows the envelope; each action validates its own
payload model, looked up from the action catalog.
"""
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

from nutriplan.models.diet import (
    ChatMessage,
    DailyPlan,
    FoodItem,
    Meal,
    UserData,
)


# --- Envelope ---

class ActionRequest(BaseModel):
    """Request envelope for the action endpoint."""
    action: Optional[str] = None
    payload: dict[str, Any] = {}


# --- Plan payloads ---

class GenerateDailyPlanPayload(BaseModel):
    userData: UserData
    dateString: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")


class RegenerateDailyPlanPayload(BaseModel):
    userData: UserData
    currentPlan: DailyPlan
    numberOfMeals: Optional[int] = Field(None, ge=1, le=10)


class AdjustDailyPlanForMacroPayload(BaseModel):
    userData: UserData
    currentPlan: DailyPlan
    macroToFix: Literal["protein", "carbs", "fat"]


class GenerateWeeklyPlanPayload(BaseModel):
    userData: UserData
    weekStartDate: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    observation: Optional[str] = Field(None, max_length=1000)


class RegenerateMealFromPromptPayload(BaseModel):
    prompt: str = Field(..., min_length=1)
    meal: Meal
    userData: Optional[UserData] = None


class ParseMealPlanTextPayload(BaseModel):
    text: str = Field(..., min_length=1)


# --- Meal analysis payloads ---

class AnalyzeMealFromTextPayload(BaseModel):
    description: str = Field(..., min_length=1)


class AnalyzeMealFromImagePayload(BaseModel):
    # Left optional so the image decoder reports a missing URL itself
    imageDataUrl: Optional[Any] = None


class GetFoodSubstitutionPayload(BaseModel):
    itemToSwap: FoodItem
    mealContext: Meal
    userData: Optional[UserData] = None


class FindRecipesPayload(BaseModel):
    query: str = Field(..., min_length=1)
    userData: Optional[UserData] = None
    numRecipes: int = Field(3, ge=1, le=10)


# --- Plain-text payloads ---

class AnalyzeProgressPayload(BaseModel):
    userData: UserData


class GenerateShoppingListPayload(BaseModel):
    weekPlan: list[DailyPlan] | dict[str, DailyPlan]


class GetFoodInfoPayload(BaseModel):
    question: str = Field(..., min_length=1)
    mealContext: Optional[Meal] = None


# --- Image and chat payloads ---

class GenerateImageFromPromptPayload(BaseModel):
    prompt: str = Field(..., min_length=1)


class SendMessageToAIPayload(BaseModel):
    message: str = Field(..., min_length=1)
    history: list[ChatMessage] = []


# --- Responses ---

class ActionResponse(BaseModel):
    """Success envelope."""
    result: Any


class ErrorResponse(BaseModel):
    """Error envelope."""
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
