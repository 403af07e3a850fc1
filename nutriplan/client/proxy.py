"""
Client proxy for the action endpoint.

Posts {action, payload} envelopes and unwraps "result". The chat action is
read as a newline-delimited JSON stream.
"""
import json
import logging
from datetime import date
from typing import Any, AsyncIterator

import httpx

logger = logging.getLogger("nutriplan.client")

ACTIONS_PATH = "/api/actions"
IMAGE_DATA_URL_PREFIX = "data:image/jpeg;base64,"


class ProxyError(Exception):
    """Server answered with an error, or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"API Error: {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"API Error: {response.status_code}"


def _decode_line(line: str) -> str | None:
    """Text of one NDJSON line; None for blank or undecodable lines."""
    if not line.strip():
        return None
    try:
        parsed = json.loads(line)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse stream chunk {line!r}: {e}")
        return None
    if isinstance(parsed, dict) and parsed.get("text"):
        return parsed["text"]
    return None


def _iso(day: date | str) -> str:
    return day.isoformat() if isinstance(day, date) else day


class NutriPlanClient:
    """
    Async client for the NutriPlan API.

    Usage:
        async with NutriPlanClient("http://localhost:10000") as api:
            plan = await api.generate_daily_plan(user, date.today())
    """

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None, timeout: float = 120.0):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "NutriPlanClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def call_action(self, action: str, payload: dict) -> Any:
        """
        Run a non-streaming action.

        Raises:
            ProxyError: Transport failure or non-2xx response
        """
        try:
            response = await self._http.post(ACTIONS_PATH, json={"action": action, "payload": payload})
        except httpx.HTTPError as e:
            logger.error(f"Error calling action '{action}': {e}")
            raise ProxyError(f"Could not reach the server: {e}")

        if response.is_error:
            message = _error_message(response)
            logger.error(f"API Error for {action}: {message}")
            raise ProxyError(message, response.status_code)

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Non-JSON response for {action}")
            raise ProxyError(f"API Error: invalid response body ({response.status_code})", response.status_code)
        if not isinstance(body, dict):
            raise ProxyError(f"API Error: unexpected response body ({response.status_code})", response.status_code)

        return body.get("result")

    async def stream_chat(self, message: str, history: list[dict] | None = None) -> AsyncIterator[str]:
        """
        Send a chat message and yield the reply as it arrives.

        Raises:
            ProxyError: Non-2xx response before streaming started
            httpx.HTTPError: Connection dropped mid-stream
        """
        envelope = {"action": "sendMessageToAI", "payload": {"message": message, "history": history or []}}

        async with self._http.stream("POST", ACTIONS_PATH, json=envelope) as response:
            if response.is_error:
                await response.aread()
                raise ProxyError(_error_message(response), response.status_code)

            buffer = ""
            async for chunk in response.aiter_text():
                buffer += chunk
                *lines, buffer = buffer.split("\n")
                for line in lines:
                    text = _decode_line(line)
                    if text:
                        yield text

            # Whatever is left once the stream is done
            text = _decode_line(buffer)
            if text:
                yield text

    # --- Typed helpers ---

    async def parse_meal_plan_text(self, text: str) -> dict:
        return await self.call_action("parseMealPlanText", {"text": text})

    async def generate_daily_plan(self, user_data: dict, day: date | str) -> dict:
        return await self.call_action("generateDailyPlan", {"userData": user_data, "dateString": _iso(day)})

    async def regenerate_daily_plan(self, user_data: dict, current_plan: dict, number_of_meals: int | None = None) -> dict:
        return await self.call_action("regenerateDailyPlan", {
            "userData": user_data,
            "currentPlan": current_plan,
            "numberOfMeals": number_of_meals,
        })

    async def adjust_daily_plan_for_macro(self, user_data: dict, current_plan: dict, macro_to_fix: str) -> dict:
        return await self.call_action("adjustDailyPlanForMacro", {
            "userData": user_data,
            "currentPlan": current_plan,
            "macroToFix": macro_to_fix,
        })

    async def generate_weekly_plan(self, user_data: dict, week_start: date | str, observation: str | None = None) -> dict[str, dict]:
        return await self.call_action("generateWeeklyPlan", {
            "userData": user_data,
            "weekStartDate": _iso(week_start),
            "observation": observation,
        })

    async def regenerate_meal_from_prompt(self, prompt: str, meal: dict, user_data: dict | None = None) -> dict:
        return await self.call_action("regenerateMealFromPrompt", {"prompt": prompt, "meal": meal, "userData": user_data})

    async def analyze_meal_from_text(self, description: str) -> dict:
        return await self.call_action("analyzeMealFromText", {"description": description})

    async def analyze_meal_from_image(self, image_data_url: str) -> dict:
        return await self.call_action("analyzeMealFromImage", {"imageDataUrl": image_data_url})

    async def analyze_progress(self, user_data: dict) -> str:
        return await self.call_action("analyzeProgress", {"userData": user_data})

    async def generate_shopping_list(self, week_plan: list[dict] | dict[str, dict]) -> str:
        return await self.call_action("generateShoppingList", {"weekPlan": week_plan})

    async def get_food_info(self, question: str, meal_context: dict | None = None) -> str:
        return await self.call_action("getFoodInfo", {"question": question, "mealContext": meal_context})

    async def get_food_substitution(self, item_to_swap: dict, meal_context: dict, user_data: dict | None = None) -> dict:
        return await self.call_action("getFoodSubstitution", {
            "itemToSwap": item_to_swap,
            "mealContext": meal_context,
            "userData": user_data,
        })

    async def generate_image_from_prompt(self, prompt: str) -> str:
        """Generate an image and return it as a displayable data URL."""
        image_b64 = await self.call_action("generateImageFromPrompt", {"prompt": prompt})
        return f"{IMAGE_DATA_URL_PREFIX}{image_b64}"

    async def find_recipes(self, query: str, user_data: dict | None = None, num_recipes: int = 3) -> list[dict]:
        return await self.call_action("findRecipes", {"query": query, "userData": user_data, "numRecipes": num_recipes})
