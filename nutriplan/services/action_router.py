"""
Action dispatch: envelope → prompt → completion → normalized result.
"""
from dataclasses import dataclass
from typing import Any, AsyncIterator

from pydantic import ValidationError

from nutriplan.core.errors import InvalidRequestError, UnknownActionError
from nutriplan.services.actions import ACTIONS, ActionSpec, PromptSpec, ResponseMode
from nutriplan.services.completion_service import CompletionClient
from nutriplan.services.normalize import clean_text_response, parse_json_response
from nutriplan.services.stream_relay import open_relay


@dataclass(frozen=True)
class PreparedAction:
    name: str
    spec: ActionSpec
    prompt: PromptSpec

    @property
    def streaming(self) -> bool:
        return self.spec.mode is ResponseMode.STREAMED_TEXT


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "payload"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def prepare_action(action: str | None, payload: dict | None) -> PreparedAction:
    """
    Resolve the action, validate its payload and build its prompt.

    Nothing here talks to the completion service, so every failure is a
    client error.

    Raises:
        InvalidRequestError: Missing action, invalid payload or image data
        UnknownActionError: Action not in the catalog
    """
    if not action:
        raise InvalidRequestError("Action is required")

    spec = ACTIONS.get(action)
    if spec is None:
        raise UnknownActionError(action)

    try:
        validated = spec.payload_model.model_validate(payload or {})
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid payload for {action}: {_describe_validation_error(e)}")

    return PreparedAction(name=action, spec=spec, prompt=spec.build_prompt(validated))


async def execute_action(client: CompletionClient, prepared: PreparedAction) -> Any:
    """
    Run a non-streaming action and return its normalized result.

    Raises:
        EmptyResponseError: Completion service returned no text
        MalformedResponseError: Structured response could not be parsed
        AIResponseError: Image generation produced nothing usable
    """
    spec = prepared.spec

    if spec.mode is ResponseMode.BINARY_IMAGE:
        return await client.generate_image(prepared.prompt)

    if spec.mode is ResponseMode.STREAMED_TEXT:
        raise InvalidRequestError(f"{prepared.name} is a streaming action")

    json_output = spec.mode is ResponseMode.STRUCTURED_JSON
    raw = await client.generate_text(prepared.prompt, json_output=json_output, temperature=spec.temperature)

    if not json_output:
        return clean_text_response(raw)

    result = parse_json_response(raw)
    if spec.postprocess:
        result = spec.postprocess(result)
    return result


async def open_action_stream(client: CompletionClient, prepared: PreparedAction) -> AsyncIterator[bytes]:
    """
    Open the upstream chat stream and return the NDJSON body iterator.

    Raises before any byte is produced if the upstream call fails or yields
    nothing.
    """
    fragments = client.stream_text(prepared.prompt, temperature=prepared.spec.temperature)
    return await open_relay(fragments)
