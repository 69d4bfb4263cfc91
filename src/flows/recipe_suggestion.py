"""Recipe suggestion flow: ingredients and cooking tools in, ordered recipes out.

One submission maps to exactly one agent run. The run is never retried and its
result is never cached: a failed call surfaces a single SuggestionProviderError
and the user re-submits to try again.

Core Functions:
- create_suggestion_agent(): Build the Agno Agent (Gemini, structured output)
- parse_suggestion_response(): Lenient parsing of a text response into the schema
- RecipeSuggester.get_suggestions(): Validated request -> list of Recipe
"""

import json
import re
from typing import Any, List, Optional

from agno.agent import Agent
from agno.models.google import Gemini
from pydantic import ValidationError

from src.models.models import Recipe, RecipeSuggestionOutput, SuggestionRequest
from src.prompts.prompts import build_suggestion_prompt, get_suggestion_instructions
from src.utils.config import config
from src.utils.logger import logger


class SuggestionProviderError(RuntimeError):
    """Calling the suggestion provider or validating its response failed."""


def create_suggestion_agent() -> Agent:
    """Create and configure the Agno Agent used for recipe suggestions.

    Returns:
        Configured Agent instance with RecipeSuggestionOutput as output schema.
    """
    logger.info(f"Configuring suggestion agent (model={config.GEMINI_MODEL})...")
    agent = Agent(
        # === Model Configuration ===
        model=Gemini(
            id=config.GEMINI_MODEL,
            api_key=config.GEMINI_API_KEY,
            temperature=config.TEMPERATURE,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
        ),
        # === Output Schema ===
        output_schema=RecipeSuggestionOutput,
        structured_outputs=True,
        # === Instructions ===
        instructions=get_suggestion_instructions(
            max_recipes=config.MAX_RECIPES,
            language=config.RESPONSE_LANGUAGE,
        ),
        # One provider call per submission: the user re-submits to retry
        retries=0,
        # === Metadata ===
        name="Recipe Suggestion Agent",
        description="Suggests recipes from available ingredients and cooking tools",
    )
    logger.info("✓ Suggestion agent configured")
    return agent


def parse_suggestion_response(response_text: str) -> Optional[RecipeSuggestionOutput]:
    """Parse a text response into a validated RecipeSuggestionOutput.

    Used when the run content is not already the structured model. Tries the
    full text as JSON first, then the outermost `{...}` block.

    Args:
        response_text: Raw response text (may include non-JSON text around the object).

    Returns:
        Validated RecipeSuggestionOutput, or None if no valid object is found.
    """
    candidates = [response_text]
    json_match = re.search(r"\{.*\}", response_text or "", re.DOTALL)
    if json_match:
        candidates.append(json_match.group())

    for candidate in candidates:
        try:
            return RecipeSuggestionOutput.model_validate(json.loads(candidate))
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.debug(f"Suggestion response candidate rejected: {e}")

    return None


def _coerce_output(content: Any) -> Optional[RecipeSuggestionOutput]:
    if isinstance(content, RecipeSuggestionOutput):
        return content
    if isinstance(content, dict):
        try:
            return RecipeSuggestionOutput.model_validate(content)
        except ValidationError as e:
            logger.debug(f"Suggestion response dict rejected: {e}")
            return None
    if isinstance(content, str):
        return parse_suggestion_response(content)
    return None


class RecipeSuggester:
    """Suggestion Requester.

    Wraps the suggestion agent so the finder depends on a single coroutine,
    `get_suggestions`, that either returns recipes or raises SuggestionProviderError.
    """

    def __init__(self, agent: Optional[Agent] = None) -> None:
        self.agent = agent if agent is not None else create_suggestion_agent()

    async def get_suggestions(self, request: SuggestionRequest) -> List[Recipe]:
        """Ask the provider for recipes matching the request.

        Args:
            request: Validated suggestion request.

        Returns:
            Recipes in provider order, each with the placeholder image. May be empty.

        Raises:
            SuggestionProviderError: If the call fails or the response does not match the schema.
        """
        prompt = build_suggestion_prompt(request)
        logger.info(f"Requesting suggestions (tools: {request.cooking_tools})")

        try:
            run_output = await self.agent.arun(input=prompt)
        except Exception as e:
            logger.error(f"Suggestion provider call failed: {e}")
            raise SuggestionProviderError("Suggestion provider call failed") from e

        output = _coerce_output(getattr(run_output, "content", None))
        if output is None:
            logger.error("Suggestion provider returned a response that does not match the schema")
            raise SuggestionProviderError("Suggestion provider returned an invalid response")

        recipes = [Recipe.from_suggestion(suggestion) for suggestion in output.suggestions]
        logger.info(f"✓ Received {len(recipes)} suggestion(s)")
        return recipes

    async def __call__(self, request: SuggestionRequest) -> List[Recipe]:
        return await self.get_suggestions(request)
