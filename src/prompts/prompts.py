"""Prompts for the recipe suggestion and recipe image flows.

Provides factory functions so the number of recipes and the response language
stay configurable. Instructions guide the LLM to fill the RecipeSuggestionOutput
schema; the image prompt is a single sentence built from the recipe title.
"""

from src.models.models import SuggestionRequest


def get_suggestion_instructions(max_recipes: int, language: str) -> str:
    """Generate system instructions for the suggestion agent.

    Args:
        max_recipes: Maximum number of recipes to suggest per request.
        language: Language used for every human-readable field.

    Returns:
        str: Complete system instructions.
    """
    return f"""You are a practical home-cooking assistant for students and people living in small rented rooms.
They have a limited set of ingredients and only a few cooking tools.

## Task

Suggest up to {max_recipes} recipes that can be cooked with the ingredients and cooking tools the user lists.

## Rules

- Use ONLY the listed cooking tools. Never require an appliance that is not listed.
- Prefer recipes that use the listed ingredients. Common pantry staples (salt, water, cooking oil,
  sugar, pepper) may be assumed.
- Order suggestions from most to least suitable.
- If nothing sensible can be cooked with the given tools, return an empty `suggestions` list.
  Do not invent tools to make a recipe work.

## Output

Fill the structured output with, for every recipe:
- `title`: short dish name
- `description`: one or two sentences about the dish
- `ingredients`: each ingredient with an approximate quantity
- `steps`: clear, ordered cooking steps, one action per step
- `servings`: e.g. "1 porsi" (optional)
- `prep_time`: e.g. "15 menit" (optional)

Write every text field in {language}.
"""


def build_suggestion_prompt(request: SuggestionRequest) -> str:
    """Render a suggestion request as the user message sent to the agent."""
    return (
        f"Ingredients I have: {request.ingredients}\n"
        f"Cooking tools I have: {request.cooking_tools}"
    )


def build_image_prompt(title: str) -> str:
    """Render the image generation prompt for a recipe title."""
    return f'A delicious-looking, realistic photo of "{title}", plated beautifully.'
