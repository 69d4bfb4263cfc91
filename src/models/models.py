"""Data models and schemas for the recipe suggestion service.

Defines Pydantic models for request/response validation on both sides of the
suggestion and image provider calls. All models use Pydantic v2.
"""

from typing import List, Optional, Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.config import config


class SuggestionRequest(BaseModel):
    """Request schema for one recipe suggestion submission.

    Built fresh by the form on every valid submit and never mutated afterwards.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    ingredients: Annotated[
        str,
        Field(min_length=1, description="Free-text list of available ingredients"),
    ]
    cooking_tools: Annotated[
        str,
        Field(min_length=1, description="Comma-separated list of available cooking tools"),
    ]

    @field_validator("ingredients")
    @classmethod
    def check_ingredients_length(cls, ingredients: str) -> str:
        if len(ingredients) < config.MIN_INGREDIENTS_LENGTH:
            raise ValueError(
                f"ingredients must be at least {config.MIN_INGREDIENTS_LENGTH} characters"
            )
        return ingredients


class RecipeSuggestion(BaseModel):
    """One recipe as returned by the suggestion provider.

    Item schema of the structured output requested from the text model.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Annotated[str, Field(min_length=1, description="Recipe name")]
    description: Annotated[str, Field(description="One or two sentence summary of the dish")]
    ingredients: Annotated[
        List[str], Field(min_length=1, description="Ingredients with quantities, in cooking order")
    ]
    steps: Annotated[List[str], Field(min_length=1, description="Numbered cooking steps, in order")]
    servings: Annotated[Optional[str], Field(None, description="Serving size, e.g. '2 porsi'")]
    prep_time: Annotated[Optional[str], Field(None, description="Total preparation time, e.g. '15 menit'")]

    @field_validator("ingredients", "steps")
    @classmethod
    def drop_blank_lines(cls, items: List[str]) -> List[str]:
        """Strip every entry and reject lists that only hold blank strings."""
        cleaned = [item.strip() for item in items if item and item.strip()]
        if not cleaned:
            raise ValueError("must contain at least one non-blank entry")
        return cleaned


class RecipeSuggestionOutput(BaseModel):
    """Response schema of the suggestion provider.

    Suggestions are ordered by relevance; the order is kept for display.
    """

    suggestions: Annotated[
        List[RecipeSuggestion],
        Field(default_factory=list, description="Recipe suggestions ordered by relevance"),
    ]


class Recipe(RecipeSuggestion):
    """Domain model for a recipe shown on a card.

    `image_url` starts as the placeholder; the card that renders the recipe
    keeps its own copy and swaps in the generated image.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    image_url: Annotated[str, Field(default_factory=lambda: config.PLACEHOLDER_IMAGE_URL)]

    @classmethod
    def from_suggestion(cls, suggestion: RecipeSuggestion, image_url: Optional[str] = None) -> "Recipe":
        return cls(
            **suggestion.model_dump(),
            image_url=image_url or config.PLACEHOLDER_IMAGE_URL,
        )


class GenerateRecipeImageInput(BaseModel):
    """Input schema of the image provider call."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Annotated[str, Field(min_length=1, description="Recipe title to illustrate")]


class GenerateRecipeImageOutput(BaseModel):
    """Output schema of the image provider call.

    `image_url` is a remote URL or a `data:` URI with the inline image.
    """

    image_url: Annotated[str, Field(description="Remote image URL or data URI of the generated image")]
