"""Recipe cards with independently loaded images.

Every card owns the image shown for its recipe. After start() the card asks the
image requester for an illustration in its own asyncio task; siblings never
wait on each other and a failure only affects the failing card.

A discarded card (its result list was replaced by a newer search) keeps its
task running but ignores whatever the task produces.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from src.models.models import Recipe
from src.utils.config import config
from src.utils.logger import logger


ImageRequester = Callable[[str], Awaitable[str]]


class RecipeCard:
    def __init__(
        self,
        recipe: Recipe,
        image_requester: ImageRequester,
        placeholder: Optional[str] = None,
    ) -> None:
        self.recipe = recipe
        self.image_requester = image_requester
        self.placeholder = placeholder or config.PLACEHOLDER_IMAGE_URL
        self.image_url: str = recipe.image_url or self.placeholder
        self.is_image_loading = True
        self.discarded = False
        self.task: Optional[asyncio.Task] = None

    @property
    def title(self) -> str:
        return self.recipe.title

    def start(self) -> asyncio.Task:
        """Schedule the image request. Must be called from a running event loop."""
        if self.task is None:
            self.task = asyncio.create_task(self._load_image(), name=f"recipe-image:{self.title}")
        return self.task

    def discard(self) -> None:
        """Mark the card as torn down; a pending image result will be dropped."""
        self.discarded = True

    async def _load_image(self) -> None:
        try:
            image_url = await self.image_requester(self.title)
        except Exception as e:
            if self.discarded:
                return
            logger.warning(
                f"Image generation failed for '{self.title}', keeping placeholder: {e}",
                extra={"recipe_title": self.title},
            )
            self.image_url = self.placeholder
            self.is_image_loading = False
            return

        if self.discarded:
            logger.debug(f"Dropping image for discarded card '{self.title}'")
            return

        if image_url:
            self.image_url = image_url
        self.is_image_loading = False
