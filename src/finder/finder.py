"""Recipe finder: form state, validation and the result state machine.

State transitions:
    idle ──submit──▶ loading ──▶ success (≥1 recipe) | empty (0 recipes) | error
    any state ──submit──▶ loading

Each valid submission gets a new generation number. A suggestion response is
only applied if its generation is still the latest one, so a slow response can
never overwrite the state of a newer submission.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from src.finder import messages
from src.finder.cards import ImageRequester, RecipeCard
from src.finder.tools import ToolSelector
from src.finder.voice import Notification, SpeechCapability, VoiceCapture
from src.models.models import Recipe, SuggestionRequest
from src.utils.config import config
from src.utils.logger import logger


SuggestionRequester = Callable[[SuggestionRequest], Awaitable[List[Recipe]]]

# Skeleton cards shown while loading
SKELETON_COUNT = 2


class FinderStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class FormErrors:
    """Field-level (`ingredients`) and form-level (`root`) validation messages."""

    ingredients: Optional[str] = None
    root: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.ingredients or self.root)

    def clear(self) -> None:
        self.ingredients = None
        self.root = None


class RecipeFinder:
    """Input collector plus presentation state for one recipe search form.

    Args:
        suggestion_requester: Coroutine returning recipes for a request (raises on provider failure).
        image_requester: Coroutine returning an image reference for a recipe title.
        tools: Tool selector bound to this form.
        speech: Optional platform speech-to-text capability.
        notify: Sink for transient notifications (voice errors).
        allow_resubmit: Accept submit() while a previous submission is still loading.
    """

    def __init__(
        self,
        suggestion_requester: SuggestionRequester,
        image_requester: ImageRequester,
        tools: Optional[ToolSelector] = None,
        speech: Optional[SpeechCapability] = None,
        notify: Optional[Callable[[Notification], None]] = None,
        allow_resubmit: Optional[bool] = None,
    ) -> None:
        self.suggestion_requester = suggestion_requester
        self.image_requester = image_requester
        self.tools = tools if tools is not None else ToolSelector()
        self.allow_resubmit = config.ALLOW_RESUBMIT if allow_resubmit is None else allow_resubmit

        self.ingredients = ""
        self.errors = FormErrors()
        self.status = FinderStatus.IDLE
        self.message: Optional[str] = None
        self.cards: List[RecipeCard] = []
        self._generation = 0

        self.voice = VoiceCapture(speech, self, notify)

    @property
    def is_loading(self) -> bool:
        return self.status == FinderStatus.LOADING

    @property
    def can_submit(self) -> bool:
        return self.allow_resubmit or not self.is_loading

    @property
    def generation(self) -> int:
        return self._generation

    def validate(self) -> Optional[SuggestionRequest]:
        """Check the form and build a request, or set errors and return None.

        Both checks always run so every invalid field is reported at once.
        """
        self.errors.clear()
        ingredients = self.ingredients.strip()

        if len(ingredients) < config.MIN_INGREDIENTS_LENGTH:
            self.errors.ingredients = messages.INGREDIENTS_TOO_SHORT
        if self.tools.is_empty:
            self.errors.root = messages.NO_COOKING_TOOLS

        if self.errors:
            return None
        return SuggestionRequest(ingredients=ingredients, cooking_tools=self.tools.serialize())

    async def submit(self) -> bool:
        """Validate the form and run one suggestion request.

        Returns:
            True if a request was issued (whatever its outcome), False if the
            submission was rejected locally.
        """
        if not self.can_submit:
            logger.debug("Submit ignored: a suggestion request is already in flight")
            return False

        request = self.validate()
        if request is None:
            logger.info(f"Submission rejected by validation: {self.errors}")
            return False

        self._generation += 1
        generation = self._generation
        self._discard_cards()
        self.status = FinderStatus.LOADING
        self.message = None
        self.tools.record_submission()

        logger.info("Submitting suggestion request", extra={"generation": generation})
        try:
            recipes = await self.suggestion_requester(request)
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Discarding failure of stale submission #{generation}")
                return True
            logger.error(f"Suggestion request failed: {e}", extra={"generation": generation})
            self.status = FinderStatus.ERROR
            self.message = messages.SUGGESTION_FAILED
            return True

        if generation != self._generation:
            logger.info(f"Discarding response of stale submission #{generation}")
            return True

        if not recipes:
            self.status = FinderStatus.EMPTY
            self.message = messages.NO_RECIPES_FOUND
            return True

        self.cards = [RecipeCard(recipe, self.image_requester) for recipe in recipes]
        for card in self.cards:
            card.start()
        self.status = FinderStatus.SUCCESS
        logger.info(f"Showing {len(self.cards)} recipe(s)", extra={"generation": generation})
        return True

    def _discard_cards(self) -> None:
        for card in self.cards:
            card.discard()
        self.cards = []

    def close(self) -> None:
        """Tear the form down: pending card images are dropped, voice capture stops."""
        self._discard_cards()
        self.voice.stop()
