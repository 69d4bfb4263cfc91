"""Unit tests for the recipe finder form and result state machine."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.finder import messages
from src.finder.finder import FinderStatus, RecipeFinder
from src.finder.storage import InMemoryStore, ToolFrequency
from src.finder.tools import PREDEFINED_RANKED, ToolSelector
from src.models.models import Recipe, SuggestionRequest
from src.utils.config import config


def _recipe(title):
    return Recipe(
        title=title,
        description=f"Resep {title}.",
        ingredients=["2 butir telur"],
        steps=["Masak sampai matang."],
    )


def _finder(suggestions=None, images=None, **kwargs):
    finder = RecipeFinder(
        suggestions or AsyncMock(return_value=[]),
        images or AsyncMock(return_value="https://img.example/x.png"),
        **kwargs,
    )
    return finder


def _fill(finder, ingredients="telur, nasi", tools=("teflon",)):
    finder.ingredients = ingredients
    for tool in tools:
        finder.tools.add(tool)


async def _settle(finder):
    await asyncio.gather(*(card.task for card in finder.cards if card.task))


class TestValidation:
    def test_both_errors_reported_at_once(self):
        finder = _finder()
        finder.ingredients = "ab"

        assert finder.validate() is None
        assert finder.errors.ingredients == messages.INGREDIENTS_TOO_SHORT
        assert finder.errors.root == messages.NO_COOKING_TOOLS

    def test_whitespace_does_not_count(self):
        finder = _finder()
        _fill(finder, ingredients="  ab  ")

        assert finder.validate() is None
        assert finder.errors.ingredients == messages.INGREDIENTS_TOO_SHORT
        assert finder.errors.root is None

    def test_valid_form_builds_request(self):
        finder = _finder()
        _fill(finder, ingredients=" telur ", tools=("Teflon", "Kompor"))

        request = finder.validate()

        assert request == SuggestionRequest(ingredients="telur", cooking_tools="teflon, kompor")
        assert not finder.errors

    @pytest.mark.asyncio
    async def test_long_ingredients_are_submitted(self):
        suggestions = AsyncMock(return_value=[])
        finder = _finder(suggestions)
        _fill(finder, ingredients="telur, " * 400, tools=("kompor",))

        assert await finder.submit() is True

        request = suggestions.await_args.args[0]
        assert request.ingredients == ("telur, " * 400).strip()
        assert finder.status == FinderStatus.EMPTY

    @pytest.mark.asyncio
    async def test_long_tool_list_is_submitted(self):
        suggestions = AsyncMock(return_value=[])
        finder = _finder(suggestions)
        finder.ingredients = "telur"
        finder.tools.add_many(", ".join(f"alat masak nomor {i}" for i in range(100)))

        assert await finder.submit() is True

        assert suggestions.await_args.args[0].cooking_tools.count(",") == 99
        assert not finder.errors

    @pytest.mark.asyncio
    async def test_invalid_submit_never_calls_provider(self):
        suggestions = AsyncMock(return_value=[])
        finder = _finder(suggestions)
        finder.ingredients = "telur"

        assert await finder.submit() is False

        suggestions.assert_not_awaited()
        assert finder.status == FinderStatus.IDLE


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_shows_cards_in_order_with_placeholders(self):
        release = asyncio.Event()

        async def images(title):
            await release.wait()
            return f"https://img.example/{title}.png"

        finder = _finder(AsyncMock(return_value=[_recipe("A"), _recipe("B"), _recipe("C")]), images)
        _fill(finder)

        assert await finder.submit() is True

        assert finder.status == FinderStatus.SUCCESS
        assert [card.title for card in finder.cards] == ["A", "B", "C"]
        assert all(card.image_url == config.PLACEHOLDER_IMAGE_URL for card in finder.cards)
        assert all(card.is_image_loading for card in finder.cards)

        release.set()
        await _settle(finder)
        assert [card.image_url for card in finder.cards] == [
            "https://img.example/A.png",
            "https://img.example/B.png",
            "https://img.example/C.png",
        ]

    @pytest.mark.asyncio
    async def test_status_is_loading_while_waiting(self):
        release = asyncio.Event()

        async def suggestions(request):
            await release.wait()
            return [_recipe("A")]

        finder = _finder(suggestions)
        _fill(finder)

        task = asyncio.create_task(finder.submit())
        await asyncio.sleep(0)
        assert finder.is_loading
        assert finder.can_submit is False

        release.set()
        await task
        assert finder.status == FinderStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_empty_result(self):
        finder = _finder(AsyncMock(return_value=[]))
        _fill(finder)

        await finder.submit()

        assert finder.status == FinderStatus.EMPTY
        assert finder.message == messages.NO_RECIPES_FOUND
        assert finder.cards == []

    @pytest.mark.asyncio
    async def test_provider_failure_sets_error(self):
        finder = _finder(AsyncMock(side_effect=RuntimeError("503")))
        _fill(finder)

        assert await finder.submit() is True

        assert finder.status == FinderStatus.ERROR
        assert finder.message == messages.SUGGESTION_FAILED
        assert finder.cards == []

    @pytest.mark.asyncio
    async def test_failing_image_only_affects_its_card(self):
        async def images(title):
            if title == "B":
                raise RuntimeError("image quota")
            return f"https://img.example/{title}.png"

        finder = _finder(AsyncMock(return_value=[_recipe("A"), _recipe("B")]), images)
        _fill(finder)

        await finder.submit()
        await _settle(finder)

        a, b = finder.cards
        assert a.image_url == "https://img.example/A.png"
        assert b.image_url == config.PLACEHOLDER_IMAGE_URL
        assert not a.is_image_loading and not b.is_image_loading
        assert finder.status == FinderStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_identical_submissions_call_provider_twice(self):
        suggestions = AsyncMock(return_value=[_recipe("A")])
        finder = _finder(suggestions)
        _fill(finder)

        await finder.submit()
        await finder.submit()

        assert suggestions.await_count == 2
        assert suggestions.await_args_list[0] == suggestions.await_args_list[1]
        assert finder.generation == 2

    @pytest.mark.asyncio
    async def test_resubmit_discards_previous_cards(self):
        finder = _finder(AsyncMock(side_effect=[[_recipe("A")], [_recipe("B")]]))
        _fill(finder)

        await finder.submit()
        old_card = finder.cards[0]
        await finder.submit()

        assert old_card.discarded is True
        assert [card.title for card in finder.cards] == ["B"]

    @pytest.mark.asyncio
    async def test_submit_rejected_while_loading_by_default(self):
        release = asyncio.Event()
        calls = []

        async def suggestions(request):
            calls.append(request)
            await release.wait()
            return []

        finder = _finder(suggestions, allow_resubmit=False)
        _fill(finder)

        first = asyncio.create_task(finder.submit())
        await asyncio.sleep(0)
        assert await finder.submit() is False

        release.set()
        await first
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_stale_response_never_overwrites_newer_one(self):
        first_release = asyncio.Event()

        async def suggestions(request):
            if request.ingredients == "lambat":
                await first_release.wait()
                return [_recipe("Lama")]
            return [_recipe("Baru")]

        finder = _finder(suggestions, allow_resubmit=True)
        _fill(finder, ingredients="lambat")

        slow = asyncio.create_task(finder.submit())
        await asyncio.sleep(0)
        finder.ingredients = "cepat"
        await finder.submit()

        first_release.set()
        await slow

        assert finder.status == FinderStatus.SUCCESS
        assert [card.title for card in finder.cards] == ["Baru"]

    @pytest.mark.asyncio
    async def test_stale_failure_is_ignored(self):
        first_release = asyncio.Event()

        async def suggestions(request):
            if request.ingredients == "lambat":
                await first_release.wait()
                raise RuntimeError("timeout")
            return []

        finder = _finder(suggestions, allow_resubmit=True)
        _fill(finder, ingredients="lambat")

        slow = asyncio.create_task(finder.submit())
        await asyncio.sleep(0)
        finder.ingredients = "cepat"
        await finder.submit()

        first_release.set()
        await slow

        assert finder.status == FinderStatus.EMPTY

    @pytest.mark.asyncio
    async def test_submission_records_tool_frequency(self):
        store = InMemoryStore()
        tools = ToolSelector(PREDEFINED_RANKED, frequency=ToolFrequency(store, "toolFrequency"))
        finder = _finder(AsyncMock(return_value=[]), tools=tools)
        finder.ingredients = "telur"
        tools.toggle("Panci")

        await finder.submit()

        assert store.read("toolFrequency") == {"Panci": 1}
        assert tools.selected == ["Panci"]

    @pytest.mark.asyncio
    async def test_close_discards_cards_and_stops_voice(self):
        finder = _finder(AsyncMock(return_value=[_recipe("A")]))
        _fill(finder)
        await finder.submit()
        card = finder.cards[0]

        finder.close()

        assert card.discarded is True
        assert finder.cards == []
        assert finder.voice.is_listening is False
