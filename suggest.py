#!/usr/bin/env python3
"""Interactive recipe finder for the terminal.

Asks for ingredients and cooking tools, requests recipe suggestions, then shows
one card per recipe while each card's illustration is generated in the background.

Usage:
    python suggest.py
    python suggest.py --mode predefined-ranked      # pick tools from the ranked list
    python suggest.py --no-images                   # skip image generation
    python suggest.py --stateless                   # do not read/write tool usage counts
    python suggest.py --debug                       # also print the recipes as JSON (without images)

Features:
- Same validation as the web form (ingredients length, at least one tool)
- Skeleton placeholders while suggestions load
- Per-card image loading; failures fall back to the placeholder silently
- Repeat searches in one session (tool ranking reloads on next start)
"""

import argparse
import asyncio
import sys

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from src.finder.cards import RecipeCard
from src.finder.finder import SKELETON_COUNT, FinderStatus, RecipeFinder
from src.finder.storage import InMemoryStore, JsonFileStore, ToolFrequency
from src.finder.tools import FREEFORM, PREDEFINED_RANKED, ToolSelector
from src.flows.image_generation import RecipeImageGenerator
from src.flows.recipe_suggestion import RecipeSuggester
from src.utils.config import config
from src.utils.logger import logger

console = Console()


async def _no_image(title: str) -> str:
    return config.PLACEHOLDER_IMAGE_URL


def describe_image(card: RecipeCard) -> Text:
    if card.is_image_loading:
        return Text("🖼  Membuat gambar...", style="dim italic")
    if card.image_url.startswith("data:"):
        mime = card.image_url[5:].split(";", 1)[0]
        size_kb = len(card.image_url) * 3 / 4 / 1024
        return Text(f"🖼  Gambar dibuat ({mime}, ~{size_kb:.0f} KB)", style="green")
    if card.image_url == card.placeholder:
        return Text(f"🖼  {card.image_url}", style="dim")
    return Text(f"🖼  {card.image_url}", style="green")


def render_card(index: int, card: RecipeCard) -> Panel:
    recipe = card.recipe
    body = Text()
    body.append(f"{recipe.description}\n", style="italic")

    badges = [b for b in (recipe.servings and f"👥 {recipe.servings}", recipe.prep_time and f"⏱ {recipe.prep_time}") if b]
    if badges:
        body.append("  ".join(badges) + "\n")

    body.append("\nBahan-bahan\n", style="bold")
    for item in recipe.ingredients:
        body.append(f"  • {item}\n")
    body.append("\nCara Memasak\n", style="bold")
    for step_no, step in enumerate(recipe.steps, start=1):
        body.append(f"  {step_no}. {step}\n")

    return Panel(
        Group(describe_image(card), body),
        title=f"[bold green]{index}. {recipe.title}[/bold green]",
        title_align="left",
    )


def render_results(finder: RecipeFinder):
    if finder.status == FinderStatus.LOADING:
        skeleton = Text("░░░░░░░░░░░░░░░░░░░░░░\n░░░░░░░░░░░░░░░░░░░░░░░░░░░░░░░░\n░░░░░░░░░░░░░░░░░░░░░░░░░░", style="dim")
        return Group(
            Text("⏳ Mencari ide...", style="bold"),
            *[Panel(skeleton) for _ in range(SKELETON_COUNT)],
        )
    if finder.status == FinderStatus.ERROR:
        return Panel(finder.message or "", title="[bold red]Oops, ada masalah![/bold red]", border_style="red")
    if finder.status == FinderStatus.EMPTY:
        return Panel(finder.message or "", border_style="yellow")
    if finder.status == FinderStatus.SUCCESS:
        return Group(
            Text("Ini dia idenya!", style="bold green", justify="center"),
            *[render_card(i, card) for i, card in enumerate(finder.cards, start=1)],
        )
    return Text("")


def ask_freeform_tools(tools: ToolSelector) -> None:
    console.print("[bold]Alat masak yang tersedia?[/bold] [dim](pisahkan dengan koma, '-nama' untuk menghapus)[/dim]")
    if tools.selected:
        console.print(f"[dim]Saat ini: {tools.serialize()}[/dim]")
    answer = Prompt.ask("Alat", default="", show_default=False)
    for part in answer.split(","):
        part = part.strip()
        if part.startswith("-"):
            tools.remove(part[1:])
        else:
            tools.add(part)


def ask_predefined_tools(tools: ToolSelector) -> None:
    console.print("[bold]Alat masak yang tersedia?[/bold] [dim](nomor dipisah koma untuk memilih/membatalkan)[/dim]")
    for number, tool in enumerate(tools.options, start=1):
        mark = "[green]✔[/green]" if tools.is_selected(tool) else " "
        console.print(f"  {mark} {number:>2}. {tool}")
    answer = Prompt.ask("Nomor", default="", show_default=False)
    for part in answer.split(","):
        part = part.strip()
        if part.isdigit() and 1 <= int(part) <= len(tools.options):
            tools.toggle(tools.options[int(part) - 1])


def ask_form(finder: RecipeFinder) -> None:
    finder.ingredients = Prompt.ask(
        "[bold]Bahan yang kamu punya?[/bold] [dim](contoh: mie instan, telur, bawang putih)[/dim]",
        default=finder.ingredients or "",
        show_default=bool(finder.ingredients),
    )
    if finder.tools.mode == PREDEFINED_RANKED:
        ask_predefined_tools(finder.tools)
    else:
        ask_freeform_tools(finder.tools)


def show_errors(finder: RecipeFinder) -> None:
    for message in (finder.errors.ingredients, finder.errors.root):
        if message:
            console.print(f"[red]✗ {message}[/red]")


async def run_search(finder: RecipeFinder, debug: bool) -> None:
    with Live(render_results(finder), console=console, refresh_per_second=8) as live:
        submission = asyncio.create_task(finder.submit())
        while not submission.done():
            live.update(render_results(finder))
            await asyncio.sleep(0.1)
        submission.result()

        while any(card.is_image_loading for card in finder.cards):
            live.update(render_results(finder))
            await asyncio.sleep(0.2)
        live.update(render_results(finder))

    if debug and finder.cards:
        console.print_json(data=[card.recipe.model_dump(exclude={"image_url"}) for card in finder.cards])


async def main(mode: str, with_images: bool, stateless: bool, debug: bool) -> None:
    store = InMemoryStore() if stateless else JsonFileStore(config.TOOL_FREQUENCY_FILE)
    tools = ToolSelector(mode=mode, frequency=ToolFrequency(store, config.TOOL_FREQUENCY_KEY))

    suggester = RecipeSuggester()
    image_requester = RecipeImageGenerator().get_image if with_images else _no_image
    finder = RecipeFinder(suggester.get_suggestions, image_requester, tools=tools)

    console.print(Panel.fit("[bold green]Pirinku[/bold green]\nResep masakan andalan anak kos", border_style="green"))
    try:
        while True:
            ask_form(finder)
            if finder.validate() is None:
                show_errors(finder)
                continue
            await run_search(finder, debug)
            if not Confirm.ask("Cari resep lain?", default=False):
                break
    finally:
        finder.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Suggest recipes from the ingredients and tools you have.")
    parser.add_argument("--mode", choices=[FREEFORM, PREDEFINED_RANKED], default=config.TOOL_SELECTOR_MODE)
    parser.add_argument("--no-images", action="store_true", help="skip image generation")
    parser.add_argument("--stateless", action="store_true", help="do not persist tool usage counts")
    parser.add_argument("--debug", action="store_true", help="print raw recipe JSON")
    args = parser.parse_args()

    try:
        asyncio.run(main(args.mode, not args.no_images, args.stateless, args.debug))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Recipe finder failed: {e}", exc_info=True)
        sys.exit(1)
