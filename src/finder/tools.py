"""Cooking tool selection for the recipe form.

Two modes share one downstream contract (a non-empty, de-duplicated,
order-stable list of tool names serialized as a comma-joined string):

1. FREEFORM ("freeform"):
   - User types a tool and adds it (button or Enter)
   - Names are stripped and lower-cased, duplicates are ignored
   - Selection order = insertion order

2. PREDEFINED RANKED ("predefined-ranked"):
   - Fixed vocabulary rendered as toggles
   - Display order = vocabulary sorted by how often each tool was submitted before
   - Selection order = display order
"""

from typing import Dict, List, Optional, Sequence

from src.finder.storage import ToolFrequency
from src.utils.logger import logger


FREEFORM = "freeform"
PREDEFINED_RANKED = "predefined-ranked"

PREDEFINED_TOOLS: tuple[str, ...] = (
    "Kompor",
    "Panci",
    "Wajan",
    "Teflon",
    "Rice Cooker",
    "Microwave",
    "Oven",
    "Air Fryer",
    "Blender",
    "Pemanggang",
    "Kukusan",
    "Ketel Listrik",
)


class ToolSelector:
    """Mutable set of selected cooking tools.

    Args:
        mode: FREEFORM or PREDEFINED_RANKED.
        vocabulary: Tools offered in PREDEFINED_RANKED mode.
        frequency: Persisted usage counts; only read and written in PREDEFINED_RANKED mode.
    """

    def __init__(
        self,
        mode: str = FREEFORM,
        vocabulary: Sequence[str] = PREDEFINED_TOOLS,
        frequency: Optional[ToolFrequency] = None,
    ) -> None:
        if mode not in (FREEFORM, PREDEFINED_RANKED):
            raise ValueError(f"mode must be '{FREEFORM}' or '{PREDEFINED_RANKED}', got: {mode}")

        self.mode = mode
        self.frequency = frequency
        self._selected: List[str] = []

        if mode == PREDEFINED_RANKED:
            vocabulary = list(dict.fromkeys(vocabulary))
            # Ranked once per form lifetime: counts written by this session show up on the next load
            self.options: List[str] = frequency.rank(vocabulary) if frequency else vocabulary
            self._by_lower: Dict[str, str] = {tool.lower(): tool for tool in self.options}
        else:
            self.options = []
            self._by_lower = {}

    @property
    def selected(self) -> List[str]:
        if self.mode == PREDEFINED_RANKED:
            return [tool for tool in self.options if tool in self._selected]
        return list(self._selected)

    @property
    def is_empty(self) -> bool:
        return not self._selected

    def is_selected(self, name: str) -> bool:
        return self._resolve(name) in self._selected

    def _resolve(self, name: str) -> Optional[str]:
        cleaned = (name or "").strip().lower()
        if not cleaned:
            return None
        if self.mode == PREDEFINED_RANKED:
            return self._by_lower.get(cleaned)
        return cleaned

    def add(self, name: str) -> bool:
        """Add a tool. Returns False for empty, duplicate or (predefined) unknown names."""
        tool = self._resolve(name)
        if tool is None:
            if self.mode == PREDEFINED_RANKED and (name or "").strip():
                logger.debug(f"Ignoring tool outside the predefined vocabulary: {name!r}")
            return False
        if tool in self._selected:
            return False
        self._selected.append(tool)
        return True

    def add_many(self, text: str) -> List[str]:
        """Add every comma-separated tool in text; returns the tools actually added."""
        added = []
        for part in (text or "").split(","):
            if self.add(part):
                added.append(self._resolve(part))
        return added

    def remove(self, name: str) -> bool:
        tool = self._resolve(name)
        if tool is None or tool not in self._selected:
            return False
        self._selected.remove(tool)
        return True

    def toggle(self, name: str) -> bool:
        """Flip a predefined tool. Returns True if it is selected afterwards.

        Raises:
            ValueError: If the name is not part of the vocabulary.
        """
        if self.mode != PREDEFINED_RANKED:
            raise ValueError("toggle() is only available in predefined-ranked mode")
        tool = self._resolve(name)
        if tool is None:
            raise ValueError(f"Unknown cooking tool: {name!r}")
        if tool in self._selected:
            self._selected.remove(tool)
            return False
        self._selected.append(tool)
        return True

    def clear(self) -> None:
        self._selected.clear()

    def serialize(self) -> str:
        return ", ".join(self.selected)

    def record_submission(self) -> None:
        """Count the current selection towards the persisted tool ranking."""
        if self.mode != PREDEFINED_RANKED or self.frequency is None or self.is_empty:
            return
        self.frequency.increment(self.selected)
