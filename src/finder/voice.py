"""Voice capture for the recipe form.

Speech-to-text is a platform capability this package does not implement. It is
injected as a SpeechCapability; when none is given (or it reports itself
unavailable) voice capture is silently disabled and every call is a no-op.

A capture session fills one target field:
- "ingredients": the session transcript replaces what this session wrote so far
  and is appended after the text that was there before the session started
- "tools": every final transcript is split on commas and each tool is added
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.finder import messages
from src.finder.tools import ToolSelector
from src.utils.config import config
from src.utils.logger import logger


INGREDIENTS = "ingredients"
TOOLS = "tools"

PERMISSION_ERRORS = ("not-allowed", "service-not-allowed")
NO_SPEECH_ERROR = "no-speech"


@dataclass(frozen=True)
class Notification:
    """Transient message shown to the user (a toast)."""

    title: str
    description: str


class SpeechCapability(Protocol):
    """Continuous speech-to-text provided by the platform.

    `on_result(transcript, is_final)` receives the transcript of the whole
    session so far; `on_error(kind)` receives the platform error code
    ("not-allowed", "no-speech", ...); `on_end()` fires when the platform ends
    the session (silence, completion, or after stop()). `lang` is a BCP 47
    recognition locale such as "id-ID".
    """

    def is_available(self) -> bool:
        ...

    def start(
        self,
        on_result: Callable[[str, bool], None],
        on_error: Callable[[str], None],
        on_end: Callable[[], None],
        lang: str,
    ) -> None:
        ...

    def stop(self) -> None:
        ...


class VoiceForm(Protocol):
    ingredients: str
    tools: ToolSelector


def _log_notification(notification: Notification) -> None:
    logger.warning(f"{notification.title}: {notification.description}")


class VoiceCapture:
    """Start/stop state of speech capture for one form."""

    def __init__(
        self,
        capability: Optional[SpeechCapability],
        form: VoiceForm,
        notify: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        self.capability = capability
        self.form = form
        self.notify = notify or _log_notification
        self.target: Optional[str] = None
        self._session = 0
        self._prefix = ""

        # Probed once: support does not change while the form is open
        self.available = False
        if capability is not None:
            try:
                self.available = bool(capability.is_available())
            except Exception as e:
                logger.debug(f"Speech capability probe failed, voice input disabled: {e}")

    @property
    def is_listening(self) -> bool:
        return self.target is not None

    def toggle(self, target: str) -> None:
        """Start capturing into target, or stop the running session."""
        if target not in (INGREDIENTS, TOOLS):
            raise ValueError(f"Unknown voice target: {target!r}")
        if not self.available:
            return

        if self.is_listening:
            self.stop()
            return

        self._session += 1
        session = self._session
        self.target = target
        self._prefix = self.form.ingredients.strip() if target == INGREDIENTS else ""

        try:
            self.capability.start(
                on_result=lambda transcript, is_final=True: self._on_result(session, transcript, is_final),
                on_error=lambda kind: self._on_error(session, kind),
                on_end=lambda: self._on_end(session),
                lang=config.SPEECH_LANG,
            )
        except Exception as e:
            logger.error(f"Could not start speech recognition: {e}")
            self._reset()
            self.notify(Notification(messages.VOICE_ERROR_TITLE, messages.VOICE_START_FAILED))
            return

        logger.debug(f"Voice capture started (target={target})")

    def stop(self) -> None:
        if not self.is_listening:
            return
        self._reset()
        try:
            self.capability.stop()
        except Exception as e:
            logger.debug(f"Stopping speech recognition failed: {e}")

    def _reset(self) -> None:
        self.target = None
        self._prefix = ""
        # Late callbacks from the finished session are ignored
        self._session += 1

    def _is_current(self, session: int) -> bool:
        return self.is_listening and session == self._session

    def _on_result(self, session: int, transcript: str, is_final: bool) -> None:
        if not self._is_current(session):
            return
        transcript = (transcript or "").strip()
        if not transcript:
            return

        if self.target == INGREDIENTS:
            self.form.ingredients = f"{self._prefix}, {transcript}" if self._prefix else transcript
        elif is_final:
            added = self.form.tools.add_many(transcript)
            logger.debug(f"Voice added tools: {added}")

    def _on_error(self, session: int, kind: str) -> None:
        if not self._is_current(session):
            return
        logger.warning(f"Speech recognition error: {kind}")
        self._reset()

        if kind in PERMISSION_ERRORS:
            self.notify(Notification(messages.VOICE_PERMISSION_TITLE, messages.VOICE_PERMISSION_DENIED))
        elif kind == NO_SPEECH_ERROR:
            self.notify(Notification(messages.VOICE_ERROR_TITLE, messages.VOICE_NO_SPEECH))
        else:
            self.notify(Notification(messages.VOICE_ERROR_TITLE, messages.VOICE_GENERIC_ERROR))

    def _on_end(self, session: int) -> None:
        if self._is_current(session):
            self._reset()
