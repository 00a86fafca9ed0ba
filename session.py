"""Headshot session state.

The session is a tagged union of frozen state records. Every change goes
through :func:`transition`, which returns the current state unchanged for any
event that is not legal in it. :class:`HeadshotSession` wraps the state
together with the injected Gemini client and performs the network calls.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from google import genai
from loguru import logger

from generation import HeadshotError, edit_headshot, generate_headshot
from images import ImagePayload, download_filename, to_png
from styles import StylePreset

GENERATE_ERROR_MESSAGE = "Failed to generate headshot. Please try again."
EDIT_ERROR_MESSAGE = "Failed to edit image. Please try again."


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Ready:
    source: ImagePayload
    preset: Optional[StylePreset] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Result:
    source: ImagePayload
    preset: StylePreset
    image: ImagePayload
    error: Optional[str] = None


@dataclass(frozen=True)
class Generating:
    previous: Union[Ready, Result]
    preset: StylePreset

    @property
    def source(self) -> ImagePayload:
        return self.previous.source


@dataclass(frozen=True)
class Editing:
    previous: Result
    instruction: str

    @property
    def source(self) -> ImagePayload:
        return self.previous.source

    @property
    def preset(self) -> StylePreset:
        return self.previous.preset

    @property
    def image(self) -> ImagePayload:
        return self.previous.image


State = Union[Idle, Ready, Generating, Result, Editing]


@dataclass(frozen=True)
class ImageSelected:
    image: ImagePayload


@dataclass(frozen=True)
class ImageCleared:
    pass


@dataclass(frozen=True)
class PresetSelected:
    preset: StylePreset


@dataclass(frozen=True)
class GenerateRequested:
    pass


@dataclass(frozen=True)
class GenerateSucceeded:
    image: ImagePayload


@dataclass(frozen=True)
class GenerateFailed:
    message: str = GENERATE_ERROR_MESSAGE


@dataclass(frozen=True)
class EditRequested:
    instruction: str


@dataclass(frozen=True)
class EditSucceeded:
    image: ImagePayload


@dataclass(frozen=True)
class EditFailed:
    message: str = EDIT_ERROR_MESSAGE


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[
    ImageSelected,
    ImageCleared,
    PresetSelected,
    GenerateRequested,
    GenerateSucceeded,
    GenerateFailed,
    EditRequested,
    EditSucceeded,
    EditFailed,
    Reset,
]


def transition(state: State, event: Event) -> State:
    if isinstance(event, Reset):
        return Idle()

    if isinstance(event, ImageSelected):
        if isinstance(state, Idle):
            return Ready(source=event.image)
        if isinstance(state, (Ready, Result)):
            return replace(state, source=event.image, error=None)
        return state

    if isinstance(event, ImageCleared):
        if isinstance(state, (Ready, Result)):
            return Idle()
        return state

    if isinstance(event, PresetSelected):
        if isinstance(state, (Ready, Result)):
            return replace(state, preset=event.preset)
        return state

    if isinstance(event, GenerateRequested):
        if isinstance(state, (Ready, Result)) and state.preset is not None:
            return Generating(previous=replace(state, error=None), preset=state.preset)
        return state

    if isinstance(event, GenerateSucceeded):
        if isinstance(state, Generating):
            return Result(source=state.source, preset=state.preset, image=event.image)
        return state

    if isinstance(event, GenerateFailed):
        if isinstance(state, Generating):
            return replace(state.previous, error=event.message)
        return state

    if isinstance(event, EditRequested):
        instruction = event.instruction.strip()
        if isinstance(state, Result) and instruction:
            return Editing(previous=replace(state, error=None), instruction=instruction)
        return state

    if isinstance(event, EditSucceeded):
        if isinstance(state, Editing):
            return replace(state.previous, image=event.image, error=None)
        return state

    if isinstance(event, EditFailed):
        if isinstance(state, Editing):
            return replace(state.previous, error=event.message)
        return state

    raise TypeError(f"Unknown session event: {event!r}")


class HeadshotSession:
    def __init__(self, client: genai.Client, *, model: Optional[str] = None, state: Optional[State] = None):
        self._client = client
        self._model = model
        self._state: State = state if state is not None else Idle()

    @property
    def state(self) -> State:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return getattr(self._state, "error", None)

    @property
    def source(self) -> Optional[ImagePayload]:
        return getattr(self._state, "source", None)

    @property
    def preset(self) -> Optional[StylePreset]:
        return getattr(self._state, "preset", None)

    @property
    def result(self) -> Optional[ImagePayload]:
        return getattr(self._state, "image", None)

    @property
    def in_progress(self) -> bool:
        return isinstance(self._state, (Generating, Editing))

    @property
    def can_generate(self) -> bool:
        return isinstance(self._state, (Ready, Result)) and self._state.preset is not None

    @property
    def can_edit(self) -> bool:
        return isinstance(self._state, Result)

    def dispatch(self, event: Event) -> State:
        previous = self._state
        self._state = transition(previous, event)
        if self._state is previous:
            logger.debug("Ignored {} in state {}", type(event).__name__, type(previous).__name__)
        else:
            logger.debug(
                "Session {} -> {} on {}",
                type(previous).__name__,
                type(self._state).__name__,
                type(event).__name__,
            )
        return self._state

    def select_image(self, image: ImagePayload) -> State:
        return self.dispatch(ImageSelected(image))

    def clear_image(self) -> State:
        return self.dispatch(ImageCleared())

    def select_preset(self, preset: StylePreset) -> State:
        return self.dispatch(PresetSelected(preset))

    def reset(self) -> State:
        logger.info("Resetting headshot session.")
        return self.dispatch(Reset())

    def generate(self) -> bool:
        """Generate a headshot from the current source and preset.

        Returns ``False`` without contacting the model when generation is not
        allowed in the current state. Failures are logged and surfaced through
        :attr:`error`; the previous image, if any, stays in place.
        """
        state = self.dispatch(GenerateRequested())
        if not isinstance(state, Generating):
            logger.warning("Generate requested without a source image and a style; ignoring.")
            return False

        logger.info("Generating headshot with style '{}'", state.preset.id)
        try:
            image = generate_headshot(self._client, state.source, state.preset.prompt, model=self._model)
        except HeadshotError as exc:
            logger.error("Headshot generation failed: {}", exc)
            self.dispatch(GenerateFailed())
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error generating headshot.")
            self.dispatch(GenerateFailed())
            return True

        self.dispatch(GenerateSucceeded(image))
        return True

    def edit(self, instruction: str) -> bool:
        state = self.dispatch(EditRequested(instruction or ""))
        if not isinstance(state, Editing):
            logger.warning("Edit requested without a result or with an empty instruction; ignoring.")
            return False

        logger.info("Editing headshot; instruction_len={}", len(state.instruction))
        try:
            image = edit_headshot(self._client, state.image, state.instruction, model=self._model)
        except HeadshotError as exc:
            logger.error("Headshot edit failed: {}", exc)
            self.dispatch(EditFailed())
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error editing headshot.")
            self.dispatch(EditFailed())
            return True

        self.dispatch(EditSucceeded(image))
        return True

    def download(self) -> Optional[tuple[str, bytes]]:
        """Return ``(filename, png_bytes)`` for the current result, if any."""
        if self.result is None:
            return None
        preset = self.preset
        return download_filename(preset.id if preset else None), to_png(self.result)
