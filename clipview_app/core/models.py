"""
Data model for the clip view.

Pydantic models carry values that arrive from outside (viewport, transcript
segments); plain dataclasses hold the small internal value objects.
"""
import dataclasses
import enum
import typing as t
from collections.abc import Hashable, Mapping, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class RenderMode(enum.Enum):
    """Kind of image the pixel producer renders."""
    WAVEFORM = "waveform"
    SPECTROGRAM = "spectrogram"

    def toggled(self) -> "RenderMode":
        """Return the other mode."""
        if self is RenderMode.WAVEFORM:
            return RenderMode.SPECTROGRAM
        return RenderMode.WAVEFORM


class _Sentinel(enum.Enum):
    NO_CLIP = "no-clip"
    RECORDING = "recording"

    def __repr__(self):
        return f"<{self.value}>"


# Subjects are opaque hashables; these two stand in for "nothing selected"
# and "the live recording".
NO_CLIP = _Sentinel.NO_CLIP
RECORDING = _Sentinel.RECORDING

Subject = Hashable


class ViewState(enum.Enum):
    """Lifecycle of a mounted view."""
    UNINITIALIZED = "uninitialized"
    OBSERVING = "observing"
    READY = "ready"
    TORN_DOWN = "torn_down"


class Viewport(BaseModel):
    """Visible time window in seconds.

    Attributes:
        time_start: Time shown at the left edge
        time_end: Time shown at the right edge, strictly after time_start
    """
    time_start: float
    time_end: float
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "Viewport":
        if not self.time_end > self.time_start:
            raise ValueError(
                f"time_end ({self.time_end}) must be greater than time_start ({self.time_start})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.time_end - self.time_start


class Segment(BaseModel):
    """A transcribed span of audio.

    Attributes:
        t0: Start time in seconds
        t1: End time in seconds (t1 < t0 is tolerated and renders as nothing)
        text: The transcribed text
    """
    t0: float
    t1: float
    text: str = Field(validation_alias=AliasChoices("text", "segment"))
    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def coerce(cls, item: t.Any) -> "Segment":
        """Build a Segment from any of the shapes transcript producers return.

        Accepts a Segment, a mapping with ``t0``/``t1``/``text`` (or
        ``segment``) keys, or the engine's ``((t0, t1), text)`` tuple.
        """
        if isinstance(item, Segment):
            return item
        if isinstance(item, Mapping):
            return cls.model_validate(item)
        if isinstance(item, Sequence) and not isinstance(item, str) and len(item) == 2:
            (t0, t1), text = item
            return cls(t0=t0, t1=t1, text=text)
        # Fall back to attribute access (e.g. other model objects)
        return cls(t0=item.t0, t1=item.t1, text=item.text)


def normalize_segments(items: t.Optional[t.Iterable[t.Any]]) -> list[Segment]:
    """Coerce a producer's result into a list of Segment."""
    if not items:
        return []
    return [Segment.coerce(item) for item in items]


@dataclasses.dataclass(frozen=True)
class DrawRequest:
    """Device-pixel size of one frame requested from the pixel producer."""
    width_px: int
    height_px: int

    @property
    def byte_length(self) -> int:
        """Expected length of an RGBA buffer for this request."""
        return self.width_px * self.height_px * 4

    def is_empty(self) -> bool:
        return self.width_px <= 0 or self.height_px <= 0


@dataclasses.dataclass
class RenderInputs:
    """Everything the caller provides to the view on each render."""
    subject: Subject = NO_CLIP
    render_mode: RenderMode = RenderMode.WAVEFORM
    viewport: Viewport = dataclasses.field(
        default_factory=lambda: Viewport(time_start=0.0, time_end=1.0)
    )
    time: float = 0.0
    streaming: bool = False
