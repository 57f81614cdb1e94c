"""
Synthetic clip source for the desktop demo.

Plays the part of the audio engine and the speech-to-text engine: renders
RGBA waveform/spectrogram frames of generated tones and produces a fake
transcript after a short delay.
"""
import logging
import time
import typing as t

import numpy as np

from .models import RECORDING, RenderMode, Viewport

logger = logging.getLogger(__name__)

SAMPLE_RATE = 8000
N_FFT = 256

BACKGROUND = (250, 245, 255, 255)
FOREGROUND = (88, 28, 135, 255)

_WORDS = ["so", "this", "is", "a", "test", "of", "the", "clip", "view", "hello", "again"]


class ToneSource:
    """Pixel and transcript producer backed by generated audio.

    Attributes:
        durations: Clip durations in seconds keyed by clip id
        subject: Clip currently rendered (a clip id or RECORDING)
        render_mode: Current render mode
        viewport: Window of the clip being rendered
    """

    def __init__(self, durations: t.Optional[t.Dict[int, float]] = None,
                 transcribe_delay: float = 0.5, failing: t.Iterable[int] = ()):
        self.durations = dict(durations or {1: 6.0, 2: 12.5, 3: 0.0})
        self.transcribe_delay = transcribe_delay
        self.failing = set(failing)
        self.subject: t.Any = None
        self.render_mode = RenderMode.WAVEFORM
        self.viewport = Viewport(time_start=0.0, time_end=1.0)
        self._record_started: t.Optional[float] = None

    # ----- clip state --------------------------------------------------

    def select(self, subject: t.Any) -> Viewport:
        """Make ``subject`` current and return its full viewport."""
        self.subject = subject
        if subject is RECORDING:
            self._record_started = time.monotonic()
        self.viewport = Viewport(time_start=0.0, time_end=max(self.duration(), 1.0))
        return self.viewport

    def duration(self) -> float:
        if self.subject is RECORDING:
            return time.monotonic() - (self._record_started or time.monotonic())
        return self.durations.get(self.subject, 0.0)

    def samples(self, start: float, end: float) -> np.ndarray:
        """Generated audio between two times, silent past the clip's end."""
        n = max(int((end - start) * SAMPLE_RATE), 0)
        ts = start + np.arange(n) / SAMPLE_RATE
        base = 220.0 * (1 + (hash(self.subject) % 4))
        signal = (0.6 * np.sin(2 * np.pi * base * ts)
                  + 0.3 * np.sin(2 * np.pi * base * 2.5 * ts))
        envelope = 0.5 + 0.5 * np.sin(2 * np.pi * 0.4 * ts)
        signal = signal * envelope
        signal[ts > self.duration()] = 0.0
        return signal.astype(np.float32)

    # ----- PixelProducer -----------------------------------------------

    def draw(self, width_px: int, height_px: int) -> bytes:
        if width_px <= 0 or height_px <= 0 or self.duration() <= 0:
            return b""
        samples = self.samples(self.viewport.time_start, self.viewport.time_end)
        if samples.size < width_px:
            return b""
        if self.render_mode is RenderMode.SPECTROGRAM:
            image = _spectrogram(samples, width_px, height_px)
        else:
            image = _waveform(samples, width_px, height_px)
        return image.tobytes()

    # ----- TranscriptProducer ------------------------------------------

    def transcribe(self) -> list:
        subject = self.subject
        time.sleep(self.transcribe_delay)
        if subject in self.failing:
            raise RuntimeError(f"speech model unavailable for clip {subject}")
        duration = self.durations.get(subject, 0.0)
        segments = []
        t0 = 0.2
        i = 0
        while t0 + 0.8 < duration:
            words = " ".join(_WORDS[(i + k) % len(_WORDS)] for k in range(3))
            segments.append(((t0, t0 + 1.6), words))
            t0 += 2.0
            i += 3
        return segments


def _waveform(samples: np.ndarray, width: int, height: int) -> np.ndarray:
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[:] = BACKGROUND
    starts = np.linspace(0, samples.size, width, endpoint=False).astype(int)
    hi = np.maximum.reduceat(samples, starts)
    lo = np.minimum.reduceat(samples, starts)
    top = ((1.0 - hi) * 0.5 * (height - 1)).astype(int)
    bottom = ((1.0 - lo) * 0.5 * (height - 1)).astype(int)
    rows = np.arange(height)[:, None]
    mask = (rows >= top[None, :]) & (rows <= bottom[None, :])
    image[mask] = FOREGROUND
    return image


def _spectrogram(samples: np.ndarray, width: int, height: int) -> np.ndarray:
    padded = np.pad(samples, (0, N_FFT))
    starts = np.linspace(0, samples.size, width, endpoint=False).astype(int)
    frames = np.stack([padded[s:s + N_FFT] for s in starts]) * np.hanning(N_FFT)
    power = np.abs(np.fft.rfft(frames, axis=1)) ** 2
    db = 10 * np.log10(power + 1e-10)
    level = np.clip((db + 60.0) / 60.0, 0.0, 1.0)     # (width, bins)
    # Low frequencies at the bottom
    bins = np.linspace(level.shape[1] - 1, 0, height).astype(int)
    v = level[:, bins].T                                # (height, width)
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., 0] = (v * 255).astype(np.uint8)
    image[..., 1] = (v * 90).astype(np.uint8)
    image[..., 2] = (80 + v * 175).astype(np.uint8)
    image[..., 3] = 255
    return image
