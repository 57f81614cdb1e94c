from .models import (
    DrawRequest,
    NO_CLIP,
    RECORDING,
    RenderInputs,
    RenderMode,
    Segment,
    ViewState,
    Viewport,
    normalize_segments,
)
from .interfaces import ErrorReporter, LoggingErrorReporter, PixelProducer, TranscriptProducer
