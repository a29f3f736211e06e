"""
Cancelable frame playback for time-lapse views.

``FramePlayer`` cycles through a list of frame labels (e.g. months).
Waiting between frames uses a ``threading.Event`` so ``stop()`` ends
playback immediately instead of sleeping out the interval.
"""

import threading
from typing import Iterator, Optional, Sequence

from config import MONTH_LABELS, PLAYBACK_INTERVAL_S


class FramePlayer:
    """Advance through *labels* at a fixed interval.

    Args:
        labels: Frame labels in playback order (non-empty).
        interval_s: Seconds between frames.
    """

    def __init__(self, labels: Sequence[str] = MONTH_LABELS, interval_s: float = PLAYBACK_INTERVAL_S):
        if not labels:
            raise ValueError("FramePlayer needs at least one frame")
        self.labels = list(labels)
        self.interval_s = interval_s
        self.index = 0
        self._stop = threading.Event()
        self._playing = False

    @property
    def current(self) -> str:
        return self.labels[self.index]

    @property
    def is_playing(self) -> bool:
        return self._playing

    def advance(self) -> str:
        """Move to the next frame, wrapping around."""
        self.index = (self.index + 1) % len(self.labels)
        return self.current

    def seek(self, label: str) -> None:
        self.index = self.labels.index(label)

    def play(self, max_frames: Optional[int] = None) -> Iterator[str]:
        """Yield the current frame, then one frame per interval.

        Stops after *max_frames* frames, or as soon as ``stop()`` is
        called.  Abandoning the iterator (e.g. the view rerenders) also
        ends playback.
        """
        self._stop.clear()
        self._playing = True
        try:
            yielded = 0
            yield self.current
            yielded += 1
            while max_frames is None or yielded < max_frames:
                if self._stop.wait(self.interval_s):
                    break
                yield self.advance()
                yielded += 1
        finally:
            self._playing = False

    def stop(self) -> None:
        self._stop.set()
