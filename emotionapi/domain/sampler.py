"""
Frame sampling policy
"""
from typing import Tuple

DEFAULT_SAMPLE_INTERVAL = 3


class FrameSampler:
    """Keeps every Nth frame of a stream and drops the rest.

    Frames are counted from 1, so with N = 3 the frames 3, 6, 9, ... are
    processed. Python integers are unbounded, so the counter never wraps.
    """

    def __init__(self, interval: int = DEFAULT_SAMPLE_INTERVAL):
        if interval < 1:
            raise ValueError(f"Sample interval must be >= 1, got {interval}")
        self.interval = interval
        self._frame_count = 0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def should_process(self, frame_index: int) -> bool:
        """Check whether the frame with the given 1-based index is kept"""
        return frame_index > 0 and frame_index % self.interval == 0

    def next_frame(self) -> Tuple[int, bool]:
        """Count one incoming frame and return (index, keep)"""
        self._frame_count += 1
        return self._frame_count, self.should_process(self._frame_count)

    def reset(self):
        self._frame_count = 0
