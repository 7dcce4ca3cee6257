# wake_listener/core/pipeline/sliding_window.py

"""Fixed-length overlapping analysis windows over a sample stream."""

from typing import List, Optional

import numpy as np
import structlog

logger = structlog.get_logger()


class SlidingWindowBuffer:
    """
    Skládá normalizované vzorky do překrývajících se oken pevné délky.

    Po každém dokončeném okně se posledních ``window_size - step_size``
    vzorků přesune na začátek bufferu, takže další okno je hotové po
    ``step_size`` nových vzorcích.

    Prázdný buffer je standardně "předplněný" tichem: kurzor stojí na
    ``window_size - step_size``, takže první okno je hotové po ``step_size``
    vzorcích, stejně jako každé další. S ``primed=False`` začíná kurzor
    na nule a první okno potřebuje celých ``window_size`` vzorků.

    Single producer only: not safe to push from more than one thread.
    """

    def __init__(self, window_size: int, step_size: int, primed: bool = True):
        """
        Args:
            window_size: Délka okna ve vzorcích
            step_size: Počet nových vzorků mezi dvěma okny (0 < step <= window)
            primed: Začínat s tichým překryvem místo prázdného bufferu
        """
        if window_size <= 0:
            raise ValueError(f"window_size must be > 0, got {window_size}")
        if not 0 < step_size <= window_size:
            raise ValueError(
                f"step_size must satisfy 0 < step_size <= window_size, got {step_size}"
            )

        self.window_size = window_size
        self.step_size = step_size
        self.retained = window_size - step_size
        self.primed = primed

        self._buffer = np.zeros(window_size, dtype=np.float32)
        self._cursor = self._empty_cursor
        self.window_count = 0

        logger.debug(
            "sliding_window_initialized",
            window_size=window_size,
            step_size=step_size,
            overlap=self.retained,
            primed=primed
        )

    def push(self, sample: float) -> Optional[np.ndarray]:
        """
        Přidej jeden vzorek.

        Returns:
            Kopie dokončeného okna, jinak None
        """
        self._buffer[self._cursor] = sample
        self._cursor += 1

        if self._cursor < self.window_size:
            return None

        return self._complete_window()

    def extend(self, samples) -> List[np.ndarray]:
        """
        Přidej blok vzorků najednou.

        Same result as calling push() for every sample in order, without the
        per-sample Python overhead.
        """
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        windows = []
        offset = 0

        while offset < len(samples):
            take = min(self.window_size - self._cursor, len(samples) - offset)
            self._buffer[self._cursor:self._cursor + take] = samples[offset:offset + take]
            self._cursor += take
            offset += take

            if self._cursor == self.window_size:
                windows.append(self._complete_window())

        return windows

    def _complete_window(self) -> np.ndarray:
        window = self._buffer.copy()
        self.window_count += 1

        # step == window: nothing retained, next window starts from scratch
        if self.retained:
            self._buffer[:self.retained] = self._buffer[self.step_size:]
        self._cursor = self.retained

        return window

    @property
    def _empty_cursor(self) -> int:
        return self.retained if self.primed else 0

    def reset(self) -> None:
        """Zahoď rozpracované okno i překryv z minulého okna."""
        self._buffer.fill(0.0)
        self._cursor = self._empty_cursor
        logger.debug("sliding_window_reset")

    @property
    def samples_until_next_window(self) -> int:
        return self.window_size - self._cursor

    def __len__(self) -> int:
        return self._cursor
