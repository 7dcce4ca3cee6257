"""Sample source port (interface)"""

from abc import ABC, abstractmethod
import numpy as np


class ISampleSource(ABC):
    """Abstract live sample source (mono, signed 16-bit)"""

    @abstractmethod
    def open(self, sample_rate: int, channels: int = 1, bit_depth: int = 16) -> None:
        """
        Acquire the capture resource

        Raises:
            CaptureInitError: If the resource cannot be acquired
        """
        pass

    @abstractmethod
    def read(self, frames: int) -> np.ndarray:
        """
        Read up to `frames` samples

        Returns:
            int16 array; an empty array means the stream has ended
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the capture resource (safe to call twice)"""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass
