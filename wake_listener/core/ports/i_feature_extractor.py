"""Feature extractor port"""

from abc import ABC, abstractmethod
from typing import Tuple
import numpy as np


class IFeatureExtractor(ABC):
    """Turns an analysis window into the tensor a classifier expects"""

    @property
    @abstractmethod
    def output_shape(self) -> Tuple[int, ...]:
        """Shape of every tensor returned by extract()"""
        pass

    @abstractmethod
    def extract(self, window: np.ndarray) -> np.ndarray:
        """
        Extract features from one window

        Args:
            window: Normalized float samples, length window_size

        Returns:
            Feature tensor shaped output_shape
        """
        pass
