"""Model runner port"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple
import numpy as np


class IModelRunner(ABC):
    """Runs an opaque trained model on one input tensor"""

    @property
    @abstractmethod
    def input_shape(self) -> Tuple[int, ...]:
        """Declared input shape; -1 marks a dynamic dimension"""
        pass

    @property
    def output_size(self) -> Optional[int]:
        """Length of the flattened output vector, None when unknown"""
        return None

    @abstractmethod
    def run(self, tensor: np.ndarray) -> np.ndarray:
        """Run inference and return the raw output"""
        pass
