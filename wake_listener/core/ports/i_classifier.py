"""Classifier port"""

from abc import ABC, abstractmethod
from typing import Tuple
import numpy as np

from wake_listener.core.models import ClassificationResult, LabelSet


class IClassifier(ABC):
    """Abstract wake phrase classifier"""

    @property
    @abstractmethod
    def labels(self) -> LabelSet:
        pass

    @property
    @abstractmethod
    def input_shape(self) -> Tuple[int, ...]:
        pass

    @abstractmethod
    def classify(self, tensor: np.ndarray) -> ClassificationResult:
        """
        Classify one feature tensor

        Raises:
            InvalidInputError: If the tensor shape does not match the model
            InferenceError: If the model output is unusable
        """
        pass
