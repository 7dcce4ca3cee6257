"""Raw waveform features"""

from typing import Optional, Sequence, Tuple

import numpy as np
import structlog

from wake_listener.core.exceptions import ConfigurationError, InvalidInputError
from wake_listener.core.ports.i_feature_extractor import IFeatureExtractor

logger = structlog.get_logger()


def resolve_shape(shape: Sequence[Optional[int]], size: int) -> Tuple[int, ...]:
    """
    Turn a model input shape with dynamic dims (-1/None) into a concrete one
    holding exactly `size` elements.

    A single dynamic dim absorbs whatever is left; with more than one, the
    extra dynamic dims become 1 (batch/channel).
    """
    dims = [-1 if d is None or d < 0 else int(d) for d in shape]
    dynamic = [i for i, d in enumerate(dims) if d == -1]
    fixed = int(np.prod([d for d in dims if d != -1]))

    if dynamic:
        for i in dynamic[:-1]:
            dims[i] = 1
        if size % fixed:
            raise ConfigurationError(f"cannot fit {size} elements into shape {list(shape)}")
        dims[dynamic[-1]] = size // fixed

    if int(np.prod(dims)) != size:
        raise ConfigurationError(
            f"model input shape {list(shape)} holds {int(np.prod(dims))} elements, window has {size}"
        )
    return tuple(dims)


class DirectFeatures(IFeatureExtractor):
    """Passes the normalized waveform through, reshaped to the model input"""

    def __init__(self, window_size: int, input_shape: Optional[Sequence[int]] = None):
        """
        Args:
            window_size: Samples per analysis window
            input_shape: Declared model input shape (default: [1, window_size])
        """
        self.window_size = window_size
        self._output_shape = resolve_shape(input_shape or (-1, window_size), window_size)

        logger.debug("direct_features_initialized", output_shape=self._output_shape)

    @property
    def output_shape(self) -> Tuple[int, ...]:
        return self._output_shape

    def extract(self, window: np.ndarray) -> np.ndarray:
        window = np.asarray(window, dtype=np.float32)
        if window.ndim != 1 or window.shape[0] != self.window_size:
            raise InvalidInputError(
                f"expected a window of {self.window_size} samples, got shape {window.shape}"
            )
        return window.reshape(self._output_shape)
