"""ONNX Runtime model runner"""

from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
import onnxruntime as ort
import structlog

from wake_listener.core.exceptions import InferenceError, ModelLoadError
from wake_listener.core.ports.i_model_runner import IModelRunner

logger = structlog.get_logger()


def _dim(value) -> int:
    # Symbolic ('batch') and unknown dims come back as str/None
    return value if isinstance(value, int) and value > 0 else -1


class OnnxModelRunner(IModelRunner):
    """Loads an .onnx model once and runs it on the CPU"""

    def __init__(self, model_path: str, input_shape: Optional[Sequence[int]] = None,
                 intra_op_threads: int = 1):
        """
        Args:
            model_path: Path to the .onnx file
            input_shape: Override for the declared input shape
            intra_op_threads: ONNX Runtime intra-op thread count
        """
        self.model_path = Path(model_path)

        if not self.model_path.exists():
            logger.error("model_not_found", path=str(self.model_path))
            raise ModelLoadError(f"Model file not found: {self.model_path}")

        try:
            options = ort.SessionOptions()
            options.intra_op_num_threads = intra_op_threads
            self.session = ort.InferenceSession(
                str(self.model_path),
                sess_options=options,
                providers=['CPUExecutionProvider']
            )
        except Exception as e:
            logger.error("model_load_failed", path=str(self.model_path), error=str(e))
            raise ModelLoadError(f"Failed to load model {self.model_path}: {e}") from e

        model_input = self.session.get_inputs()[0]
        model_output = self.session.get_outputs()[0]
        self.input_name = model_input.name
        self.output_name = model_output.name

        declared = tuple(_dim(d) for d in model_input.shape)
        self._input_shape = tuple(input_shape) if input_shape else declared

        output_dims = [_dim(d) for d in model_output.shape]
        known = [d for d in output_dims if d != -1]
        self._output_size = int(np.prod(known)) if known and len(known) == len(output_dims) else None

        logger.info(
            "onnx_model_loaded",
            path=str(self.model_path),
            input_name=self.input_name,
            input_shape=self._input_shape,
            output_size=self._output_size
        )

    @property
    def input_shape(self) -> Tuple[int, ...]:
        return self._input_shape

    @property
    def output_size(self) -> Optional[int]:
        return self._output_size

    def run(self, tensor: np.ndarray) -> np.ndarray:
        try:
            outputs = self.session.run(
                [self.output_name],
                {self.input_name: tensor.astype(np.float32, copy=False)}
            )
        except Exception as e:
            raise InferenceError(f"ONNX inference failed: {e}") from e
        return np.asarray(outputs[0])
