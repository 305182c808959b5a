"""
Gateway to the pretrained sentiment model.

The model is a TorchScript module taking a ``[1, max_len]`` int64 tensor
of vocabulary indices and returning the positive-sentiment probability.
It is loaded lazily, once, and shared by every request.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Sequence

import numpy as np
import torch

from .artifacts import DEFAULT_CACHE_DIR, DEFAULT_TIMEOUT, resolve_artifact
from .errors import InferenceError, LoadError
from .loading import LoadOnce, LoadState

logger = logging.getLogger("remark_sentiment")


class ModelGateway:
    """
    Lazily loaded model exposing a single scalar ``predict``.
    
    Loading happens on the first ``ensure_loaded`` call; concurrent first
    callers share one load. A failed load is retried on the next call.
    """
    
    def __init__(
        self,
        source: str | Path | None = None,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        timeout: float = DEFAULT_TIMEOUT,
        device: torch.device | None = None,
        loader: Callable[[], Any] | None = None,
        wait_timeout: float | None = None,
    ):
        """
        Initialize the gateway without loading anything.
        
        Args:
            source: URL or local path of the TorchScript model file
            cache_dir: Download cache for remote sources
            timeout: HTTP timeout in seconds
            device: Device to run inference on
            loader: Callable returning a ready model, used instead of source
            wait_timeout: Seconds to wait for a load started by another caller
        """
        if source is None and loader is None:
            raise ValueError("Either source or loader must be given")
        
        self.source = source
        self.cache_dir = cache_dir
        self.timeout = timeout
        self.wait_timeout = wait_timeout
        self.device = device or torch.device("cpu")
        self._loader = loader or self._load_torchscript
        self._once = LoadOnce(self._loader, name="model")
    
    @property
    def state(self) -> LoadState:
        return self._once.state
    
    @property
    def is_loaded(self) -> bool:
        return self._once.is_ready
    
    def _load_torchscript(self) -> torch.jit.ScriptModule:
        path = resolve_artifact(self.source, self.cache_dir, self.timeout)
        
        try:
            model = torch.jit.load(str(path), map_location=self.device)
        except (RuntimeError, ValueError) as exc:
            raise LoadError(f"Could not load TorchScript model from {path}: {exc}") from exc
        
        model.eval()
        return model
    
    def ensure_loaded(self) -> bool:
        """
        Load the model if that has not happened yet.
        
        Returns:
            True if this call performed the load, False otherwise
            
        Raises:
            LoadError: If the model cannot be fetched or deserialized
        """
        _, loaded = self._once.get(timeout=self.wait_timeout)
        if loaded:
            logger.info(f"Model loaded from {self.source or 'loader'} on {self.device}")
        return loaded
    
    def predict(self, encoded: Sequence[int] | np.ndarray, max_len: int) -> float:
        """
        Score one encoded input.
        
        Args:
            encoded: Index vector of length ``max_len``
            max_len: Sequence length the model expects
            
        Returns:
            Positive-sentiment score
            
        Raises:
            InferenceError: If the model is not loaded, the input has the
                wrong shape, or the model call fails
        """
        model = self._once.value
        if model is None:
            raise InferenceError("Model is not loaded; call ensure_loaded() first")
        
        encoded = np.asarray(encoded)
        if encoded.ndim != 1 or encoded.shape[0] != max_len:
            raise InferenceError(
                f"Expected an input of length {max_len}, got shape {tuple(encoded.shape)}"
            )
        
        input_ids = None
        output = None
        try:
            input_ids = torch.tensor(encoded, dtype=torch.long, device=self.device).unsqueeze(0)
            with torch.no_grad():
                output = model(input_ids)
            return float(output.reshape(-1)[0].item())
        except RuntimeError as exc:
            raise InferenceError(f"Model call failed: {exc}") from exc
        finally:
            # scratch tensors must not outlive the call
            del input_ids, output
