"""
Process-wide holder of the loaded model and metadata.

A ``SentimentContext`` owns one ``MetadataStore`` and one ``ModelGateway``
and is shared by every classifier that serves requests in the process.
"""

import logging
from typing import Any

from .errors import InferenceError
from .loading import LoadState
from .metadata import Metadata, MetadataStore
from .model import ModelGateway
from .utils import get_device, merge_config

logger = logging.getLogger("remark_sentiment")


METADATA_URL = "https://storage.googleapis.com/tfjs-models/tfjs/sentiment_cnn_v1/metadata.json"

DEFAULT_CONFIG: dict[str, Any] = {
    "artifacts": {
        "model": "models/sentiment_cnn_v1.pt",
        "metadata": METADATA_URL,
        "cache_dir": None,
        "timeout": 30.0,
    },
    "loading": {
        "timeout": None,
    },
    "encoding": {
        "padding": "pre",
        "truncating": "pre",
        "value": 0,
    },
    "device": {
        "use_cuda": False,
        "cuda_device": 0,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class SentimentContext:
    """
    Shared model and metadata with a load-once lifecycle.
    
    Both artifacts start ``uninitialized`` and are loaded on the first
    ``ensure_loaded`` call; after that they are read-only.
    """
    
    def __init__(self, metadata_store: MetadataStore, model_gateway: ModelGateway):
        self.metadata_store = metadata_store
        self.model_gateway = model_gateway
    
    @property
    def state(self) -> LoadState:
        """Combined state: ready only when both artifacts are ready."""
        states = {self.metadata_store.state, self.model_gateway.state}
        for state in (LoadState.FAILED, LoadState.LOADING, LoadState.UNINITIALIZED):
            if state in states:
                return state
        return LoadState.READY
    
    @property
    def is_ready(self) -> bool:
        return self.state is LoadState.READY
    
    @property
    def metadata(self) -> Metadata:
        if not self.metadata_store.is_loaded:
            raise InferenceError("Metadata is not loaded; call ensure_loaded() first")
        return self.metadata_store.load()
    
    def ensure_loaded(self) -> bool:
        """
        Load metadata and model if needed.
        
        Returns:
            True if this call loaded the model
            
        Raises:
            LoadError: If either artifact fails to load
        """
        metadata = self.metadata_store.load()
        loaded = self.model_gateway.ensure_loaded()
        if loaded:
            logger.info(f"Model loaded! {metadata.summary()}")
        return loaded
    
    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "SentimentContext":
        """
        Create a context from a configuration dictionary.
        
        Missing keys fall back to ``DEFAULT_CONFIG``. Nothing is loaded.
        
        Args:
            config: Configuration as read by ``utils.load_config``
            
        Returns:
            Unloaded SentimentContext
        """
        config = merge_config(DEFAULT_CONFIG, config)
        artifacts = config["artifacts"]
        
        common = {
            "timeout": artifacts["timeout"],
            "wait_timeout": config["loading"]["timeout"],
        }
        if artifacts["cache_dir"]:
            common["cache_dir"] = artifacts["cache_dir"]
        
        device = get_device(
            use_cuda=config["device"]["use_cuda"],
            cuda_device=config["device"]["cuda_device"],
        )
        
        return cls(
            metadata_store=MetadataStore(artifacts["metadata"], **common),
            model_gateway=ModelGateway(artifacts["model"], device=device, **common),
        )
