"""
Pytest configuration and fixtures for remark_sentiment tests.
"""

import json
import sys
import threading
from pathlib import Path

import pytest
import torch
import torch.nn as nn

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from remark_sentiment.context import SentimentContext
from remark_sentiment.metadata import Metadata, MetadataStore
from remark_sentiment.model import ModelGateway


class ConstantModel:
    """Stand-in model returning a fixed score and recording its inputs."""
    
    def __init__(self, score: float):
        self.score = score
        self.inputs: list[torch.Tensor] = []
    
    def __call__(self, input_ids: torch.Tensor) -> torch.Tensor:
        self.inputs.append(input_ids.clone())
        # float64 so boundary scores survive .item() exactly
        return torch.tensor([[self.score]], dtype=torch.float64)


class TinySentimentModel(nn.Module):
    """Embedding-sum model with a sigmoid head, small enough to script."""
    
    def __init__(self, vocab_size: int):
        super().__init__()
        self.embedding = nn.Embedding(vocab_size + 1, 1, padding_idx=0)
    
    def forward(self, input_ids: torch.Tensor) -> torch.Tensor:
        return torch.sigmoid(self.embedding(input_ids).sum(dim=1))


class CountingLoader:
    """Loader callable counting invocations, optionally blocking on a gate."""
    
    def __init__(self, value, gate: threading.Event | None = None, error: Exception | None = None):
        self.value = value
        self.gate = gate
        self.error = error
        self.calls = 0
        self._lock = threading.Lock()
    
    def __call__(self):
        with self._lock:
            self.calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=10)
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def metadata_dict() -> dict:
    """Raw metadata object as stored in the JSON artifact."""
    return {
        "word_index": {
            "i": 1,
            "love": 2,
            "it": 3,
            "truly": 4,
            "great": 5,
            "terrible": 6,
            "rare": 500,
        },
        "index_from": 3,
        "vocabulary_size": 100,
        "max_len": 8,
    }


@pytest.fixture
def metadata(metadata_dict) -> Metadata:
    return Metadata.from_dict(metadata_dict)


@pytest.fixture
def metadata_file(tmp_path, metadata_dict) -> Path:
    path = tmp_path / "metadata.json"
    path.write_text(json.dumps(metadata_dict), encoding="utf-8")
    return path


@pytest.fixture
def scripted_model_path(tmp_path, metadata_dict) -> Path:
    """TorchScript model file compatible with metadata_dict."""
    torch.manual_seed(0)
    model = TinySentimentModel(metadata_dict["vocabulary_size"])
    model.eval()
    path = tmp_path / "model.pt"
    torch.jit.script(model).save(str(path))
    return path


@pytest.fixture
def make_context(metadata_dict):
    """Factory for contexts backed by a constant-score model."""
    
    def _make(score: float = 0.9, model_loader=None, metadata_reader=None) -> SentimentContext:
        metadata_reader = metadata_reader or CountingLoader(metadata_dict)
        model_loader = model_loader or CountingLoader(ConstantModel(score))
        return SentimentContext(
            metadata_store=MetadataStore(reader=metadata_reader),
            model_gateway=ModelGateway(loader=model_loader),
        )
    
    return _make
