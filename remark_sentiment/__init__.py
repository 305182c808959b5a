"""
Remark Sentiment Package

Positive / neutral / negative classification of short messages with a
pretrained sequence classifier.
"""
from .context import SentimentContext
from .errors import (
    ClassifyError,
    EmptyInputError,
    InferenceError,
    InvariantViolation,
    LoadError,
    LoadTimeoutError,
    SentimentError,
)
from .inference import ClassificationResult, SentimentClassifier
from .metadata import Metadata, MetadataStore
from .model import ModelGateway
from .preprocessing import encode, pad_sequences, tokenize

__all__ = [
    "ClassificationResult",
    "ClassifyError",
    "EmptyInputError",
    "InferenceError",
    "InvariantViolation",
    "LoadError",
    "LoadTimeoutError",
    "Metadata",
    "MetadataStore",
    "ModelGateway",
    "SentimentClassifier",
    "SentimentContext",
    "SentimentError",
    "encode",
    "pad_sequences",
    "tokenize",
]
