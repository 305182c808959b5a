"""
Inference module for sentiment classification.

Provides the classify API: raw text in, label and score out.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from .context import SentimentContext
from .errors import ClassifyError, EmptyInputError, InvariantViolation
from .preprocessing import PAD_VALUE, encode, tokenize

logger = logging.getLogger("remark_sentiment")


SENTIMENT_LABELS = ("negative", "neutral", "positive")
SENTIMENT_THRESHOLDS = {"positive": 0.66, "neutral": 0.33, "negative": 0.0}


@dataclass
class ClassificationResult:
    """Result of a sentiment classification."""
    
    label: str
    score: float
    
    @property
    def percentage(self) -> float:
        return self.score * 100
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "label": self.label,
            "score": round(self.score, 4),
            "percentage": round(self.percentage, 2),
        }


def score_to_label(score: float) -> str:
    """
    Map a model score to a sentiment label.
    
    Args:
        score: Model output, expected in [0, 1]
        
    Returns:
        'positive' above 0.66, 'neutral' above 0.33, else 'negative'
        
    Raises:
        InvariantViolation: If the score is NaN or outside [0, 1]
    """
    if math.isnan(score) or score < 0.0 or score > 1.0:
        raise InvariantViolation(f"Model score {score} is outside [0, 1]")
    
    if score > SENTIMENT_THRESHOLDS["positive"]:
        return "positive"
    elif score > SENTIMENT_THRESHOLDS["neutral"]:
        return "neutral"
    else:
        return "negative"


def validate_classification_input(text: Any) -> str:
    """
    Validate input for classification.
    
    Args:
        text: Input text
        
    Returns:
        The text, unchanged
        
    Raises:
        ClassifyError: If the input is not a string
        EmptyInputError: If the input is empty or whitespace only
    """
    if text is None:
        raise ClassifyError("Input text cannot be None")
    
    if not isinstance(text, str):
        raise ClassifyError(f"Input must be string, got {type(text).__name__}")
    
    if len(text.strip()) == 0:
        raise EmptyInputError("Please enter a message.")
    
    return text


class SentimentClassifier:
    """
    High-level classifier for short messages.
    
    Composes tokenization, encoding and the shared model behind a single
    ``classify`` call. The model and metadata are loaded on first use.
    """
    
    def __init__(
        self,
        context: SentimentContext,
        padding: str = "pre",
        truncating: str = "pre",
        value: int = PAD_VALUE,
    ):
        """
        Initialize the classifier.
        
        Args:
            context: Shared model and metadata
            padding: Padding side passed to the encoder
            truncating: Truncation side passed to the encoder
            value: Padding fill value
        """
        self.context = context
        self.encoding = {"padding": padding, "truncating": truncating, "value": value}
    
    def classify(self, text: str) -> ClassificationResult:
        """
        Classify a single text.
        
        Args:
            text: Input text
            
        Returns:
            ClassificationResult with label and raw score
            
        Raises:
            ClassifyError: If input validation fails
            LoadError: If the model or metadata cannot be loaded
            InferenceError: If the model call fails
            InvariantViolation: If the model score is outside [0, 1]
        """
        validate_classification_input(text)
        
        self.context.ensure_loaded()
        metadata = self.context.metadata
        
        tokens = tokenize(text)
        encoded = encode(tokens, metadata, **self.encoding)
        score = self.context.model_gateway.predict(encoded, metadata.max_len)
        label = score_to_label(score)
        
        logger.debug(f"Classified {len(tokens)} tokens as {label} ({score:.4f})")
        return ClassificationResult(label=label, score=score)
    
    def classify_batch(self, texts: list[str]) -> list[ClassificationResult]:
        """
        Classify multiple texts, one model call per text.
        
        All texts are validated before any is classified.
        
        Args:
            texts: List of input texts
            
        Returns:
            List of ClassificationResults
        """
        for i, text in enumerate(texts):
            try:
                validate_classification_input(text)
            except ClassifyError as exc:
                raise type(exc)(f"Invalid input at index {i}: {exc}") from exc
        
        return [self.classify(text) for text in texts]
    
    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> "SentimentClassifier":
        """
        Build a classifier and its context from a configuration dictionary.
        
        Args:
            config: Configuration as read by ``utils.load_config``
            
        Returns:
            SentimentClassifier with an unloaded context
        """
        context = SentimentContext.from_config(config)
        encoding = (config or {}).get("encoding", {})
        return cls(context, **encoding)
