"""
Text preprocessing for the pretrained sentiment classifier.

Turns raw text into the fixed-length index vector the model was trained
on: tokenization, vocabulary lookup, then padding and truncation.
"""

import logging
import re
from typing import Sequence

import numpy as np

from .metadata import Metadata

logger = logging.getLogger("remark_sentiment")


OOV_INDEX = 2
PAD_VALUE = 0
PADDING_MODES = ("pre", "post")

_STRIPPED_CHARS = re.compile(r"[.,!]")


def tokenize(text: str) -> list[str]:
    """
    Split text into tokens matching the pretrained vocabulary.
    
    Trims, lower-cases, deletes '.', ',' and '!' and splits on single
    spaces. Runs of spaces produce empty tokens and an empty string
    produces ``[""]``.
    
    Args:
        text: Raw text string
        
    Returns:
        List of tokens
    """
    cleaned = _STRIPPED_CHARS.sub("", text.strip().lower())
    return cleaned.split(" ")


def tokens_to_indices(tokens: Sequence[str], metadata: Metadata) -> list[int]:
    """
    Map tokens to model vocabulary indices.
    
    Known tokens become ``word_index[token] + index_from``; unknown tokens
    and indices above ``vocabulary_size`` become ``OOV_INDEX``.
    
    Args:
        tokens: Token sequence
        metadata: Vocabulary metadata
        
    Returns:
        List of indices, one per token
    """
    indices = []
    for token in tokens:
        base = metadata.word_index.get(token)
        if base is None:
            indices.append(OOV_INDEX)
            continue
        index = base + metadata.index_from
        if index > metadata.vocabulary_size:
            index = OOV_INDEX
        indices.append(index)
    return indices


def _check_mode(name: str, mode: str) -> None:
    if mode not in PADDING_MODES:
        raise ValueError(f"{name} must be one of {PADDING_MODES}, got {mode!r}")


def pad_sequences(
    sequences: Sequence[Sequence[int]],
    max_len: int,
    padding: str = "pre",
    truncating: str = "pre",
    value: int = PAD_VALUE,
) -> np.ndarray:
    """
    Pad or truncate sequences to the same length.
    
    Args:
        sequences: List of token index sequences
        max_len: Target length
        padding: 'pre' to pad on the left, 'post' to pad on the right
        truncating: 'pre' to drop the earliest entries, 'post' to drop the last
        value: Fill value for padding
        
    Returns:
        Numpy array of shape (len(sequences), max_len)
    """
    _check_mode("padding", padding)
    _check_mode("truncating", truncating)
    if max_len <= 0:
        raise ValueError(f"max_len must be positive, got {max_len}")
    
    padded = np.full((len(sequences), max_len), value, dtype=np.int64)
    
    for i, seq in enumerate(sequences):
        seq = list(seq)
        if not seq:
            continue
        
        if len(seq) > max_len:
            seq = seq[-max_len:] if truncating == "pre" else seq[:max_len]
        
        if padding == "pre":
            padded[i, max_len - len(seq):] = seq
        else:
            padded[i, :len(seq)] = seq
    
    return padded


def encode(
    tokens: Sequence[str],
    metadata: Metadata,
    padding: str = "pre",
    truncating: str = "pre",
    value: int = PAD_VALUE,
) -> np.ndarray:
    """
    Encode tokens into the model input vector.
    
    Args:
        tokens: Token sequence from ``tokenize``
        metadata: Vocabulary metadata
        padding: Padding side, 'pre' or 'post'
        truncating: Truncation side, 'pre' or 'post'
        value: Fill value for padding
        
    Returns:
        int64 array of length ``metadata.max_len``
    """
    indices = tokens_to_indices(tokens, metadata)
    return pad_sequences(
        [indices],
        metadata.max_len,
        padding=padding,
        truncating=truncating,
        value=value,
    )[0]
