"""
Vocabulary metadata for the pretrained classifier.

The metadata artifact is a JSON object with the fields ``word_index``,
``index_from``, ``vocabulary_size`` and ``max_len``. It is loaded once
per store and never modified afterwards.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .artifacts import DEFAULT_CACHE_DIR, DEFAULT_TIMEOUT, read_json_artifact
from .errors import LoadError
from .loading import LoadOnce, LoadState

logger = logging.getLogger("remark_sentiment")


REQUIRED_FIELDS = ("word_index", "index_from", "vocabulary_size", "max_len")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Metadata:
    """Immutable vocabulary description shared by all requests."""
    
    word_index: Mapping[str, int]
    index_from: int
    vocabulary_size: int
    max_len: int
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Metadata":
        """
        Build metadata from the decoded JSON artifact.
        
        Unrecognised keys are ignored.
        
        Args:
            data: Decoded metadata object
            
        Returns:
            Metadata instance with a read-only word index
            
        Raises:
            LoadError: If a required field is missing or has the wrong type
        """
        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise LoadError(f"Metadata is missing required fields: {', '.join(missing)}")
        
        word_index = data["word_index"]
        if not isinstance(word_index, dict):
            raise LoadError(
                f"word_index must be an object, got {type(word_index).__name__}"
            )
        bad_entries = [
            word for word, idx in word_index.items()
            if not isinstance(word, str) or not _is_int(idx)
        ]
        if bad_entries:
            raise LoadError(
                f"word_index has {len(bad_entries)} non-integer entries, "
                f"e.g. {bad_entries[0]!r}"
            )
        
        for name in ("index_from", "vocabulary_size", "max_len"):
            if not _is_int(data[name]):
                raise LoadError(f"{name} must be an integer, got {data[name]!r}")
        
        if data["max_len"] <= 0:
            raise LoadError(f"max_len must be positive, got {data['max_len']}")
        
        return cls(
            word_index=MappingProxyType(dict(word_index)),
            index_from=data["index_from"],
            vocabulary_size=data["vocabulary_size"],
            max_len=data["max_len"],
        )
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "word_index": dict(self.word_index),
            "index_from": self.index_from,
            "vocabulary_size": self.vocabulary_size,
            "max_len": self.max_len,
        }
    
    def summary(self) -> str:
        """Short human-readable description for logging."""
        return (
            f"{len(self.word_index)} words, index_from={self.index_from}, "
            f"vocabulary_size={self.vocabulary_size}, max_len={self.max_len}"
        )


class MetadataStore:
    """
    Lazily loaded, process-wide metadata.
    
    Concurrent first calls to ``load`` share a single fetch; once loaded
    the cached instance is returned without any I/O.
    """
    
    def __init__(
        self,
        source: str | Path | None = None,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        timeout: float = DEFAULT_TIMEOUT,
        reader: Callable[[], dict[str, Any]] | None = None,
        wait_timeout: float | None = None,
    ):
        """
        Args:
            source: URL or local path of the metadata JSON
            cache_dir: Download cache for remote sources
            timeout: HTTP timeout in seconds
            reader: Callable returning the decoded JSON, used instead of source
            wait_timeout: Seconds to wait for a load started by another caller
        """
        if source is None and reader is None:
            raise ValueError("Either source or reader must be given")
        
        self.source = source
        self.cache_dir = cache_dir
        self.timeout = timeout
        self.wait_timeout = wait_timeout
        self._reader = reader or self._read_source
        self._once: LoadOnce[Metadata] = LoadOnce(self._fetch, name="metadata")
    
    @property
    def state(self) -> LoadState:
        return self._once.state
    
    @property
    def is_loaded(self) -> bool:
        return self._once.is_ready
    
    def _read_source(self) -> dict[str, Any]:
        return read_json_artifact(self.source, self.cache_dir, self.timeout)
    
    def _fetch(self) -> Metadata:
        metadata = Metadata.from_dict(self._reader())
        logger.info(f"Metadata loaded from {self.source or 'reader'}: {metadata.summary()}")
        return metadata
    
    def load(self) -> Metadata:
        """
        Get the metadata, fetching it on first use.
        
        Raises:
            LoadError: If the artifact cannot be fetched or parsed
        """
        metadata, _ = self._once.get(timeout=self.wait_timeout)
        return metadata
