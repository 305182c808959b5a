"""
Tests for utilities and context construction.
"""

import logging

import pytest
import torch

from remark_sentiment.context import DEFAULT_CONFIG, SentimentContext
from remark_sentiment.errors import InferenceError, LoadError
from remark_sentiment.loading import LoadState
from remark_sentiment.utils import get_device, load_config, merge_config, setup_logging

from conftest import ConstantModel, CountingLoader


class TestLoadConfig:
    """Tests for YAML configuration loading."""
    
    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("encoding:\n  padding: post\n", encoding="utf-8")
        assert load_config(path) == {"encoding": {"padding": "post"}}
    
    def test_empty_file_is_empty_dict(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}
    
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


class TestMergeConfig:
    """Tests for merge_config."""
    
    def test_nested_override(self):
        merged = merge_config({"a": {"x": 1, "y": 2}, "b": 3}, {"a": {"y": 5}})
        assert merged == {"a": {"x": 1, "y": 5}, "b": 3}
    
    def test_none_overrides(self):
        assert merge_config({"a": 1}, None) == {"a": 1}
    
    def test_defaults_not_mutated(self):
        merge_config(DEFAULT_CONFIG, {"encoding": {"padding": "post"}})
        assert DEFAULT_CONFIG["encoding"]["padding"] == "pre"


class TestSetupLogging:
    """Tests for logging setup."""
    
    def test_sets_level_and_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging("DEBUG", str(log_file))
        
        assert logger.name == "remark_sentiment"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert log_file.parent.exists()
        
        logger.handlers.clear()


class TestGetDevice:
    def test_cpu_when_cuda_disabled(self):
        assert get_device(use_cuda=False) == torch.device("cpu")


class TestSentimentContext:
    """Tests for SentimentContext lifecycle."""
    
    def test_metadata_before_load_raises(self, make_context):
        with pytest.raises(InferenceError):
            make_context().metadata
    
    def test_ensure_loaded_reports_first_load(self, make_context):
        context = make_context()
        assert context.ensure_loaded() is True
        assert context.ensure_loaded() is False
        assert context.state is LoadState.READY
    
    def test_metadata_failure_skips_model(self, make_context, metadata_dict):
        model_loader = CountingLoader(ConstantModel(0.5))
        context = make_context(
            model_loader=model_loader,
            metadata_reader=CountingLoader(metadata_dict, error=LoadError("bad json")),
        )
        
        with pytest.raises(LoadError):
            context.ensure_loaded()
        
        assert model_loader.calls == 0
        assert context.state is LoadState.FAILED
    
    def test_from_config_uses_sources(self, tmp_path):
        context = SentimentContext.from_config({
            "artifacts": {"model": "m.pt", "metadata": "meta.json", "cache_dir": str(tmp_path)},
            "loading": {"timeout": 3.0},
        })
        
        assert context.model_gateway.source == "m.pt"
        assert context.metadata_store.source == "meta.json"
        assert context.model_gateway.cache_dir == str(tmp_path)
        assert context.model_gateway.wait_timeout == 3.0
        assert context.state is LoadState.UNINITIALIZED
