"""Configuration loading utilities for morphomesh."""

from .schema import (
    AnalysisConfig,
    load_config,
)

__all__ = ["AnalysisConfig", "load_config"]
