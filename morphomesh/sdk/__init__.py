from .run import ConfigRunResult, analyze_from_config

__all__ = ["ConfigRunResult", "analyze_from_config"]
