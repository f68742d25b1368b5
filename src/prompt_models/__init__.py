"""Model configuration management for multi-provider LLM applications."""

__version__ = "0.1.0"
