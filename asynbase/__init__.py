"""YAML configuration loading with typed values and hot reload, plus shared logging types."""

__version__ = "1.0.0"