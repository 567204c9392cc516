"""Generative asset orchestrator: drives image and video generation jobs."""

__all__ = ["__version__"]

__version__ = "0.1.0"
