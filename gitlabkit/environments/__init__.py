"""Deployment environments for gitlabkit."""

from .production import ProductionEnvironment

__all__ = ["ProductionEnvironment"]
