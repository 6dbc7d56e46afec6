"""Configuration models, loader and target resolution."""

from .models import AppConfig, DomainConfig, EnvSettings
from .targets import build_targets

__all__ = ["AppConfig", "DomainConfig", "EnvSettings", "build_targets"]
