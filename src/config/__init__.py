"""
Configuration module for the detection fan-out service.

Provides centralized configuration using Pydantic Settings with environment variable support.
"""

from src.config.settings import ModelTargetConfig, Settings, get_settings


__all__ = ['ModelTargetConfig', 'Settings', 'get_settings']
