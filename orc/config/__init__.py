"""Configuration loading.

Usage:
    from orc.config import load_orc_config
    settings = load_orc_config()
"""

from orc.config.loader import load_orc_config, load_registry_file
from orc.config.schema import OrcConfig, RegistryFile, TmuxSettings

__all__ = ["OrcConfig", "RegistryFile", "TmuxSettings", "load_orc_config", "load_registry_file"]
