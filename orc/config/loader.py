import os
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from dotenv import load_dotenv
from instrukt_ai_logging import get_logger
from pydantic import BaseModel

from orc.config.schema import OrcConfig, RegistryFile
from orc.constants import ENV_CONFIG_PATH, ENV_ENV_PATH
from orc.utils import expand_env_vars

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_CONFIG_PATH = Path("~/.orc/orc.yml")


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if hasattr(model, "model_extra") and model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)
        elif isinstance(field_value, list):
            for index, value in enumerate(field_value):
                if isinstance(value, BaseModel):
                    _warn_unknown_keys(value, f"{path}.{field_name}[{index}]", config_path)


def load_yaml_model(path: Path, model_class: Type[T]) -> T:
    """Load and validate a YAML file into a pydantic model.

    A missing file yields the model defaults. Read or parse errors propagate.
    """
    if not path.exists():
        return model_class()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    expanded = expand_env_vars(raw)
    model = model_class.model_validate(expanded)
    _warn_unknown_keys(model, "root", path)
    return model


def resolve_config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return path.expanduser()
    env_path = os.getenv(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_env_file() -> None:
    """Load an optional .env file named by ORC_ENV_PATH."""
    env_path = os.getenv(ENV_ENV_PATH)
    if env_path:
        load_dotenv(Path(env_path).expanduser())


def load_orc_config(path: Optional[Path] = None) -> OrcConfig:
    """Load orc.yml (defaults when absent)."""
    load_env_file()
    config_path = resolve_config_path(path)
    config = load_yaml_model(config_path, OrcConfig)
    logger.debug("Loaded orc config from %s", config_path)
    return config


def load_registry_file(path: Path) -> RegistryFile:
    """Load the workshop registry YAML."""
    return load_yaml_model(path.expanduser(), RegistryFile)
