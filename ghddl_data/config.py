#ghddl_data/config.py
"""
Application-wide constants and settings.
Using Pydantic for type validation and clear structure.
"""
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, ValidationError

from ghddl_data.acquisition.target import AcquisitionTarget
from ghddl_data.exceptions import ConfigurationMissing


class AppConstants(BaseModel):
    """Constants that are not meant to be overridden from a config file."""
    DATA_DIR_ENV_VAR: str = "DEVOXXUK_GHDDL_DATA"
    DEFAULT_TIMEOUT: float = 180.0
    DEFAULT_CHUNK_SIZE: int = 8192


# Create a single, importable instance of the constants
SETTINGS = AppConstants()


class TargetSpec(BaseModel):
    """Where a single resource lives remotely and where it goes locally."""
    model_config = ConfigDict(extra="forbid")

    url: str
    archive_name: str
    # Relative to the data directory; empty means the data directory itself.
    subdir: str = ""
    extracted_name: Optional[str] = None
    description: str = ""
    size_hint: str = ""
    enabled: bool = True


DEFAULT_TARGETS: Dict[str, TargetSpec] = {
    "embeddings": TargetSpec(
        url="https://s3.amazonaws.com/dl4j-distribution/GoogleNews-vectors-negative300.bin.gz",
        archive_name="GoogleNews-vectors-negative300.bin.gz",
        description="Google News word2vec embeddings",
        size_hint="1.5GB",
    ),
    "reviews": TargetSpec(
        url="http://ai.stanford.edu/~amaas/data/sentiment/aclImdb_v1.tar.gz",
        archive_name="aclImdb_v1.tar.gz",
        subdir="dl4j_w2vSentiment",
        extracted_name="aclImdb",
        description="IMDB movie review sentiment corpus",
        size_hint="80MB",
    ),
    "cifar": TargetSpec(
        url="https://www.cs.toronto.edu/~kriz/cifar-10-python.tar.gz",
        archive_name="cifar-10-python.tar.gz",
        subdir="cifar",
        extracted_name="cifar-10-batches-py",
        description="CIFAR-10 image classification dataset",
        size_hint="163MB",
    ),
}


def _default_targets() -> Dict[str, TargetSpec]:
    return {name: spec.model_copy() for name, spec in DEFAULT_TARGETS.items()}


class FetchSettings(BaseModel):
    """Everything a single run needs. Built once at startup and passed around."""
    model_config = ConfigDict(extra="forbid")

    data_dir: Path
    timeout: Optional[PositiveFloat] = SETTINGS.DEFAULT_TIMEOUT
    chunk_size: int = Field(default=SETTINGS.DEFAULT_CHUNK_SIZE, gt=0)
    show_progress: bool = True
    run_health_check: bool = True
    targets: Dict[str, TargetSpec] = Field(default_factory=_default_targets)


def _read_yaml(config_path: Path) -> dict:
    if not config_path.is_file():
        raise ConfigurationMissing(f"Configuration file not found at: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationMissing(f"Error parsing YAML file: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationMissing(f"Top level of '{config_path}' must be a mapping.")
    return raw


def _merge_targets(overrides: Optional[Mapping]) -> Dict[str, dict]:
    """Applies per-key target overrides from the config file on top of the defaults."""
    merged = {name: spec.model_dump() for name, spec in DEFAULT_TARGETS.items()}
    if not overrides:
        return merged
    if not isinstance(overrides, Mapping):
        raise ConfigurationMissing("'targets' must be a mapping of target name to settings.")

    for name, override in overrides.items():
        if override is not None and not isinstance(override, Mapping):
            raise ConfigurationMissing(f"Settings for target '{name}' must be a mapping.")
        merged[name] = {**merged.get(name, {}), **(override or {})}
    return merged


def load_settings(config_path: Optional[Path] = None,
                  data_dir: Optional[Path] = None,
                  environ: Optional[Mapping[str, str]] = None) -> FetchSettings:
    """
    Builds the run settings from defaults, an optional YAML file and the environment.

    The data directory is taken from, in order: the `data_dir` argument, the
    `data_dir` key of the YAML file, the DEVOXXUK_GHDDL_DATA environment variable.

    Raises:
        ConfigurationMissing: If no data directory is configured or the
            config file cannot be read or validated.
    """
    environ = os.environ if environ is None else environ
    raw = _read_yaml(Path(config_path)) if config_path else {}

    raw["targets"] = _merge_targets(raw.get("targets"))

    if data_dir:
        raw["data_dir"] = data_dir
    elif not raw.get("data_dir"):
        env_value = environ.get(SETTINGS.DATA_DIR_ENV_VAR)
        if not env_value:
            raise ConfigurationMissing(
                f"Please set the environment variable: {SETTINGS.DATA_DIR_ENV_VAR} "
                "to the directory where you wish to store data files"
            )
        raw["data_dir"] = env_value

    try:
        return FetchSettings(**raw)
    except ValidationError as e:
        raise ConfigurationMissing(f"Invalid configuration: {e}") from e


def build_targets(settings: FetchSettings, only: Optional[List[str]] = None) -> List[AcquisitionTarget]:
    """
    Resolves the enabled target specs against the data directory.

    Args:
        settings: The run settings.
        only: If given, restrict the run to these target names (in this order).
    """
    if only:
        unknown = [name for name in only if name not in settings.targets]
        if unknown:
            raise ConfigurationMissing(f"Unknown target(s) {unknown}. "
                                       f"Available targets are: {list(settings.targets.keys())}")
        selected = [(name, settings.targets[name]) for name in only]
    else:
        selected = [(name, spec) for name, spec in settings.targets.items() if spec.enabled]

    targets = []
    for name, spec in selected:
        base_dir = settings.data_dir / spec.subdir if spec.subdir else settings.data_dir
        targets.append(AcquisitionTarget(
            name=name,
            remote_url=spec.url,
            archive_path=base_dir / spec.archive_name,
            extracted_path=base_dir / spec.extracted_name if spec.extracted_name else None,
            description=spec.description,
            size_hint=spec.size_hint,
        ))
    return targets
