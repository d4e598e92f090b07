"""Storage configuration: root mounts, reserved suffixes and log settings."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

from .errors import ConfigError
from .locator import ENCRYPTION_SUFFIX, PATH_SEPARATOR, TMP_SUFFIX

CONFIG_ENV_VAR = "SAFE_STORE_CONFIG"
SDCARD_ENV_VAR = "SAFE_STORE_SDCARD"
DEVICE_MEMORY_ENV_VAR = "SAFE_STORE_DEVICE_MEMORY"

DEFAULT_CHUNK_SIZE = 1024
DEFAULT_PROBE_NAME = ".encryption_probe"
DEFAULT_MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB


@dataclass(frozen=True)
class StoreConfig:
    """Configuration for one emulated device filesystem.

    ``roots`` maps each locator root (``SDCard``, ``store``) to the host
    directory that backs it. Files created under ``encrypted_roots`` get
    the encryption suffix appended to their stored names.
    """

    roots: Mapping[str, str] = field(default_factory=dict)
    encrypted_roots: tuple[str, ...] = ()
    chunk_size: int = DEFAULT_CHUNK_SIZE
    tmp_suffix: str = TMP_SUFFIX
    encryption_suffix: str = ENCRYPTION_SUFFIX
    probe_name: str = DEFAULT_PROBE_NAME
    log_file: str | None = None
    max_log_bytes: int = DEFAULT_MAX_LOG_BYTES

    def __post_init__(self) -> None:
        """Validate configuration."""
        errors = []

        for name in self.roots:
            if not name or PATH_SEPARATOR in name:
                errors.append(f"root name must be a single path segment, got {name!r}")
        for name in self.encrypted_roots:
            if name not in self.roots:
                errors.append(f"encrypted root {name!r} is not a configured root")
        if self.chunk_size < 1:
            errors.append(f"chunk_size must be >= 1, got {self.chunk_size}")
        for label, suffix in (("tmp_suffix", self.tmp_suffix),
                              ("encryption_suffix", self.encryption_suffix)):
            if not suffix.startswith(".") or len(suffix) < 2 or PATH_SEPARATOR in suffix:
                errors.append(f"{label} must look like '.ext', got {suffix!r}")
        if self.tmp_suffix == self.encryption_suffix:
            errors.append(
                f"tmp_suffix and encryption_suffix must differ, both are {self.tmp_suffix!r}"
            )
        if not self.probe_name or PATH_SEPARATOR in self.probe_name:
            errors.append(f"probe_name must be a plain file name, got {self.probe_name!r}")
        if self.max_log_bytes < 1024:
            errors.append(f"max_log_bytes must be >= 1024, got {self.max_log_bytes}")

        if errors:
            raise ValueError(f"Invalid StoreConfig: {'; '.join(errors)}")

    def is_encrypted(self, root: str) -> bool:
        return root in self.encrypted_roots


def _from_mapping(data: dict, source: str) -> StoreConfig:
    roots = data.get("roots") or {}
    if not isinstance(roots, dict):
        raise ConfigError(f"'roots' in {source} must be a mapping of root name to directory")

    kwargs: dict[str, object] = {
        "roots": {str(k): str(v) for k, v in roots.items()},
        "encrypted_roots": tuple(data.get("encrypted_roots") or ()),
    }
    for key in ("chunk_size", "tmp_suffix", "encryption_suffix", "probe_name",
                "log_file", "max_log_bytes"):
        if key in data:
            kwargs[key] = data[key]

    unknown = set(data) - set(kwargs) - {"roots"}
    if unknown:
        raise ConfigError(f"Unknown keys in {source}: {sorted(unknown)}")

    try:
        return StoreConfig(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: {exc}") from exc


def load_config(path: Path | str) -> StoreConfig:
    """Load a StoreConfig from a YAML file.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or holds
            values StoreConfig rejects.
    """
    path = Path(path)
    source = str(path)

    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Cannot read config {source}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {source}, got {type(data).__name__}")

    return _from_mapping(data, source)


def config_from_env(environ: Mapping[str, str] | None = None) -> StoreConfig:
    """Build a StoreConfig from environment variables.

    ``SAFE_STORE_CONFIG`` names a YAML file and wins when set. Otherwise
    ``SAFE_STORE_SDCARD`` and ``SAFE_STORE_DEVICE_MEMORY`` name the host
    directories for the two well-known roots.
    """
    env = os.environ if environ is None else environ

    config_path = env.get(CONFIG_ENV_VAR)
    if config_path:
        return load_config(config_path)

    roots = {}
    if env.get(SDCARD_ENV_VAR):
        roots["SDCard"] = env[SDCARD_ENV_VAR]
    if env.get(DEVICE_MEMORY_ENV_VAR):
        roots["store"] = env[DEVICE_MEMORY_ENV_VAR]
    return StoreConfig(roots=roots)
