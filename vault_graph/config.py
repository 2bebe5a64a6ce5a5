"""Configuration loading and vault registry."""

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from vault_graph.constants import CONFIG_PATH
from vault_graph.data_models import VaultMetadata, VaultConfiguration

logger = logging.getLogger(__name__)


def _parse_exclude(name: str, raw_exclude: object) -> tuple[str, ...]:
    """Normalize the optional per-vault ``exclude`` list of folder names or paths."""
    if raw_exclude is None:
        return ()
    if isinstance(raw_exclude, str):
        raw_exclude = [raw_exclude]
    if not isinstance(raw_exclude, list) or not all(isinstance(item, str) for item in raw_exclude):
        raise ValueError(f"Vault '{name}' has an invalid 'exclude' entry; expected a list of folder names")
    return tuple(item.strip().replace("\\", "/").strip("/") for item in raw_exclude if item.strip())


def load_vault_configuration(config_path: Path = CONFIG_PATH) -> VaultConfiguration:
    """Load and validate the vault configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``vaults.yaml``
        in the project root, or ``$VAULT_GRAPH_CONFIG`` when set.

    Returns:
        A fully populated :class:`VaultConfiguration` containing normalized vault
        metadata and the configured default vault name.

    Raises:
        FileNotFoundError: If the configuration file is missing.
        ValueError: If the file exists but does not provide the expected structure
            (missing default, empty mapping, invalid entries, etc.).
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Vault configuration file not found at {config_path}")

    try:
        raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Vault configuration at {config_path} is not valid YAML: {exc}") from exc

    if not isinstance(raw_config, dict):
        raise ValueError("Vault configuration must be a mapping with 'default' and 'vaults' keys")

    vaults_section = raw_config.get("vaults")
    if not isinstance(vaults_section, dict) or not vaults_section:
        raise ValueError("Vault configuration must include a non-empty 'vaults' mapping")

    processed: dict[str, VaultMetadata] = {}
    for name, entry in vaults_section.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Vault '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Vault '{name}' is missing a valid 'path' string")

        resolved_path = Path(raw_path).expanduser()
        try:
            resolved_path = resolved_path.resolve(strict=False)
        except RuntimeError:
            # symlink loop; keep the expanded path
            pass

        description = (entry.get("description") or "").strip()
        exists = resolved_path.is_dir()
        if not exists:
            logger.warning("Vault '%s' path does not exist: %s", name, resolved_path)

        processed[name] = VaultMetadata(
            name=name,
            path=resolved_path,
            description=description,
            exists=exists,
            exclude=_parse_exclude(name, entry.get("exclude")),
        )

    default_vault = raw_config.get("default")
    if not isinstance(default_vault, str) or default_vault not in processed:
        raise ValueError("Vault configuration must specify a 'default' vault present in the mapping")

    logger.debug("Loaded %d vault(s) from %s", len(processed), config_path)
    return VaultConfiguration(default_vault=default_vault, vaults=processed)


@lru_cache(maxsize=1)
def get_vault_configuration() -> VaultConfiguration:
    """Return the process-wide configuration, loading it on first use."""
    return load_vault_configuration()
