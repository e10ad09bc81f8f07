import os
import logging
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from kafka_tool.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "kafka_tool.cfg"
LOCAL_CONFIG_FILE = "kafka_tool.local.cfg"
CONFIG_PATH_ENV_VAR = "KAFKA_TOOL_CONFIG"

REQUIRED_KEYS = ["broker", "zookeeper", "kafka_dir", "zookeeper_dir"]

DEFAULT_TIMEOUT = 300
DEFAULT_POLL_INTERVAL = 10


@dataclass(frozen=True)
class KafkaToolConfig:
    """Cluster addresses and tool-chain paths shared by both CLIs."""

    broker: str
    zookeeper: str
    kafka_dir: str
    zookeeper_dir: str
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    source: str = ""

    def kafka_bin(self, script):
        """Return the path of a script inside the Kafka installation."""
        if not self.kafka_dir:
            return script
        return str(Path(self.kafka_dir) / script)


def _number(values, key, default):
    raw = values.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for '{key}': {raw!r}") from e


def load_config(config_path=None):
    """
    Load the shell-style KEY=VALUE configuration file.

    The file path comes from ``config_path``, then the KAFKA_TOOL_CONFIG
    environment variable, then ``kafka_tool.cfg`` in the working directory.
    A ``kafka_tool.local.cfg`` next to it overrides individual keys.

    Missing files or keys are logged, not fatal: the value becomes an empty
    string and the wrapped tool reports the problem when it is used.

    Returns:
        KafkaToolConfig: immutable configuration for this process
    """
    # -----------------------------------
    # Step 1: Resolve configuration path
    # -----------------------------------
    path = Path(config_path or os.getenv(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_FILE)

    # -----------------------------------
    # Step 2: Load base file and local overrides
    # -----------------------------------
    values = {}
    files_loaded = 0
    if path.exists():
        values.update(dotenv_values(path))
        files_loaded += 1
        logger.debug(f"Loaded configuration from: {path}")
    else:
        logger.warning(f"Configuration file not found: {path}")

    local_path = path.parent / LOCAL_CONFIG_FILE
    if local_path.exists():
        values.update(dotenv_values(local_path))
        files_loaded += 1
        logger.debug(f"Loaded local overrides from: {local_path}")

    # -----------------------------------
    # Step 3: Report missing keys
    # -----------------------------------
    missing_keys = [key for key in REQUIRED_KEYS if not values.get(key)]
    if files_loaded and missing_keys:
        logger.error(f"Missing configuration values: {', '.join(missing_keys)}")

    return KafkaToolConfig(
        broker=values.get("broker") or "",
        zookeeper=values.get("zookeeper") or "",
        kafka_dir=values.get("kafka_dir") or "",
        zookeeper_dir=values.get("zookeeper_dir") or "",
        timeout=_number(values, "timeout", DEFAULT_TIMEOUT),
        poll_interval=_number(values, "poll_interval", DEFAULT_POLL_INTERVAL),
        source=str(path),
    )
