import yaml
import json
from jsonschema import validate
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_SCHEMA_PATH = os.path.join("schemas", "config.schema.json")


def load_and_validate_config(config_path=DEFAULT_CONFIG_PATH, schema_path=DEFAULT_SCHEMA_PATH):
    """
    Loads a YAML configuration file and validates it against a JSON schema.

    Args:
        config_path (str): The path to the YAML config file.
        schema_path (str): The path to the JSON schema file.

    Returns:
        dict: The validated configuration dictionary.

    Raises:
        jsonschema.ValidationError: If the configuration is invalid.
        FileNotFoundError: If the config or schema file cannot be found.
    """
    # --- Load Configuration ---
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found at: {config_path}")
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    # --- Load Schema ---
    if not os.path.exists(schema_path):
        raise FileNotFoundError(f"Schema file not found at: {schema_path}")
    with open(schema_path, 'r') as f:
        schema = json.load(f)

    # --- Validate ---
    try:
        validate(instance=config, schema=schema)
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
    logger.info("Configuration %s is valid.", config_path)
    return config


if __name__ == '__main__':
    try:
        load_and_validate_config()
        print("✅ Configuration is valid.")
    except Exception as e:
        print(f"❌ {e}")
        exit(1)
