"""
Configuration file handling.

Render parameters can be stored as JSON files; values given on the command
line override the ones read from a file.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from ..core.exceptions import InvalidParameterError
from ..core.parameters import RenderParameters

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads and saves render parameters as JSON."""

    def load_config(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Read a configuration file.

        Args:
            filepath: Path to a JSON file holding a single object

        Returns:
            Raw configuration dictionary

        Raises:
            InvalidParameterError: if the file is not a JSON object
        """
        filepath = Path(filepath)
        try:
            data = json.loads(filepath.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise InvalidParameterError(f"Invalid configuration file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidParameterError(f"Configuration file {filepath} must contain a JSON object")

        logger.info(f"Loaded configuration: {filepath}")
        return data

    def save_config(self, params: RenderParameters, filepath: Union[str, Path]) -> None:
        filepath = Path(filepath)
        filepath.write_text(json.dumps(params.to_dict(), indent=2), encoding='utf-8')
        logger.info(f"Saved configuration: {filepath}")


def load_parameters(config_file: Optional[Union[str, Path]] = None,
                    overrides: Optional[Dict[str, Any]] = None) -> RenderParameters:
    """
    Build validated render parameters from a file and explicit overrides.

    Args:
        config_file: Optional JSON configuration file
        overrides: Values that take precedence; None entries are ignored

    Returns:
        Validated RenderParameters
    """
    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(ConfigManager().load_config(config_file))

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    return RenderParameters.from_dict(values).validate()
