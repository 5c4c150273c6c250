"""
Configuration manager with repomix compatibility.

Handles both repopacker.config.json and repomix.config.json with automatic
fallback, converting repomix's nested schema into :class:`PackOptions`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

from .packer.types import PackOptions


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "repopacker.config.json"
REPOMIX_CONFIG_FILENAME = "repomix.config.json"


class ConfigManager:
    """
    Loads :class:`PackOptions` for a repository.

    Fallback priority:
    1. Custom config path (if provided)
    2. repopacker.config.json
    3. repomix.config.json
    4. Default configuration
    """

    def __init__(self, repo_path: Optional[Path] = None):
        self.repo_path = repo_path
        self.output_file_path: Optional[str] = None
        self._config: Optional[PackOptions] = None

    def load_config(self, custom_config_path: Optional[Path] = None) -> PackOptions:
        candidates = []
        if custom_config_path is not None:
            candidates.append(Path(custom_config_path))
        if self.repo_path is not None:
            candidates.append(self.repo_path / CONFIG_FILENAME)
            candidates.append(self.repo_path / REPOMIX_CONFIG_FILENAME)

        for config_path in candidates:
            if config_path.is_file():
                logger.debug(f"Loading configuration from {config_path}")
                self._config = self._convert_config(self._load_config_file(config_path))
                return self._config

        self._config = PackOptions()
        return self._config

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_path}: top level is not an object")
            return {}
        return data

    def _convert_config(self, config_data: Dict[str, Any]) -> PackOptions:
        if self._is_repomix_style_config(config_data):
            return self._convert_repomix_config(config_data)
        return self._convert_flat_config(config_data)

    def _is_repomix_style_config(self, config_data: Dict[str, Any]) -> bool:
        repomix_indicators = [
            "output.filePath",
            "output.headerText",
            "output.directoryStructure",
            "ignore.customPatterns",
            "ignore.useGitignore",
            "ignore.useDefaultPatterns",
        ]
        return any(self._has_nested_key(config_data, key) for key in repomix_indicators)

    def _has_nested_key(self, data: Dict[str, Any], key: str) -> bool:
        current = data
        for k in key.split('.'):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return False
        return True

    def _convert_repomix_config(self, config_data: Dict[str, Any]) -> PackOptions:
        config = PackOptions()

        output_config = config_data.get("output") or {}
        config.prepend_prompt = output_config.get("headerText", config.prepend_prompt)
        config.include_file_tree = output_config.get("directoryStructure", config.include_file_tree)
        self.output_file_path = output_config.get("filePath", self.output_file_path)

        ignore_config = config_data.get("ignore") or {}
        config.use_gitignore = ignore_config.get("useGitignore", config.use_gitignore)
        config.use_default_patterns = ignore_config.get("useDefaultPatterns", config.use_default_patterns)
        config.ignore_patterns = list(ignore_config.get("customPatterns", config.ignore_patterns))

        return config

    def _convert_flat_config(self, config_data: Dict[str, Any]) -> PackOptions:
        known = {f.name for f in fields(PackOptions)}
        values = {}
        for key, value in config_data.items():
            if key == "output_file_path":
                self.output_file_path = value
            elif key in known:
                values[key] = value
            else:
                logger.warning(f"Unknown configuration key: {key}")

        if isinstance(values.get("ignore_patterns"), str):
            values["ignore_patterns"] = [values["ignore_patterns"]]
        return PackOptions(**values)
