# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Loading of the minipaas configuration from YAML, .env files and the environment.
"""
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..exceptions import ConfigError
from ..MODELS.minipaas_config import APP_NAME, MinipaasConfig

ENV_PREFIX = "MINIPAAS_"

def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME / "config.yml"

class ConfigParser:
    """
    Builds a MinipaasConfig from layered sources, later ones winning:
    defaults, a YAML file, a .env file, then the process environment.
    """
    def __init__(self,
                 environ: Optional[Mapping[str, str]] = None,
                 dotenv_path: Optional[str] = ".env"):
        """
        :param environ: Environment to read MINIPAAS_* overrides from.
        :param dotenv_path: .env file read before the environment, if it exists.
        """
        self.environ = dict(os.environ) if environ is None else dict(environ)
        self.dotenv_path = dotenv_path

    def parse(self, config_path: Optional[str] = None) -> MinipaasConfig:
        """
        Loads the configuration.

        :param config_path: YAML file; must exist when given. Without it the
            per-user config file is read if present.
        :return: Validated configuration.
        """
        data: Dict[str, Any] = {}
        if config_path:
            if not os.path.exists(config_path):
                raise ConfigError(f"{config_path} not found")
            data.update(self.parse_file(config_path))
        elif default_config_path().exists():
            data.update(self.parse_file(str(default_config_path())))

        data.update(self.environment_overrides())
        try:
            return MinipaasConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    def parse_file(self, config_path: str) -> Dict[str, Any]:
        with open(config_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Dict[str, Any]:
        """
        Parses YAML configuration content.

        :param content: YAML mapping of MinipaasConfig fields.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML: {e}") from e
        if not data:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping")
        return data

    def environment_overrides(self) -> Dict[str, str]:
        """
        Collects MINIPAAS_* variables, e.g. MINIPAAS_COPY_ATTEMPTS=3.
        Unknown names are ignored.
        """
        sources: Dict[str, Optional[str]] = {}
        if self.dotenv_path and os.path.exists(self.dotenv_path):
            sources.update(dotenv_values(self.dotenv_path))
        sources.update(self.environ)

        fields = set(MinipaasConfig.model_fields)
        overrides = {}
        for key, value in sources.items():
            if not key.startswith(ENV_PREFIX) or value is None:
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name in fields:
                overrides[name] = value
        return overrides
