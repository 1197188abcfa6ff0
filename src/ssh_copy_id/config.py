# ----------------------------------------------------------------------------------------------- #
#                 $$$$$$\   $$$$$$\ $$$$$$$$\ $$\   $$\ $$\   $$\ $$$$$$\ $$\   $$\               #
#                $$  __$$\ $$  __$$\\__$$  __|$$ |  $$ |$$$\  $$ |\_$$  _|$$ |  $$ |              #
#                $$ /  \__|$$ /  $$ |  $$ |   $$ |  $$ |$$$$\ $$ |  $$ |  \$$\ $$  |              #
#                $$ |$$$$\ $$ |  $$ |  $$ |   $$ |  $$ |$$ $$\$$ |  $$ |   \$$$$  /               #
#                $$ |\_$$ |$$ |  $$ |  $$ |   $$ |  $$ |$$ \$$$$ |  $$ |   $$  $$<                #
#                $$ |  $$ |$$ |  $$ |  $$ |   $$ |  $$ |$$ |\$$$ |  $$ |  $$  /\$$\               #
#                \$$$$$$  | $$$$$$  |  $$ |   \$$$$$$  |$$ | \$$ |$$$$$$\ $$ /  $$ |              #
#                 \______/  \______/   \__|    \______/ \__|  \__|\______|\__|  \__|              #
# ----------------------------------------------------------------------------------------------- #
# Copyright (C) GOTUNIX Networks                                                                  #
# Copyright (C) Justin Ovens                                                                      #
# LICENSE: SPDX - AGPL-3.0-or-later                                                               #
# ----------------------------------------------------------------------------------------------- #
# This program is free software: you can redistribute it and/or modify                            #
# it under the terms of the GNU Affero General Public License as                                  #
# published by the Free Software Foundation, either version 3 of the                              #
# License, or (at your option) any later version.                                                 #
#                                                                                                 #
# This program is distributed in the hope that it will be useful,                                 #
# but WITHOUT ANY WARRANTY; without even the implied warranty of                                  #
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the                                   #
# GNU Affero General Public License for more details.                                             #
#                                                                                                 #
# You should have received a copy of the GNU Affero General Public License                        #
# along with this program.  If not, see <https://www.gnu.org/licenses/>.                          #
# ----------------------------------------------------------------------------------------------- #
"""
YAML defaults file.

Example ~/.ssh-copy-id.yaml:

    user: deploy
    identity_file: ~/.ssh/id_ed25519
    port: 2222
    ssh_options:
      - ConnectTimeout=10
    ssh_config: ~/.ssh/config.work

Command-line values override these. ssh_options from the file come first,
then those given with -o.
"""

import os
from pathlib import Path
from typing import Dict, Optional

from ssh_copy_id.errors import ConfigError

CONFIG_ENV = "SSH_COPY_ID_CONFIG"
DEFAULT_CONFIG = "~/.ssh-copy-id.yaml"

STRING_KEYS = ("user", "host", "identity_file", "key_file", "ssh_config")


def default_config_path() -> str:
    """$SSH_COPY_ID_CONFIG, or ~/.ssh-copy-id.yaml."""
    return os.path.expanduser(os.environ.get(CONFIG_ENV, DEFAULT_CONFIG))


def _validate(data: Dict, source: Path) -> Dict:
    unknown = sorted(set(data) - set(STRING_KEYS) - {"port", "ssh_options"})
    if unknown:
        raise ConfigError(f"Unknown keys in {source}: {', '.join(unknown)}")

    config = {}
    for key in STRING_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' in {source} must be a string")
        config[key] = value

    port = data.get("port")
    if port is not None:
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigError(f"'port' in {source} must be an integer between 1 and 65535")
        config["port"] = port

    options = data.get("ssh_options")
    if options is not None:
        if isinstance(options, str):
            options = [options]
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ConfigError(f"'ssh_options' in {source} must be a string or a list of strings")
        config["ssh_options"] = list(options)

    return config


def load_config(config_file: Optional[str] = None) -> Dict:
    """
    Load defaults from a YAML file.

    Args:
        config_file: Explicit path; when None the default location is used
            and a missing file simply yields no defaults

    Returns:
        Dict with any of: user, host, identity_file, key_file, port,
        ssh_options, ssh_config

    Raises:
        ConfigError: If an explicit file is missing, or any file cannot be
            parsed or holds invalid values
    """
    explicit = config_file is not None
    path = Path(os.path.expanduser(config_file)) if explicit else Path(default_config_path())

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_file}")
        return {}

    import yaml

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return _validate(data, path)
