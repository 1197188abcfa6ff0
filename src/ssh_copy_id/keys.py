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
"""Local public key lookup."""

import os
from pathlib import Path
from typing import Optional

from ssh_copy_id.errors import EmptyKeyError, KeyNotFoundError, KeyReadError

DEFAULT_PUBLIC_KEY = "~/.ssh/id_rsa.pub"
PUBLIC_SUFFIX = ".pub"


def _expand(path: str) -> str:
    """Expand ~ and environment variables, then make the path absolute."""
    return os.path.abspath(os.path.expandvars(os.path.expanduser(path)))


def locate_key(key_file: Optional[str] = None, identity_file: Optional[str] = None) -> str:
    """
    Resolve the public key path to copy.

    Precedence: key_file as given, then identity_file with ".pub" appended
    unless already present, then ~/.ssh/id_rsa.pub. Existence is not checked.

    Args:
        key_file: Exact public key file
        identity_file: Identity file (private or public half)

    Returns:
        Absolute path to the public key
    """
    if key_file:
        return _expand(key_file)

    if identity_file:
        if not identity_file.endswith(PUBLIC_SUFFIX):
            identity_file += PUBLIC_SUFFIX
        return _expand(identity_file)

    return _expand(DEFAULT_PUBLIC_KEY)


def private_key_for(key_path: str) -> str:
    """Path of the private half: key_path with a trailing ".pub" removed."""
    if key_path.endswith(PUBLIC_SUFFIX):
        return key_path[: -len(PUBLIC_SUFFIX)]
    return key_path


def read_public_key(key_path: str) -> str:
    """
    Read and trim the public key.

    Raises:
        KeyNotFoundError: If key_path does not exist; names the private key
            and a regeneration command when the private half is present
        KeyReadError: If the file cannot be opened or is not valid UTF-8
        EmptyKeyError: If the file is blank
    """
    path = Path(key_path)

    if not path.is_file():
        private_key = private_key_for(key_path)
        if private_key != key_path and Path(private_key).is_file():
            raise KeyNotFoundError(key_path, private_key)
        raise KeyNotFoundError(key_path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read().strip()
    except UnicodeDecodeError as e:
        raise KeyReadError(f"Public key is not valid UTF-8 text: {key_path} ({e.reason})") from e
    except OSError as e:
        raise KeyReadError(f"Could not read public key {key_path}: {e.strerror or e}") from e

    if not content:
        raise EmptyKeyError(f"Public key file is empty: {key_path}")

    return content
