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
Key deployment exceptions.

Every failure that ends a run derives from KeyDeployError so the CLI can
report it and exit 1 without inspecting the concrete type.
"""


class KeyDeployError(Exception):
    """Base class for all terminal key deployment failures."""

    pass


class MissingHostError(KeyDeployError):
    """No remote host could be determined from the target or the defaults file."""

    pass


class ClientNotFoundError(KeyDeployError):
    """The ssh client is not on PATH or could not be started."""

    pass


class KeyNotFoundError(KeyDeployError):
    """
    Raised when the public key file does not exist.

    When a matching private key sits next to the missing public key, the
    message carries the ssh-keygen command that would regenerate it.
    """

    def __init__(self, key_path: str, private_key: str = None):
        self.key_path = key_path
        self.private_key = private_key

        message = f"Public key not found: {key_path}"
        if private_key:
            message += (
                f"\nPrivate key found: {private_key}"
                f"\nGenerate public key: ssh-keygen -y -f {private_key} > {key_path}"
            )
        super().__init__(message)


class KeyReadError(KeyDeployError):
    """The public key file exists but cannot be read or decoded."""

    pass


class EmptyKeyError(KeyDeployError):
    """The public key file exists but holds only whitespace."""

    pass


class SSHConnectionError(KeyDeployError):
    """
    Raised when the remote host cannot be reached.

    Examples:
        - Initial "exit 0" test fails (auth, DNS, refused)
        - ssh itself fails while reading authorized_keys
    """

    pass


class AppendError(KeyDeployError):
    """The remote append command exited non-zero."""

    pass


class ConfigError(KeyDeployError):
    """The YAML defaults file is missing, unreadable or malformed."""

    pass
