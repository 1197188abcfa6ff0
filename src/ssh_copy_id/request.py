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
Deploy request and target parsing.

A DeployRequest holds every resolved setting for a single run and is passed
explicitly to the session and the deployer.
"""

import getpass
from dataclasses import dataclass
from typing import Optional, Tuple

from ssh_copy_id.errors import MissingHostError

DEFAULT_PORT = 22


@dataclass(frozen=True)
class DeployRequest:
    """
    Settings for one key deployment.

    Attributes:
        user: Remote login name
        host: Remote hostname or IP
        port: SSH port (22 is left off the ssh command line)
        key_path: Absolute path to the public key file
        force: Append without checking authorized_keys first
        dry_run: Report the intended action, never contact the host
        quiet: Only print errors
        ssh_options: Extra "-o" values, forwarded in order
        ssh_config: Alternate ssh client configuration file
    """

    user: str
    host: str
    key_path: str
    port: int = DEFAULT_PORT
    force: bool = False
    dry_run: bool = False
    quiet: bool = False
    ssh_options: Tuple[str, ...] = ()
    ssh_config: Optional[str] = None

    @property
    def destination(self) -> str:
        """user@host as passed to ssh."""
        return f"{self.user}@{self.host}"

    def display_target(self) -> str:
        """user@host, with :port appended when it is not the default."""
        if self.port != DEFAULT_PORT:
            return f"{self.destination}:{self.port}"
        return self.destination


def _local_username() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        # No LOGNAME/USER/LNAME/USERNAME and no passwd entry
        return "user"


def resolve_target(
    token: Optional[str], user: Optional[str] = None, host: Optional[str] = None
) -> Tuple[str, str]:
    """
    Split a [user@]host token into (user, host).

    The token is split on its first "@". Parts the token does not supply are
    taken from the explicit user/host values, and the user finally falls back
    to the local login name.

    Args:
        token: Positional target from the command line (may be None)
        user: Default remote user (e.g. from the defaults file)
        host: Default remote host (e.g. from the defaults file)

    Returns:
        Tuple of (user, host)

    Raises:
        MissingHostError: If no host is available from any source
    """
    token_user = None
    token_host = token

    if token and "@" in token:
        token_user, token_host = token.split("@", 1)

    resolved_host = token_host or host
    if not resolved_host:
        raise MissingHostError("No host specified. Usage: ssh-copy-id [options] [user@]host")

    resolved_user = token_user or user or _local_username()
    return resolved_user, resolved_host
