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
Remote operations over the system ssh client.

RemoteSession is the narrow interface the deployer talks to. SSHSession is
the real implementation: every operation is one ssh subprocess whose exit
status and output are captured into a CommandResult.
"""

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable

from ssh_copy_id.errors import ClientNotFoundError
from ssh_copy_id.keys import private_key_for
from ssh_copy_id.request import DEFAULT_PORT, DeployRequest

SSH_DIR = "~/.ssh"
AUTHORIZED_KEYS = "~/.ssh/authorized_keys"


@dataclass
class CommandResult:
    """Exit status and captured output of one ssh invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        """Short reason for a failure, for error messages."""
        detail = (self.stderr or self.stdout or "").strip()
        if detail:
            return detail
        return f"ssh exited with status {self.returncode}"


def quote_single(text: str) -> str:
    """
    Escape text for use inside a single-quoted shell string.

    Each ' becomes '\\'' (close quote, escaped quote, reopen quote), so the
    caller can wrap the result in single quotes safely.
    """
    return text.replace("'", "'\\''")


def build_read_cmd() -> str:
    """Remote command printing authorized_keys; a missing file prints nothing."""
    return f"cat {AUTHORIZED_KEYS} 2>/dev/null || true"


def build_append_cmd(key_line: str) -> str:
    """Remote command creating ~/.ssh and appending key_line to authorized_keys."""
    escaped = quote_single(key_line.strip())
    return (
        f"mkdir -p {SSH_DIR} && "
        f"chmod 700 {SSH_DIR} && "
        f"printf '%s\\n' '{escaped}' >> {AUTHORIZED_KEYS} && "
        f"chmod 600 {AUTHORIZED_KEYS}"
    )


def find_client(name: str = "ssh") -> str:
    """
    Locate the ssh client on PATH.

    Raises:
        ClientNotFoundError: If the binary is not on PATH
    """
    path = shutil.which(name)
    if not path:
        raise ClientNotFoundError(
            f"SSH client '{name}' not found on PATH. Install OpenSSH and try again."
        )
    return path


@runtime_checkable
class RemoteSession(Protocol):
    """
    Remote operations needed to deploy a key.

    Implementations:
        - SSHSession: runs the system ssh client
        - test doubles that record calls and return scripted results
    """

    def test_connection(self, request: DeployRequest) -> CommandResult:
        """Run a no-op remote command."""
        ...

    def read_authorized_keys(self, request: DeployRequest) -> CommandResult:
        """Return remote authorized_keys content in stdout (empty if missing)."""
        ...

    def append_key(self, request: DeployRequest, key_line: str) -> CommandResult:
        """Append key_line to remote authorized_keys, fixing permissions."""
        ...

    def test_connection_with_key(self, request: DeployRequest) -> CommandResult:
        """Run a no-op remote command authenticating only with the deployed key."""
        ...


class SSHSession:
    """RemoteSession backed by the ssh binary."""

    def __init__(self, ssh_binary: Optional[str] = None):
        """
        Initialize the session.

        Args:
            ssh_binary: Path to ssh; looked up on PATH when omitted

        Raises:
            ClientNotFoundError: If ssh_binary is omitted and ssh is not on PATH
        """
        self.ssh_binary = ssh_binary or find_client()

    def _connection_args(self, request: DeployRequest) -> List[str]:
        """-F and -p flags shared by every invocation."""
        args = []
        if request.ssh_config:
            args.extend(["-F", request.ssh_config])
        if request.port != DEFAULT_PORT:
            args.extend(["-p", str(request.port)])
        return args

    def _extra_options(self, request: DeployRequest) -> List[str]:
        args = []
        for option in request.ssh_options:
            args.extend(["-o", option])
        return args

    def build_cmd(self, request: DeployRequest, remote_cmd: str) -> List[str]:
        """Build the argv for running remote_cmd on the target."""
        return (
            [self.ssh_binary]
            + self._connection_args(request)
            + self._extra_options(request)
            + ["-o", "StrictHostKeyChecking=accept-new", request.destination, remote_cmd]
        )

    def build_key_check_cmd(self, request: DeployRequest) -> List[str]:
        """
        Build the argv for a key-only, non-interactive login test.

        BatchMode=yes precedes the user options since ssh keeps the first value
        given for an option.
        """
        return (
            [self.ssh_binary]
            + self._connection_args(request)
            + ["-i", private_key_for(request.key_path), "-o", "BatchMode=yes"]
            + self._extra_options(request)
            + [request.destination, "exit 0"]
        )

    def _run(self, cmd: List[str]) -> CommandResult:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise ClientNotFoundError(f"Could not start {cmd[0]}: {e}") from e

        return CommandResult(
            returncode=result.returncode, stdout=result.stdout, stderr=result.stderr
        )

    def test_connection(self, request: DeployRequest) -> CommandResult:
        return self._run(self.build_cmd(request, "exit 0"))

    def read_authorized_keys(self, request: DeployRequest) -> CommandResult:
        return self._run(self.build_cmd(request, build_read_cmd()))

    def append_key(self, request: DeployRequest, key_line: str) -> CommandResult:
        return self._run(self.build_cmd(request, build_append_cmd(key_line)))

    def test_connection_with_key(self, request: DeployRequest) -> CommandResult:
        return self._run(self.build_key_check_cmd(request))
