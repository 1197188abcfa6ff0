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
KeyDeployer - copy a public key into a remote authorized_keys.

Steps:
    1. Read the local public key
    2. Stop here on dry run
    3. Test the connection ("exit 0")
    4. Unless forced, skip if the key text already appears remotely
    5. Append the key, creating ~/.ssh as needed
    6. Check that key-only login works (advisory)
"""

from enum import Enum

from ssh_copy_id.errors import AppendError, SSHConnectionError
from ssh_copy_id.keys import read_public_key
from ssh_copy_id.remote import AUTHORIZED_KEYS, RemoteSession, SSHSession
from ssh_copy_id.report import Reporter
from ssh_copy_id.request import DeployRequest


class DeployOutcome(Enum):
    """How a successful run ended."""

    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    DRY_RUN = "dry_run"


def key_present(existing: str, key: str) -> bool:
    """True if the trimmed key text occurs anywhere in the remote buffer."""
    return key.strip() in existing


class KeyDeployer:
    """Runs one deployment described by a DeployRequest."""

    def __init__(
        self, request: DeployRequest, session: RemoteSession = None, reporter: Reporter = None
    ):
        """
        Initialize the deployer.

        Args:
            request: Resolved settings for this run
            session: Remote operations; an SSHSession is created on first use
                when omitted, so a dry run never needs the ssh client
            reporter: Output sink (default: one honoring request.quiet)
        """
        self.request = request
        self._session = session
        self.reporter = reporter or Reporter(quiet=request.quiet)

    @property
    def session(self) -> RemoteSession:
        if self._session is None:
            self._session = SSHSession()
        return self._session

    def run(self) -> DeployOutcome:
        """
        Deploy the key.

        Returns:
            DeployOutcome describing what happened

        Raises:
            KeyNotFoundError, KeyReadError, EmptyKeyError: Local key problems
                (before any remote call)
            ClientNotFoundError: ssh is not on PATH (never raised on dry run)
            SSHConnectionError: Host unreachable or ssh failed while reading keys
            AppendError: Remote append command failed
        """
        request = self.request
        reporter = self.reporter

        reporter.info(f"Copying key: {request.key_path}")
        reporter.info(f"To server: {request.display_target()}")

        key = read_public_key(request.key_path)

        if request.dry_run:
            mode = " (forced, no duplicate check)" if request.force else ""
            reporter.info(
                f"[DRY RUN] Key would be added to {AUTHORIZED_KEYS} "
                f"on {request.display_target()}{mode}"
            )
            return DeployOutcome.DRY_RUN

        reporter.info("Testing connection...")
        result = self.session.test_connection(request)
        if not result.ok:
            raise SSHConnectionError(
                f"Failed to connect to {request.display_target()}. "
                f"Check login credentials.\n{result.describe()}"
            )

        if not request.force:
            result = self.session.read_authorized_keys(request)
            if not result.ok:
                raise SSHConnectionError(
                    f"Could not read {AUTHORIZED_KEYS} on {request.display_target()}: "
                    f"{result.describe()}"
                )
            if key_present(result.stdout, key):
                reporter.success("Key already exists on server")
                return DeployOutcome.ALREADY_PRESENT

        reporter.info(f"Adding key to {AUTHORIZED_KEYS}...")
        result = self.session.append_key(request, key)
        if not result.ok:
            raise AppendError(f"Error copying key: {result.describe()}")

        reporter.success("Key copied successfully!")

        # Verification only produces info and warnings
        if not request.quiet:
            self._verify()

        return DeployOutcome.ADDED

    def _verify(self):
        """Try a key-only login; a failure is reported but does not fail the run."""
        self.reporter.info("Testing connection with key...")
        result = self.session.test_connection_with_key(self.request)
        if result.ok:
            self.reporter.success("Connection with key works!")
        else:
            self.reporter.warn(
                f"Connection with key failed ({result.describe()}). "
                "The key was added; it may work after the agent or session is refreshed."
            )
