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
"""Shared fixtures for ssh-copy-id tests."""

import pytest

from ssh_copy_id.remote import CommandResult

SAMPLE_KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIHkq7Zb1X0s2Xh0c5y1m8c9N4E3a1bQj7kqWwqZ alice@laptop"


class FakeSession:
    """
    RemoteSession double.

    Records each call by name and keeps an in-memory authorized_keys buffer
    that append_key writes to. Individual operations can be scripted to fail
    through the *_result attributes.
    """

    def __init__(self, authorized_keys: str = ""):
        self.authorized_keys = authorized_keys
        self.calls = []
        self.appended = []
        self.connect_result = CommandResult(0)
        self.read_result = None
        self.append_result = None
        self.verify_result = CommandResult(0)

    def test_connection(self, request):
        self.calls.append("test_connection")
        return self.connect_result

    def read_authorized_keys(self, request):
        self.calls.append("read_authorized_keys")
        if self.read_result is not None:
            return self.read_result
        return CommandResult(0, stdout=self.authorized_keys)

    def append_key(self, request, key_line):
        self.calls.append("append_key")
        if self.append_result is not None:
            return self.append_result
        self.appended.append(key_line)
        self.authorized_keys += key_line.strip() + "\n"
        return CommandResult(0)

    def test_connection_with_key(self, request):
        self.calls.append("test_connection_with_key")
        return self.verify_result


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point HOME at a temp dir and disable any real defaults file."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("SSH_COPY_ID_CONFIG", str(tmp_path / "no-such-config.yaml"))
    return tmp_path


@pytest.fixture
def public_key(home):
    """Write ~/.ssh/id_rsa.pub under the temp HOME and return its path."""
    ssh_dir = home / ".ssh"
    ssh_dir.mkdir()
    key_path = ssh_dir / "id_rsa.pub"
    key_path.write_text(SAMPLE_KEY + "\n")
    return key_path


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def sample_key():
    return SAMPLE_KEY
