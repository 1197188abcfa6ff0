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
"""Unit tests for the KeyDeployer pipeline, using a recording fake session."""

import pytest
from unittest.mock import patch

from ssh_copy_id.deploy import DeployOutcome, KeyDeployer, key_present
from ssh_copy_id.errors import AppendError, KeyNotFoundError, SSHConnectionError
from ssh_copy_id.remote import CommandResult
from ssh_copy_id.report import Reporter
from ssh_copy_id.request import DeployRequest


def _request(key_path, **overrides):
    fields = dict(user="bob", host="10.0.0.5", key_path=str(key_path))
    fields.update(overrides)
    return DeployRequest(**fields)


def _deploy(request, session):
    return KeyDeployer(request, session, Reporter(quiet=request.quiet)).run()


class TestKeyPresent:
    """Test the containment check."""

    def test_exact_line(self, sample_key):
        assert key_present(sample_key + "\n", sample_key)

    def test_substring_of_longer_line(self, sample_key):
        existing = f'no-pty,from="10.0.0.0/8" {sample_key} extra-comment\n'

        assert key_present(existing, sample_key)

    def test_absent(self, sample_key):
        assert not key_present("ssh-rsa AAAAB3Nza other@host\n", sample_key)

    def test_empty_remote(self, sample_key):
        assert not key_present("", sample_key)


class TestHappyPath:
    """Test successful deployments."""

    def test_key_added(self, public_key, fake_session, sample_key, capsys):
        """bob@10.0.0.5, default key, key not yet on remote."""
        outcome = _deploy(_request(public_key), fake_session)

        assert outcome is DeployOutcome.ADDED
        assert fake_session.calls == [
            "test_connection",
            "read_authorized_keys",
            "append_key",
            "test_connection_with_key",
        ]
        assert fake_session.appended == [sample_key]
        out = capsys.readouterr().out
        assert f"Copying key: {public_key}" in out
        assert "To server: bob@10.0.0.5" in out
        assert "Key copied successfully!" in out
        assert "Connection with key works!" in out

    def test_key_already_present(self, public_key, fake_session, sample_key, capsys):
        fake_session.authorized_keys = f"ssh-rsa AAAAB3Nza other@host\n{sample_key}\n"

        outcome = _deploy(_request(public_key), fake_session)

        assert outcome is DeployOutcome.ALREADY_PRESENT
        assert "append_key" not in fake_session.calls
        assert "Key already exists on server" in capsys.readouterr().out

    def test_custom_port_in_banner(self, public_key, fake_session, capsys):
        _deploy(_request(public_key, port=2222), fake_session)

        assert "To server: bob@10.0.0.5:2222" in capsys.readouterr().out


class TestIdempotence:
    """Test repeated runs against the same remote."""

    def test_second_run_does_not_append(self, public_key, fake_session, sample_key):
        first = _deploy(_request(public_key), fake_session)
        second = _deploy(_request(public_key), fake_session)

        assert first is DeployOutcome.ADDED
        assert second is DeployOutcome.ALREADY_PRESENT
        assert fake_session.calls.count("append_key") == 1
        assert fake_session.authorized_keys.splitlines() == [sample_key]

    def test_force_appends_every_time(self, public_key, fake_session, sample_key):
        request = _request(public_key, force=True)

        _deploy(request, fake_session)
        _deploy(request, fake_session)

        assert "read_authorized_keys" not in fake_session.calls
        assert fake_session.calls.count("append_key") == 2
        assert fake_session.authorized_keys.splitlines() == [sample_key, sample_key]


class TestDryRun:
    """Test that dry run never touches the remote."""

    @pytest.mark.parametrize("force", [False, True])
    def test_no_remote_calls(self, public_key, fake_session, capsys, force):
        outcome = _deploy(_request(public_key, dry_run=True, force=force), fake_session)

        assert outcome is DeployOutcome.DRY_RUN
        assert fake_session.calls == []
        assert "[DRY RUN]" in capsys.readouterr().out

    @patch("ssh_copy_id.remote.shutil.which", return_value=None)
    def test_no_ssh_client_needed(self, mock_which, public_key):
        deployer = KeyDeployer(_request(public_key, dry_run=True))

        assert deployer.run() is DeployOutcome.DRY_RUN
        mock_which.assert_not_called()

    def test_still_requires_key(self, home, fake_session):
        with pytest.raises(KeyNotFoundError):
            _deploy(_request(home / "missing.pub", dry_run=True), fake_session)

        assert fake_session.calls == []


class TestFailures:
    """Test fatal and non-fatal failures."""

    def test_missing_key_with_private_sibling(self, home, fake_session):
        ssh_dir = home / ".ssh"
        ssh_dir.mkdir()
        (ssh_dir / "id_rsa").write_text("private\n")

        with pytest.raises(KeyNotFoundError) as exc_info:
            _deploy(_request(ssh_dir / "id_rsa.pub"), fake_session)

        assert f"ssh-keygen -y -f {ssh_dir / 'id_rsa'}" in str(exc_info.value)
        assert fake_session.calls == []

    def test_connection_failure_is_fatal(self, public_key, fake_session):
        fake_session.connect_result = CommandResult(255, stderr="Permission denied (publickey).")

        with pytest.raises(SSHConnectionError) as exc_info:
            _deploy(_request(public_key), fake_session)

        assert "Permission denied" in str(exc_info.value)
        assert fake_session.calls == ["test_connection"]

    def test_read_failure_is_fatal(self, public_key, fake_session):
        fake_session.read_result = CommandResult(255, stderr="Connection reset")

        with pytest.raises(SSHConnectionError):
            _deploy(_request(public_key), fake_session)

        assert "append_key" not in fake_session.calls

    def test_append_failure(self, public_key, fake_session):
        fake_session.append_result = CommandResult(1, stderr="No space left on device")

        with pytest.raises(AppendError) as exc_info:
            _deploy(_request(public_key), fake_session)

        assert "No space left on device" in str(exc_info.value)
        assert "test_connection_with_key" not in fake_session.calls

    def test_verification_failure_is_warning(self, public_key, fake_session, capsys):
        fake_session.verify_result = CommandResult(255, stderr="Permission denied (publickey).")

        outcome = _deploy(_request(public_key), fake_session)

        assert outcome is DeployOutcome.ADDED
        assert "Warning: Connection with key failed" in capsys.readouterr().out


class TestQuiet:
    def test_quiet_prints_nothing_and_skips_verification(self, public_key, fake_session, capsys):
        outcome = _deploy(_request(public_key, quiet=True), fake_session)

        assert outcome is DeployOutcome.ADDED
        assert "test_connection_with_key" not in fake_session.calls
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_default_reporter_follows_request(self, public_key, fake_session, capsys):
        KeyDeployer(_request(public_key, quiet=True), fake_session).run()

        assert capsys.readouterr().out == ""
