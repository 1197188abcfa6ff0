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
ssh-copy-id

Copy a local SSH public key into ~/.ssh/authorized_keys on a remote host,
using the system ssh client for every remote step:
- Test that the host is reachable
- Skip the copy if the key is already there (unless --force)
- Create ~/.ssh (mode 700) and append the key (authorized_keys mode 600)
- Check that key-only login works

Usage:
    # Copy ~/.ssh/id_rsa.pub
    ssh-copy-id user@example.com

    # Copy a specific key
    ssh-copy-id -i ~/.ssh/id_ed25519.pub user@192.168.1.100

    # Non-standard port, skip the duplicate check
    ssh-copy-id -p 2222 -f root@server.local

    # Show what would happen without connecting
    ssh-copy-id -n user@example.com

    # Extra ssh options and an alternate client config
    ssh-copy-id -o ConnectTimeout=5 -o ProxyJump=bastion -F ~/.ssh/config.work host

Environment Variables:
    SSH_COPY_ID_CONFIG    Defaults file (default: ~/.ssh-copy-id.yaml)
"""

import argparse
import sys
from typing import Dict, Optional

from ssh_copy_id.config import CONFIG_ENV, default_config_path, load_config
from ssh_copy_id.deploy import KeyDeployer
from ssh_copy_id.errors import KeyDeployError
from ssh_copy_id.keys import locate_key
from ssh_copy_id.report import EXIT_ERROR, EXIT_OK, Reporter
from ssh_copy_id.request import DEFAULT_PORT, DeployRequest, resolve_target


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits 1 on usage errors, like every other failure."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}\n")


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"port out of range (1-65535): {value}")
    return port


def _create_argument_parser():
    """Create and configure the argument parser."""
    default_config = default_config_path()

    parser = _ArgumentParser(
        prog="ssh-copy-id",
        usage="%(prog)s [options] [user@]host",
        description="Copy your public SSH key to a remote server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  ssh-copy-id user@example.com
  ssh-copy-id -i ~/.ssh/id_ed25519.pub user@192.168.1.100
  ssh-copy-id -p 2222 -f root@server.local

Environment Variables:
  {CONFIG_ENV}    Defaults file (default: ~/.ssh-copy-id.yaml)
        """,
    )

    parser.add_argument("target", nargs="?", help="Remote host as [user@]host")
    parser.add_argument(
        "-i",
        "--identity_file",
        "--identity-file",
        dest="identity_file",
        help="Use this identity; .pub is appended if missing (default: ~/.ssh/id_rsa.pub)",
    )
    parser.add_argument(
        "--key_file",
        "--key-file",
        dest="key_file",
        help="Copy exactly this public key file (overrides -i)",
    )
    parser.add_argument(
        "-p", "--port", type=_port, help=f"SSH port (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "-f", "--force", action="store_true", help="Don't check for existing keys"
    )
    parser.add_argument(
        "-n",
        "--dry_run",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Show what would be done, but don't execute",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Quiet mode")
    parser.add_argument(
        "-o",
        "--ssh_options",
        "--ssh-options",
        dest="ssh_options",
        action="append",
        default=[],
        metavar="OPTION",
        help="Additional ssh option, passed as -o OPTION (repeatable)",
    )
    parser.add_argument(
        "-F",
        "--ssh_config",
        "--ssh-config",
        dest="ssh_config",
        metavar="FILE",
        help="SSH client configuration file",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help=f"Defaults file (default: ${CONFIG_ENV} or ~/.ssh-copy-id.yaml, currently: {default_config})",
    )

    return parser


def build_request(args, config: Optional[Dict] = None) -> DeployRequest:
    """
    Merge parsed arguments with file defaults into a DeployRequest.

    Raises:
        MissingHostError: If no host is given on the command line or in config
    """
    config = config or {}

    user, host = resolve_target(args.target, config.get("user"), config.get("host"))

    if args.key_file or args.identity_file:
        key_path = locate_key(args.key_file, args.identity_file)
    else:
        key_path = locate_key(config.get("key_file"), config.get("identity_file"))

    port = args.port if args.port is not None else config.get("port", DEFAULT_PORT)

    return DeployRequest(
        user=user,
        host=host,
        key_path=key_path,
        port=port,
        force=args.force,
        dry_run=args.dry_run,
        quiet=args.quiet,
        ssh_options=tuple(config.get("ssh_options", [])) + tuple(args.ssh_options),
        ssh_config=args.ssh_config or config.get("ssh_config"),
    )


def main(argv=None):
    """Main entry point."""
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    reporter = Reporter(quiet=args.quiet)

    try:
        config = load_config(args.config)
        request = build_request(args, config)
        KeyDeployer(request, reporter=reporter).run()
    except KeyDeployError as e:
        reporter.error(str(e))
        return EXIT_ERROR
    except KeyboardInterrupt:
        reporter.error("Interrupted")
        return EXIT_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
