#!/usr/bin/env python3
"""
ocap-pull - pull projects/ocap and scripts/release from the upstream repository

Selects the upstream source by release tag, branch name, or commit hash and
copies the target directories into the current working tree.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ocap_pull import __version__
from ocap_pull.config import get_config
from ocap_pull.console import Console, configure_logging
from ocap_pull.runner import PullRunner
from ocap_pull.target_config import PullTarget, TargetConfigError


EPILOG = """\
Examples:
  ocap-pull                    # Pull from latest release
  ocap-pull v1.2.3             # Pull specific release version
  ocap-pull main               # Pull from main branch (latest)
  ocap-pull develop            # Pull from develop branch (latest)
  ocap-pull main abc123        # Pull specific commit from main branch
  ocap-pull "" abc123          # Pull specific commit from default branch
  ocap-pull --help             # Show this help message

Environment Variables:
  KEEP_TEMP=1                  # Keep temporary directory for debugging
  RELEASE_VERSION=v1.2.3       # Specify release version via environment variable
  GITHUB_TOKEN=...             # Authenticate release lookups
  OCAP_PULL_HTTP_TIMEOUT=10    # Release lookup timeout in seconds
  OCAP_PULL_GIT_TIMEOUT=600    # Timeout for each git command in seconds
  OCAP_PULL_LOG_LEVEL=INFO     # Diagnostic log level
  OCAP_PULL_TARGET_CONFIG=...  # YAML file overriding the upstream target

Features:
  - Automatic fetching of latest release if no version specified
  - Support for specific release versions
  - Automatic removal of existing directories
  - Creates pulled_version_info.txt with release/commit details
"""


class PullArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit code 1."""

    def error(self, message):
        Console.error(message)
        self.print_usage(sys.stderr)
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = PullArgumentParser(
        prog='ocap-pull',
        usage='%(prog)s [options] [version|branch] [commit_hash]',
        description='Pull projects/ocap and scripts/release from open-world-agents repository',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'version_or_branch',
        nargs='?',
        default='',
        metavar='version|branch',
        help='Release version (e.g., v1.2.3) or branch name (default: latest release)'
    )

    parser.add_argument(
        'commit_hash',
        nargs='?',
        default='',
        help='Specific commit hash to checkout (optional, overrides version/branch)'
    )

    parser.add_argument(
        '--target-config',
        type=Path,
        default=None,
        help='YAML file describing the upstream target (default: $OCAP_PULL_TARGET_CONFIG)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show git commands and release lookup details'
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_config()
        configure_logging(args.verbose, config.log_level)

        target_config_path = args.target_config or config.target_config_path
        if target_config_path:
            target = PullTarget.from_yaml(target_config_path)
        else:
            target = PullTarget()
    except (FileNotFoundError, TargetConfigError, ValueError) as e:
        Console.error(str(e))
        sys.exit(1)

    runner = PullRunner(Path.cwd(), target=target, config=config)
    sys.exit(runner.run(args.version_or_branch, args.commit_hash))


if __name__ == '__main__':
    main()
