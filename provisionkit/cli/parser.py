"""
ProvisionKit CLI argument parser.

This module implements the command-line interface for ProvisionKit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from provisionkit.core.exceptions import ProvisionKitError, UsageError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("provisionkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

EXIT_USAGE = 2


class CLI:
    """ProvisionKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="provkit",
            description="ProvisionKit - provision the Rust toolchain, build and install git-commit-helper",
            epilog='Use "provkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ProvisionKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./provisionkit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Application source directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_check_command(subparsers)
        self._add_package_command(subparsers)

        return parser

    def _add_pipeline_options(self, parser):
        """Options shared by 'install' and 'package'."""
        parser.add_argument(
            "--repository",
            type=Path,
            metavar="PATH",
            help="Repository to register git-commit-helper in (default: project root)",
        )
        parser.add_argument(
            "--no-register",
            action="store_true",
            help="Skip registering the binary in the repository",
        )
        parser.add_argument(
            "--skip-build",
            action="store_true",
            help="Only provision the toolchain; skip build and deployment",
        )
        parser.add_argument(
            "--required-version",
            metavar="VERSION",
            help="Minimum toolchain version (overrides config)",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Provision toolchain, build and install",
            description="Provision the toolchain, build the release binary and install it",
        )
        self._add_pipeline_options(parser)

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        parser = subparsers.add_parser(
            "check",
            help="Report toolchain status without installing",
            description="Probe the toolchain and show which strategy would be used",
        )
        parser.add_argument(
            "--required-version",
            metavar="VERSION",
            help="Minimum toolchain version (overrides config)",
        )
        parser.add_argument(
            "--no-repository",
            action="store_true",
            help="Do not query the package repository (avoids an index refresh)",
        )

    def _add_package_command(self, subparsers):
        """Add 'package' subcommand."""
        parser = subparsers.add_parser(
            "package",
            help="Install, then build a distribution package",
            description="Run the install pipeline, then build an arch, deb or rpm package",
        )
        parser.add_argument("format", metavar="FORMAT", help="Package format: arch|deb|rpm")
        self._add_pipeline_options(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except UsageError as e:
            logger.error(f"Error: {e}")
            if e.usage:
                print(e.usage, file=sys.stderr)
            return EXIT_USAGE
        except ProvisionKitError as e:
            logger.error(f"Error: {e}")
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "provisionkit.cli.commands.install",
            "check": "provisionkit.cli.commands.check",
            "package": "provisionkit.cli.commands.package",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
