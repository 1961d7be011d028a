"""
Package command: run the install pipeline, then build a distribution package.
"""

from provisionkit.cli.commands.install import build_orchestrator
from provisionkit.deploy.packaging import validate_format


def run(args) -> int:
    """
    Run the install pipeline followed by packaging.

    The format is validated before anything is installed.

    Args:
        args: Parsed command-line arguments (format plus install options)

    Returns:
        Exit code (0 for success)
    """
    package_format = validate_format(args.format)

    orchestrator = build_orchestrator(args)
    orchestrator.run(
        build=not args.skip_build,
        register=False if args.no_register else None,
        package_format=package_format,
    )
    return 0
