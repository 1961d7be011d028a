"""
Install command: provision the toolchain, then build, deploy and register.
"""

from provisionkit.cli.utils import load_command_config, resolve_project_root
from provisionkit.orchestrator import ProvisioningOrchestrator


def build_orchestrator(args) -> ProvisioningOrchestrator:
    """Create the orchestrator for install-style commands."""
    config = load_command_config(args)
    return ProvisioningOrchestrator(
        config,
        resolve_project_root(args.project_root),
        repository=getattr(args, "repository", None),
    )


def run(args) -> int:
    """
    Run the install pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    orchestrator = build_orchestrator(args)
    orchestrator.run(
        build=not args.skip_build,
        register=False if args.no_register else None,
    )
    return 0
