"""
Check command for reporting toolchain status.

Probes the installed toolchain, the toolchain manager and (optionally) the
package repository, and prints the strategy an install would use. Nothing
is installed.
"""

import logging

from provisionkit.cli.utils import (
    format_version,
    load_command_config,
    resolve_project_root,
)
from provisionkit.core.platform import detect_platform
from provisionkit.orchestrator import ProvisioningOrchestrator
from provisionkit.toolchain.selector import Strategy, select_strategy

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Execute check command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 if the installed toolchain already meets the requirement, else 1
    """
    config = load_command_config(args)
    orchestrator = ProvisioningOrchestrator(config, resolve_project_root(args.project_root))
    toolchain = config.toolchain

    probe = orchestrator.make_probe().probe(
        required=toolchain.required,
        include_repository=not args.no_repository,
    )
    selection = select_strategy(probe, toolchain.required)

    package_manager = orchestrator.package_manager
    lines = [
        f"Platform: {detect_platform()}",
        f"Required {toolchain.compiler}: >= {toolchain.required}",
        f"Installed {toolchain.compiler}: {format_version(probe.installed_version)}",
        f"{toolchain.manager}: {'found' if probe.manager_present else 'not found'}",
        f"System package manager: {package_manager or 'none'}",
    ]
    if probe.repo_error:
        lines.append(f"Repository candidate: error ({probe.repo_error})")
    elif probe.repo_package_found:
        lines.append(f"Repository candidate: {probe.repo_version.base}")
    elif package_manager is not None and not args.no_repository and (
        selection.strategy is not Strategy.SKIP
    ):
        lines.append("Repository candidate: package not found")
    lines.append(f"Strategy: {selection.strategy.value} ({selection.reason})")

    if not args.quiet:
        for line in lines:
            print(line)

    if selection.strategy is Strategy.SKIP:
        logger.info("Toolchain is ready")
        return 0

    logger.info("Toolchain needs to be installed; run: provkit install")
    return 1
