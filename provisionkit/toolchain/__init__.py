"""
Toolchain provisioning for ProvisionKit.

This module provides functionality for:
- Probing the installed toolchain and package repository
- Selecting an installation strategy
- Acquiring the toolchain manager with fallback
- Initializing the default toolchain
"""

from provisionkit.toolchain.acquisition import (
    AcquisitionSource,
    AttemptOutcome,
    CurlFetcher,
    HttpFetcher,
    NetworkBootstrapAcquisition,
    PackageManagerAcquisition,
    ScriptFetcher,
    WgetFetcher,
    wait_for_executable,
)
from provisionkit.toolchain.executor import InstallExecutor
from provisionkit.toolchain.initializer import (
    InitializationReport,
    InitState,
    ToolchainInitializer,
)
from provisionkit.toolchain.probe import (
    ProbeResult,
    RepositoryCandidate,
    ToolchainProbe,
    parse_compiler_version,
)
from provisionkit.toolchain.selector import Selection, Strategy, select_strategy

__all__ = [
    # Probe
    "ToolchainProbe",
    "ProbeResult",
    "RepositoryCandidate",
    "parse_compiler_version",
    # Selector
    "Strategy",
    "Selection",
    "select_strategy",
    # Acquisition
    "AttemptOutcome",
    "AcquisitionSource",
    "PackageManagerAcquisition",
    "NetworkBootstrapAcquisition",
    "ScriptFetcher",
    "WgetFetcher",
    "CurlFetcher",
    "HttpFetcher",
    "wait_for_executable",
    # Executor
    "InstallExecutor",
    # Initializer
    "ToolchainInitializer",
    "InitState",
    "InitializationReport",
]
