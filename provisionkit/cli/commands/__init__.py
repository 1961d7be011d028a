"""
CLI command implementations for ProvisionKit.

Each module exposes ``run(args) -> int``.
"""
