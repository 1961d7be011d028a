"""
Test utilities for ProvisionKit testing.
"""

from .mocks import FakeRunner, apt_policy_output

__all__ = ["FakeRunner", "apt_policy_output"]
