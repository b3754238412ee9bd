"""
Helpers for the functional tests: base test class, runtime and log tagging.
"""

from .base_test import ElectrumTest
from .runtime import TestRuntimeWithLogging

__all__ = [
    "ElectrumTest",
    "TestRuntimeWithLogging",
]
