"""Framework-specific environment adapters.

Each supported framework is one row in the registry; the adapter turns that
row into settings-file provisioning, docroot defaults and files import.
"""

from src.frameworks.adapter import FrameworkAdapter, ProvisionResult, adapter_for
from src.frameworks.registry import FrameworkSpec, framework_spec

__all__ = [
    "FrameworkAdapter",
    "FrameworkSpec",
    "ProvisionResult",
    "adapter_for",
    "framework_spec",
]
