"""
pmprovider - Proxmox provider coordination core
===============================================

Shared session state, a bounded admission gate and a monotonic VMID
allocator for tools that drive many concurrent Proxmox VM operations.
"""

__version__ = "0.1.0"

from .core import (
    AllocationError,
    AuthenticationError,
    ConfigurationError,
    LocatorParseError,
    ProviderError,
    ProviderSettings,
    ResourceLocator,
    SessionState,
    configure,
    decode_locator,
    encode_locator,
    load_settings,
)

__all__ = [
    'AllocationError', 'AuthenticationError', 'ConfigurationError', 'LocatorParseError',
    'ProviderError', 'ProviderSettings', 'ResourceLocator', 'SessionState', 'configure',
    'decode_locator', 'encode_locator', 'load_settings',
]
