"""Core module - session state, admission gate, VMID allocator, locators."""
from .admission import AdmissionGate
from .allocator import VmidAllocator
from .config import ProviderSettings, load_settings
from .errors import (
    AllocationError, AuthenticationError, ConfigurationError, LocatorParseError, ProviderError,
)
from .locator import ResourceLocator, decode_locator, encode_locator
from .logger import get_logger, setup_logger
from .session import SessionState, configure

__all__ = [
    'AdmissionGate', 'VmidAllocator', 'ProviderSettings', 'load_settings',
    'AllocationError', 'AuthenticationError', 'ConfigurationError', 'LocatorParseError',
    'ProviderError', 'ResourceLocator', 'decode_locator', 'encode_locator',
    'get_logger', 'setup_logger', 'SessionState', 'configure',
]
