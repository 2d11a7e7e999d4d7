"""Connectors module - hypervisor API clients."""
from .proxmox_rest import MIN_VMID, ProxmoxAPIError, ProxmoxRestClient, RetryConfig

__all__ = ['MIN_VMID', 'ProxmoxAPIError', 'ProxmoxRestClient', 'RetryConfig']
