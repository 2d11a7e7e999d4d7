"""
pmprovider Connectivity Check
=============================

Usage::

    # Credentials from PM_API_URL / PM_USER / PM_PASS
    python -m pmprovider

    # Settings file, verbose
    python -m pmprovider --config config/provider.yaml --log-level DEBUG

    # Also allocate one VMID and print it
    python -m pmprovider --next-id
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .core.config import load_settings
from .core.errors import ProviderError
from .core.logger import setup_logger
from .core.session import configure


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m pmprovider",
        description="Log in to Proxmox and report the provider session settings",
    )
    p.add_argument("--config", metavar="PATH", help="YAML settings file (default: $PM_CONFIG)")
    p.add_argument("--parallel", type=int, help="Override pm_parallel")
    p.add_argument("--insecure", action="store_true", default=None,
                   help="Skip TLS certificate verification")
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        metavar="LEVEL",
        help="Console log level",
    )
    p.add_argument("--next-id", action="store_true", help="Allocate and print one VMID")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logger(level=args.log_level)
    try:
        settings = load_settings(
            args.config,
            overrides={"pm_parallel": args.parallel, "pm_tls_insecure": args.insecure},
        )
        state = configure(settings)
        print(f"Connected to {state.client.base_url} as {settings.user}")
        print(f"  max concurrent operations: {state.max_concurrent}")
        if args.next_id:
            print(f"  next VMID: {state.allocator.next_id()}")
    except ProviderError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
