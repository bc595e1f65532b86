#!/usr/bin/env python3
"""
KYC Registry Entry Point

Starts the FastAPI server with settings taken from KYC_REGISTRY_* variables.
"""

import sys

from kyc_registry.api import run_server


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down KYC registry...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
