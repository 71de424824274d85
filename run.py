#!/usr/bin/env python3
"""
GIC Ledger API Entry Point

Starts the FastAPI server (port 8090 unless GIC_LEDGER_API_PORT is set).
"""

import sys

from gic_ledger.api import run_server
from gic_ledger.config import get_config
from gic_ledger.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    setup_logging(level=config.log_level, fmt=config.log_format, log_file=config.log_file)

    print("Starting GIC Ledger API...")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(config=config)
    except KeyboardInterrupt:
        print("\nShutting down GIC Ledger API...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
