"""
Entry point for running guardian-admin as a module.

Usage:
    python -m cli status
    python -m cli login
    python -m cli setup connect --name alice --leader-url ws://leader:18174
    python -m cli start-consensus
"""

import asyncio
from .commands import main


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
