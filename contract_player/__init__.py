"""Starknet Contract Player.

Declares, deploys and load-tests a contract class against a Starknet node.
"""

__version__ = "0.1.0"
