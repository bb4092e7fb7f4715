"""A small proof-of-work blockchain with a node and a solo miner."""

__version__ = "0.1.0"