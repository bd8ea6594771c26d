"""Autonomous scout agent for Meteora DLMM liquidity positions."""

__version__ = "0.1.0"
