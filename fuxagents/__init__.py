"""Asyncio multi-agent runtime: agent pool, message bus, health monitoring and resource limits."""

__version__ = "0.1.0"