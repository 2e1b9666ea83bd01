"""
Solcerer Monitor
================

Polls tracked X accounts, token prices and on-chain transfers and posts new
events to Discord.
"""

__version__ = "1.0.0"
