"""
Automation Module

This module provides the STK connection, Connect command descriptors and
the scoped automation session.
"""

from .connection import ConnectionFailure, StkConnection, connect
from .commands import ConnectCommand
from .session import StkInterfaces, StkSession

__all__ = ["ConnectionFailure", "StkConnection", "connect", "ConnectCommand",
           "StkInterfaces", "StkSession"]
