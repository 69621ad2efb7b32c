"""
Transport layer for running commands and touching files.

Provides abstraction for:
- Local command execution
- File reads and writes
"""

from vhost.transport.base import Transport
from vhost.transport.local import LocalTransport

__all__ = ["Transport", "LocalTransport"]
