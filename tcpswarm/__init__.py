"""
tcpswarm - TCP Heartbeat Load Generator

Opens many concurrent TCP sessions against one target, staggers their
start, and keeps each one busy with an independent read/write duty cycle.

Architecture:
- Each module is self-contained with clear interfaces
- Sessions never share connections, buffers or counters
- The launcher is the only component that knows about more than one session

Modules:
- session: One connection with its reader task and heartbeat writer
- launcher: Staggered fan-out of sessions and completion tracking
- echo: Local TCP listener used as a load target and in tests
"""

__version__ = "1.0.0"
