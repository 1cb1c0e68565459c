"""
Launcher Module - Black Box Interface

Purpose: Fan out N independent sessions against one target
Interface: Launcher.launch(), Launcher.stop()
Hidden: Spawn staggering, task bookkeeping, completion counting

The launcher never looks at session outcomes; it only waits for them to end.
"""

from .launcher import CompletionCounter, Launcher

__all__ = ["CompletionCounter", "Launcher"]
