"""
Command Services

- script_runner.py - Run one script with a timeout
- dispatcher.py - Map commands to scripts, one run per command at a time
"""

from .dispatcher import CommandDispatcher, CommandKind, CommandOutcome
from .script_runner import ScriptResult, ScriptRunner

__all__ = [
    "CommandDispatcher",
    "CommandKind",
    "CommandOutcome",
    "ScriptResult",
    "ScriptRunner",
]
