"""
CommandRegistry - Explicit command registration

Bounded Context: Annotation session commands (select, rebind_ring, ...)
Responsibilities:
  - Map command names to handlers
  - Reject unknown commands before anything runs
  - Introspection for help output (available_commands, get_help)

Threading: register() takes a lock; lookups read a dict
"""

from typing import Any, Callable, Dict, Optional, Set
import threading


class CommandNotAvailableError(Exception):
    """Raised when attempting to execute an unregistered command"""
    pass


CommandHandler = Callable[[Dict[str, Any]], Any]


class CommandRegistry:
    """
    Registry of session commands.

    Every handler receives the full command payload (a dict, possibly
    empty) and may return a result for the status reply.

    Example:
        registry = CommandRegistry()
        registry.register('select', service.select_point, "Focus a point by lat/lon")
        registry.execute('select', {'command': 'select', 'lat': 2.0, 'lon': 2.0})
    """

    def __init__(self):
        self._commands: Dict[str, CommandHandler] = {}
        self._descriptions: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, command: str, handler: CommandHandler, description: str) -> None:
        """
        Raises:
            ValueError: If command already registered
        """
        with self._lock:
            if command in self._commands:
                raise ValueError(f"Command '{command}' already registered")

            self._commands[command] = handler
            self._descriptions[command] = description

    def execute(self, command: str, command_data: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run a registered command.

        Raises:
            CommandNotAvailableError: If command not registered
        """
        if command not in self._commands:
            raise CommandNotAvailableError(
                f"Command '{command}' not available. "
                f"Available commands: {', '.join(sorted(self.available_commands))}"
            )

        return self._commands[command](command_data or {})

    def is_available(self, command: str) -> bool:
        return command in self._commands

    @property
    def available_commands(self) -> Set[str]:
        return set(self._commands.keys())

    def get_help(self) -> Dict[str, str]:
        return dict(self._descriptions)

    def count(self) -> int:
        return len(self._commands)
