"""Protocol serializer for scanner commands.

Converts command objects to remote-control protocol strings.
Pure functions with no side effects.
"""
from __future__ import annotations

from ..errors import CommandError
from ..models import (
    Command,
    ModelQuery,
    StatusQuery,
    KeyPress,
    MuteCommand,
    RecordCommand,
    FrequencyEntry,
    ListQuery,
)


class CommandSerializer:
    """Serializer for the scanner remote command protocol.

    Produces the command text only; normalization and the trailing carriage
    return are added by the bridge.
    """

    @staticmethod
    def serialize_command(command: Command) -> str:
        """Convert a command object to a protocol string.

        Args:
            command: Command object to serialize

        Returns:
            Protocol string ready to pass to a bridge

        Raises:
            CommandError: If the command type is unknown or its fields are invalid

        Examples:
            >>> CommandSerializer.serialize_command(KeyPress(code="M"))
            'KEY,M,P'
            >>> CommandSerializer.serialize_command(FrequencyEntry(154.28))
            'FRE,154.2800'
        """
        if isinstance(command, ModelQuery):
            return "MDL"
        elif isinstance(command, StatusQuery):
            return f"GSI,{command.mode}"
        elif isinstance(command, KeyPress):
            return CommandSerializer._serialize_key(command)
        elif isinstance(command, MuteCommand):
            return "MUT,ON" if command.muted else "MUT,OFF"
        elif isinstance(command, RecordCommand):
            return "REC,ON" if command.recording else "REC,OFF"
        elif isinstance(command, FrequencyEntry):
            return CommandSerializer._serialize_frequency(command)
        elif isinstance(command, ListQuery):
            return CommandSerializer._serialize_list(command)
        else:
            raise CommandError(f"Unknown command type: {type(command)}")

    @staticmethod
    def _serialize_key(cmd: KeyPress) -> str:
        """Serialize KeyPress.

        Protocol: KEY,<code>,<P|L|H|R>
        """
        code = cmd.code
        if len(code) != 1 or code == "," or not code.isprintable() or code.isspace():
            raise CommandError(f"Invalid key code: {code!r}")
        return f"KEY,{code.upper()},{cmd.mode.value}"

    @staticmethod
    def _serialize_frequency(cmd: FrequencyEntry) -> str:
        """Serialize FrequencyEntry.

        Protocol: FRE,<MHz with four decimals>
        """
        if cmd.frequency_mhz <= 0:
            raise CommandError(f"Invalid frequency: {cmd.frequency_mhz}")
        return f"FRE,{cmd.frequency_mhz:.4f}"

    @staticmethod
    def _serialize_list(cmd: ListQuery) -> str:
        """Serialize ListQuery.

        Protocol: GLT,<type>[,<index>]
        """
        if not cmd.list_type or "," in cmd.list_type:
            raise CommandError(f"Invalid list type: {cmd.list_type!r}")
        if cmd.index is None:
            return f"GLT,{cmd.list_type}"
        return f"GLT,{cmd.list_type},{cmd.index}"


def serialize_command(command: Command) -> str:
    """Module-level shortcut for CommandSerializer.serialize_command."""
    return CommandSerializer.serialize_command(command)
