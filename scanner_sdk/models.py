"""Data models for scanner state.

ScannerStatus is the single mutable snapshot of device state. It is created
once, mutated in place by the status decoder, and copied with snapshot()
before being handed to readers on another thread.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# Reserved bridge return values. Device output never takes these forms.
TIMEOUT = "TIMEOUT"
DISCONNECTED = "DISCONNECTED"

SENTINELS = frozenset({TIMEOUT, DISCONNECTED})


def is_sentinel(response: str) -> bool:
    """Return True if a bridge response is TIMEOUT or DISCONNECTED."""
    return response in SENTINELS


class ScreenKind(Enum):
    """Value of the V_Screen attribute on the ScannerInfo root.

    UNKNOWN covers any value the decoder does not recognise; it is decoded
    with the conventional-scan extraction.
    """
    CONVENTIONAL_SCAN = "conventional_scan"
    TRUNK_SCAN = "trunk_scan"
    CUSTOM_WITH_SCAN = "custom_with_scan"
    CCHITS_WITH_SCAN = "cchits_with_scan"
    CUSTOM_SEARCH = "custom_search"
    QUICK_SEARCH = "quick_search"
    CLOSE_CALL = "close_call"
    CC_SEARCHING = "cc_searching"
    TONE_OUT = "tone_out"
    WX_ALERT = "wx_alert"
    REPEATER_FIND = "repeater_find"
    REVERSE_FREQUENCY = "reverse_frequency"
    DIRECT_ENTRY = "direct_entry"
    DISCOVERY_CONVENTIONAL = "discovery_conventional"
    DISCOVERY_TRUNKING = "discovery_trunking"
    ANALYZE_SYSTEM_STATUS = "analyze_system_status"
    ANALYZE = "analyze"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: str) -> ScreenKind:
        """Map a raw V_Screen string to a ScreenKind, UNKNOWN if unrecognised."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class ScannerStatus:
    """Mutable snapshot of scanner state.

    Every field has a display default so a reader never sees an undefined
    value, even before the first successful decode.

    Attributes:
        mode: Mode attribute of the status document (e.g. "Scan")
        screen_kind: Raw V_Screen attribute (e.g. "trunk_scan")
        monitor_list_name: Active monitor/favorites list
        system_name: System, or "SCANNING" when none is active
        department_name: Department within the system
        site_name: Trunked site
        channel_name: Channel or talkgroup name
        frequency_mhz: Current frequency in MHz
        modulation: Modulation (FM, NFM, AM, P25...)
        talkgroup_id: Trunked talkgroup ID, stored as the device sent it
        unit_id: Transmitting radio unit ID
        service_type: Service type label
        tone_a: First tone-out tone
        tone_b: Second tone-out tone
        range_lower: Lower edge of the active search range
        range_upper: Upper edge of the active search range
        hit_count: Discovery hit count
        rssi_label: Signal strength for display ("S0".."S5")
        rssi_numeric: Signal strength for threshold comparisons
        volume: Volume level
        squelch: Squelch level
        mute: "Mute" or "Unmute"
        attenuator: "On" or "Off"
        alert_led: Alert LED state
        p25_status: P25 decode status
        hold: Channel hold state
        recording: Recording state
        last_command_sent: Breadcrumb of the last poll outcome
    """
    mode: str = "---"
    screen_kind: str = "---"

    monitor_list_name: str = "---"
    system_name: str = "SCANNING"
    department_name: str = "..."
    site_name: str = "---"
    channel_name: str = "..."

    frequency_mhz: float = 0.0
    modulation: str = "---"

    talkgroup_id: str = "---"
    unit_id: str = "---"
    service_type: str = "---"

    tone_a: str = "---"
    tone_b: str = "---"

    range_lower: str = "---"
    range_upper: str = "---"
    hit_count: int = 0

    rssi_label: str = "S0"
    rssi_numeric: int = 0
    volume: int = 0
    squelch: int = 0
    mute: str = "Unmute"
    attenuator: str = "Off"
    alert_led: str = "Off"
    p25_status: str = "---"
    hold: str = "Off"
    recording: str = "Off"

    last_command_sent: str = "None"

    @property
    def frequency_display(self) -> str:
        """Frequency formatted with four decimals, as the device shows it."""
        return f"{self.frequency_mhz:.4f}"

    def snapshot(self) -> ScannerStatus:
        """Return an independent copy for readers on another loop."""
        return dataclasses.replace(self)

    def copy_from(self, other: ScannerStatus) -> None:
        """Overwrite every field with the values from another status."""
        for field in dataclasses.fields(self):
            setattr(self, field.name, getattr(other, field.name))


# Command types

class KeyMode(Enum):
    """Key action for KEY commands."""
    PRESS = "P"
    LONG_PRESS = "L"
    HOLD = "H"
    RELEASE = "R"


@dataclass(frozen=True)
class ModelQuery:
    """Query the model name (MDL). Also used as the liveness probe."""
    pass


@dataclass(frozen=True)
class StatusQuery:
    """Request the full status document (GSI).

    Attributes:
        mode: GSI argument; 0 requests a one-shot status document
    """
    mode: int = 0


@dataclass(frozen=True)
class KeyPress:
    """Simulate a front-panel key.

    Attributes:
        code: Single-character key code (e.g. "M", "1", "^")
        mode: Press, long press, hold or release
    """
    code: str
    mode: KeyMode = KeyMode.PRESS


@dataclass(frozen=True)
class MuteCommand:
    """Mute or unmute audio (MUT).

    Attributes:
        muted: True for MUT,ON
    """
    muted: bool


@dataclass(frozen=True)
class RecordCommand:
    """Start or stop recording (REC).

    Attributes:
        recording: True for REC,ON
    """
    recording: bool


@dataclass(frozen=True)
class FrequencyEntry:
    """Direct frequency entry (FRE).

    Attributes:
        frequency_mhz: Target frequency in MHz
    """
    frequency_mhz: float


@dataclass(frozen=True)
class ListQuery:
    """Request a favorites/system/department list (GLT).

    Replies to this command span several UDP datagrams.

    Attributes:
        list_type: List selector (e.g. "FL", "SYS", "DEPT")
        index: Optional parent index for nested lists
    """
    list_type: str = "FL"
    index: Optional[int] = None


# Union type for all commands
Command = Union[
    ModelQuery,
    StatusQuery,
    KeyPress,
    MuteCommand,
    RecordCommand,
    FrequencyEntry,
    ListQuery,
]
