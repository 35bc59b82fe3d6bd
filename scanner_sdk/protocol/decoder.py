"""Status decoder for GSI/PSI ScannerInfo documents.

Turns a raw response payload into updates on a ScannerStatus. Decoding is
all-or-nothing: the document is applied to a working copy and committed only
when every step succeeds, so a failed decode leaves the caller's status
exactly as it was.

Document shape (after the envelope is stripped):

    <ScannerInfo Mode="Scan" V_Screen="trunk_scan">
      <System Name="..."/> <Department Name="..."/> <Site Name="..." Mod="..."/>
      <TGID Name="..." TGID="..." U_Id="..."/> <SiteFrequency Freq="..."/>
      <Property Rssi="3" VOL="15" SQL="10" Mute="Unmute" Att="Off" Rec="Off"/>
      <MonitorList Name="..."/>
    </ScannerInfo>

All data is carried in attributes. Which child elements appear depends on
the V_Screen screen kind.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from ..models import ScannerStatus, ScreenKind
from .commands import STATUS_CLOSING_TAG
from .xml_helpers import attr, extract_xml_payload, parse_frequency, parse_int

logger = logging.getLogger(__name__)

ROOT_TAG = "ScannerInfo"


class DecodeError(Enum):
    """Why a payload could not be decoded."""
    EMPTY = "empty"
    NO_XML = "no_xml"
    INCOMPLETE = "incomplete"
    MALFORMED = "malformed"
    WRONG_ROOT = "wrong_root"
    EXTRACTION = "extraction"


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of a decode.

    Attributes:
        error: None on success, otherwise the failure kind
        detail: Human-readable detail for logs
    """
    error: Optional[DecodeError] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> DecodeResult:
        return cls()

    @classmethod
    def failure(cls, error: DecodeError, detail: str = "") -> DecodeResult:
        return cls(error=error, detail=detail)


Extractor = Callable[[Element, ScannerStatus], None]


class StatusDecoder:
    """Decodes ScannerInfo documents into a ScannerStatus.

    Each screen kind maps to one extraction routine; unknown kinds use the
    conventional-scan routine. Property and MonitorList are read for every
    kind.

    Example:
        >>> decoder = StatusDecoder()
        >>> status = ScannerStatus()
        >>> decoder.decode(status, gsi_response).ok
        True
    """

    def __init__(self):
        self._extractors: Dict[ScreenKind, Extractor] = {
            ScreenKind.CONVENTIONAL_SCAN: self._conventional_scan,
            ScreenKind.TRUNK_SCAN: self._trunk_scan,
            ScreenKind.CUSTOM_WITH_SCAN: self._custom_with_scan,
            ScreenKind.CCHITS_WITH_SCAN: self._cchits_with_scan,
            ScreenKind.CUSTOM_SEARCH: self._search,
            ScreenKind.QUICK_SEARCH: self._search,
            ScreenKind.CLOSE_CALL: self._search,
            ScreenKind.CC_SEARCHING: self._search,
            ScreenKind.TONE_OUT: self._tone_out,
            ScreenKind.WX_ALERT: self._weather,
            ScreenKind.REPEATER_FIND: self._search_frequency,
            ScreenKind.REVERSE_FREQUENCY: self._search_frequency,
            ScreenKind.DIRECT_ENTRY: self._search_frequency,
            ScreenKind.DISCOVERY_CONVENTIONAL: self._discovery_conventional,
            ScreenKind.DISCOVERY_TRUNKING: self._discovery_trunking,
            ScreenKind.ANALYZE_SYSTEM_STATUS: self._analyze_system_status,
            ScreenKind.ANALYZE: self._waterfall,
            ScreenKind.UNKNOWN: self._conventional_scan,
        }

    def decode(self, status: ScannerStatus, raw_data: str) -> DecodeResult:
        """Decode a raw response and update status in place.

        Args:
            status: Status record to update
            raw_data: Response payload, with or without the "<cmd>,<XML>," envelope

        Returns:
            DecodeResult; on failure status is unchanged
        """
        if not raw_data or not raw_data.strip():
            return DecodeResult.failure(DecodeError.EMPTY)

        xml_text = extract_xml_payload(raw_data)
        if xml_text is None:
            return DecodeResult.failure(DecodeError.NO_XML, raw_data[:40])

        # Reject partially received documents before parsing
        if STATUS_CLOSING_TAG not in xml_text:
            return DecodeResult.failure(DecodeError.INCOMPLETE)

        try:
            root = ElementTree.fromstring(xml_text)
        except ElementTree.ParseError as e:
            return DecodeResult.failure(DecodeError.MALFORMED, str(e))

        if root.tag != ROOT_TAG:
            return DecodeResult.failure(DecodeError.WRONG_ROOT, root.tag)

        working = status.snapshot()
        try:
            self._apply(root, working)
        except Exception as e:
            logger.error(f"Error extracting status: {e}")
            return DecodeResult.failure(DecodeError.EXTRACTION, str(e))

        status.copy_from(working)
        return DecodeResult.success()

    def _apply(self, root: Element, s: ScannerStatus) -> None:
        s.mode = attr(root, "Mode")
        s.screen_kind = attr(root, "V_Screen")

        kind = ScreenKind.from_value(s.screen_kind)
        self._extractors[kind](root, s)

        # Present for every screen kind
        self._property(root, s)
        self._monitor_list(root, s)

    # -- Screen-kind extractors ------------------------------------------------

    def _conventional_scan(self, root: Element, s: ScannerStatus) -> None:
        """conventional_scan: System, Department, ConvFrequency"""
        self._system(root, s)
        self._department(root, s)
        freq = root.find("ConvFrequency")
        if freq is not None:
            s.channel_name = attr(freq, "Name")
            s.modulation = attr(freq, "Mod")
            s.service_type = attr(freq, "SvcType")
            s.hold = attr(freq, "Hold", "Off")
            self._set_frequency(s, attr(freq, "Freq"))

    def _trunk_scan(self, root: Element, s: ScannerStatus) -> None:
        """trunk_scan: System, Department, Site, TGID, SiteFrequency"""
        self._system(root, s)
        self._department(root, s)

        site = root.find("Site")
        if site is not None:
            s.site_name = attr(site, "Name")
            s.modulation = attr(site, "Mod")

        # TGID="TGID" is a known device artifact; it is kept as-is here.
        tgid = root.find("TGID")
        if tgid is not None:
            s.channel_name = attr(tgid, "Name")
            s.talkgroup_id = attr(tgid, "TGID")
            s.unit_id = attr(tgid, "U_Id")
            s.service_type = attr(tgid, "SvcType")
            s.hold = attr(tgid, "Hold", "Off")

        site_freq = root.find("SiteFrequency")
        if site_freq is not None:
            self._set_frequency(s, attr(site_freq, "Freq"))

    def _custom_with_scan(self, root: Element, s: ScannerStatus) -> None:
        """custom_with_scan: System, Department, SrchFrequency, SearchRange"""
        self._system(root, s)
        self._department(root, s)
        self._search(root, s)

    def _cchits_with_scan(self, root: Element, s: ScannerStatus) -> None:
        """cchits_with_scan: System, Department, CcHitsChannel"""
        self._system(root, s)
        self._department(root, s)
        channel = root.find("CcHitsChannel")
        if channel is not None:
            self._channel(channel, s)

    def _search(self, root: Element, s: ScannerStatus) -> None:
        """custom_search, quick_search, close_call: SrchFrequency, SearchRange"""
        self._search_frequency(root, s)
        search_range = root.find("SearchRange")
        if search_range is not None:
            s.range_lower = attr(search_range, "Lower")
            s.range_upper = attr(search_range, "Upper")

    def _search_frequency(self, root: Element, s: ScannerStatus) -> None:
        """repeater_find, reverse_frequency, direct_entry: SrchFrequency"""
        freq = root.find("SrchFrequency")
        if freq is not None:
            s.modulation = attr(freq, "Mod")
            self._set_frequency(s, attr(freq, "Freq"))

    def _tone_out(self, root: Element, s: ScannerStatus) -> None:
        channel = root.find("ToneOutChannel")
        if channel is not None:
            self._channel(channel, s)
            s.tone_a = attr(channel, "ToneA")
            s.tone_b = attr(channel, "ToneB")

    def _weather(self, root: Element, s: ScannerStatus) -> None:
        channel = root.find("WxChannel")
        if channel is not None:
            self._channel(channel, s)

    def _discovery_conventional(self, root: Element, s: ScannerStatus) -> None:
        disc = root.find("ConventionalDiscovery")
        if disc is None:
            return
        s.modulation = attr(disc, "Mod")
        s.range_lower = attr(disc, "Lower")
        s.range_upper = attr(disc, "Upper")
        s.talkgroup_id = attr(disc, "TGID")
        s.unit_id = attr(disc, "U_Id")
        self._set_frequency(s, attr(disc, "Freq"))
        self._set_hit_count(s, disc)

    def _discovery_trunking(self, root: Element, s: ScannerStatus) -> None:
        disc = root.find("TrunkingDiscovery")
        if disc is None:
            return
        s.system_name = attr(disc, "SystemName", "SCANNING")
        s.site_name = attr(disc, "SiteName")
        s.talkgroup_id = attr(disc, "TGID")
        s.channel_name = attr(disc, "TgidName")
        s.unit_id = attr(disc, "U_Id")
        self._set_hit_count(s, disc)

    def _analyze_system_status(self, root: Element, s: ScannerStatus) -> None:
        system_status = root.find("SystemStatus")
        if system_status is not None:
            s.system_name = attr(system_status, "SystemName", "SCANNING")
            s.site_name = attr(system_status, "SiteName")
            s.attenuator = attr(system_status, "Att", "Off")
            s.p25_status = attr(system_status, "P25Status")

    def _waterfall(self, root: Element, s: ScannerStatus) -> None:
        """analyze: Analyze, WaterfallBand"""
        analyze = root.find("Analyze")
        if analyze is not None:
            s.system_name = attr(analyze, "SystemName", "SCANNING")
            s.site_name = attr(analyze, "SiteName")
            s.channel_name = attr(analyze, "Msg1")

        band = root.find("WaterfallBand")
        if band is not None:
            s.range_lower = attr(band, "Lower")
            s.range_upper = attr(band, "Upper")
            s.modulation = attr(band, "Mod")
            self._set_frequency(s, attr(band, "Center"))

    # -- Shared elements -------------------------------------------------------

    @staticmethod
    def _system(root: Element, s: ScannerStatus) -> None:
        system = root.find("System")
        if system is not None:
            s.system_name = attr(system, "Name", "SCANNING")

    @staticmethod
    def _department(root: Element, s: ScannerStatus) -> None:
        department = root.find("Department")
        if department is not None:
            s.department_name = attr(department, "Name", "...")

    def _channel(self, channel: Element, s: ScannerStatus) -> None:
        s.channel_name = attr(channel, "Name")
        s.modulation = attr(channel, "Mod")
        s.hold = attr(channel, "Hold", "Off")
        self._set_frequency(s, attr(channel, "Freq"))

    @staticmethod
    def _monitor_list(root: Element, s: ScannerStatus) -> None:
        monitor_list = root.find("MonitorList")
        if monitor_list is not None:
            s.monitor_list_name = attr(monitor_list, "Name")

    @staticmethod
    def _property(root: Element, s: ScannerStatus) -> None:
        prop = root.find("Property")
        if prop is None:
            return

        # RSSI kept as a display label and as a number for thresholds
        rssi_raw = prop.get("Rssi", "0")
        s.rssi_label = f"S{rssi_raw}" if rssi_raw else "S0"
        rssi = parse_int(rssi_raw)
        if rssi is not None:
            s.rssi_numeric = rssi

        s.mute = attr(prop, "Mute", "Unmute")
        s.attenuator = attr(prop, "Att", "Off")
        s.alert_led = attr(prop, "A_Led", "Off")
        s.p25_status = attr(prop, "P25Status")
        s.recording = attr(prop, "Rec", "Off")

        volume = parse_int(prop.get("VOL"))
        if volume is not None:
            s.volume = volume
        squelch = parse_int(prop.get("SQL"))
        if squelch is not None:
            s.squelch = squelch

    @staticmethod
    def _set_frequency(s: ScannerStatus, raw: str) -> None:
        frequency = parse_frequency(raw)
        if frequency is not None:
            s.frequency_mhz = frequency

    @staticmethod
    def _set_hit_count(s: ScannerStatus, element: Element) -> None:
        hits = parse_int(element.get("HitCount"))
        if hits is not None:
            s.hit_count = hits


_default_decoder = StatusDecoder()


def update_status(status: ScannerStatus, raw_data: str) -> bool:
    """Decode raw_data into status; True on success, status untouched on failure."""
    return _default_decoder.decode(status, raw_data).ok
