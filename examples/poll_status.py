#!/usr/bin/env python3
"""
Status Polling Script.

Connects to a scanner over UDP or serial and prints the decoded status
once per poll cycle until interrupted.

Usage:
    python examples/poll_status.py udp 192.168.1.50
    python examples/poll_status.py serial /dev/ttyACM0
"""

import sys
import time
import logging
from pathlib import Path

# Add SDK to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scanner_sdk import (
    ModelQuery,
    PollOutcome,
    ResponseHandler,
    ScannerStatus,
    StatusPoller,
    TransportKind,
    create_bridge,
)
from scanner_sdk.bridge.serial import DEFAULT_BAUDRATE
from scanner_sdk.bridge.udp import DEFAULT_UDP_PORT

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        return

    kind = TransportKind(sys.argv[1].lower())
    target = sys.argv[2]
    port_or_baud = DEFAULT_UDP_PORT if kind is TransportKind.UDP else DEFAULT_BAUDRATE

    with create_bridge(kind) as bridge:
        print(f"Connecting to {target} over {kind.value}...")
        if not bridge.connect(target, port_or_baud):
            print("Failed to connect! Is the scanner on and reachable?")
            return

        print(f"Model: {bridge.query(ModelQuery())}")

        status = ScannerStatus()
        handler = ResponseHandler(status)
        handler.attach(bridge)
        poller = StatusPoller(bridge, status, handler=handler)

        print("\nPolling status (Ctrl+C to stop)...")
        try:
            while True:
                outcome, snap = poller.poll_once()
                if outcome is PollOutcome.UPDATED:
                    print(f"\r{snap.system_name:<20} {snap.channel_name:<20} "
                          f"{snap.frequency_display} MHz {snap.modulation:<4} "
                          f"TGID {snap.talkgroup_id:<8} {snap.rssi_label}   ", end="")
                else:
                    print(f"\r[{outcome.value}]" + " " * 60, end="")
                time.sleep(0.1)
        except KeyboardInterrupt:
            print("\n\nStopping...")
        finally:
            handler.detach()

    print("Done.")


if __name__ == "__main__":
    main()
