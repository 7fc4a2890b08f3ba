# doc/examples/utils/scan_ports.py
"""Example script demonstrating how to use the serial port scanner."""

import logging
from typing import List

from uhf_gen2.utils.serial_scanner import scan_serial_ports, PortInfo

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

def display_ports(ports: List[PortInfo]):
    """Helper function to display port information in a formatted way."""
    if not ports:
        print("  No ports found.")
        return

    print(f"  Found {len(ports)} ports:")
    for p in ports:
        print(f"\n  Device:       {p.device}")
        print(f"    Description:  {p.description}")
        print(f"    HWID:         {p.hwid}")
        if p.vid and p.pid:
             print(f"    VID:PID:      {p.vid:04X}:{p.pid:04X}")
        if p.serial_number:
             print(f"    Serial:       {p.serial_number}")
        if p.manufacturer:
             print(f"    Manufacturer: {p.manufacturer}")
        if p.is_usb_bridge:
             print(f"    USB-UART bridge (likely reader module)")
        if p.error is not None or p.accessible:
            status_str = "Accessible" if p.accessible else f"Not Accessible ({p.error})"
            print(f"    Status:       {status_str}")
        else:
            print(f"    Status:       Access Not Checked")


if __name__ == '__main__':
    print("--- Serial Port Scanner Example ---")

    print("\nScanning ports (with access check, may take a moment)...")
    display_ports(scan_serial_ports(check_access=True))

    print("\nScanning ports (WITHOUT access check)...")
    display_ports(scan_serial_ports(check_access=False))

    print("\n--- Finished ---")
