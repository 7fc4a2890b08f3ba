# uhf_gen2/utils/serial_scanner.py
"""Lists serial ports that may have a reader module attached."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import serial
import serial.tools.list_ports

logger = logging.getLogger(__name__)

# USB-UART bridges commonly found on reader modules: CH340, CP210x, FT232, PL2303
KNOWN_BRIDGE_VIDS = {0x1A86, 0x10C4, 0x0403, 0x067B}


@dataclass
class PortInfo:
    """A detected serial port."""
    device: str                   # e.g. COM3, /dev/ttyUSB0
    description: str
    hwid: str
    vid: Optional[int] = None
    pid: Optional[int] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    accessible: bool = False      # Port could be opened
    error: Optional[str] = None   # Why opening failed

    @property
    def is_usb_bridge(self) -> bool:
        """True for USB-UART chips typically used on reader boards."""
        return self.vid in KNOWN_BRIDGE_VIDS


def _check_port_access(device: str, baudrate: int) -> tuple[bool, Optional[str]]:
    try:
        port = serial.Serial(port=device, baudrate=baudrate, timeout=0.1)
        port.close()
        return True, None
    except serial.SerialException as e:
        err_msg = str(e)
        if "Permission denied" in err_msg or "Access is denied" in err_msg:
            return False, "Permission denied"
        if "busy" in err_msg.lower():
            return False, "Busy"
        logger.debug(f"SerialException checking port {device}: {e}")
        return False, f"Cannot open ({type(e).__name__})"
    except OSError as e:
        return False, f"Cannot open ({e.strerror or type(e).__name__})"


def _optional_str(value) -> Optional[str]:
    return str(value) if value is not None else None


def scan_serial_ports(check_access: bool = True, baudrate: int = 115200) -> List[PortInfo]:
    """
    Scans the system's serial ports.

    Args:
        check_access: Briefly open each port to find out whether it is usable.
        baudrate: Rate used for the access check.

    Returns:
        A list of PortInfo, USB-UART bridges first.
    """
    ports: List[PortInfo] = []
    for port in serial.tools.list_ports.comports():
        logger.debug(f"Found port: {port.device}")
        info = PortInfo(
            device=str(port.device),
            description=_optional_str(port.description) or "",
            hwid=_optional_str(port.hwid) or "",
            vid=port.vid,
            pid=port.pid,
            serial_number=_optional_str(port.serial_number),
            manufacturer=_optional_str(port.manufacturer),
        )
        if check_access:
            info.accessible, info.error = _check_port_access(info.device, baudrate)
            logger.debug(f"Access check for {info.device}: Accessible={info.accessible}, Error={info.error}")
        ports.append(info)

    ports.sort(key=lambda p: (not p.is_usb_bridge, p.device))
    logger.info(f"Scan complete. Found {len(ports)} ports.")
    return ports
