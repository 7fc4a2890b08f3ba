# doc/examples/example_connect_read.py

import asyncio
import logging

from uhf_gen2.core.reader import Reader
from uhf_gen2.protocols.types import TagInfo
from uhf_gen2.transport.serial_async import SerialTransport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger("ConnectReadExample")

# --- Configuration ---
# Change to match your setup
SERIAL_PORT = 'COM3'  # Windows. On Linux usually '/dev/ttyUSB0'.
SERIAL_BAUD_RATE = 115200
POLL_SECONDS = 10


async def tag_callback(tag: TagInfo):
    """Called once for every tag frame the reader sends."""
    logger.info(f"  TAG read: EPC={tag.epc}, RSSI={tag.rssi}")


async def main():
    transport = SerialTransport({'port': SERIAL_PORT, 'baudrate': SERIAL_BAUD_RATE})
    reader = Reader(transport)

    try:
        logger.info("Connecting to reader...")
        await reader.connect()

        version = await reader.get_firmware_version()
        logger.info(f"Firmware version: {version}")

        # --- One-shot inventory ---
        tag = await reader.single_poll()
        logger.info(f"Single poll: {tag.epc if tag else 'no tag in field'}")

        # --- Bounded inventory ---
        tags = await reader.multiple_poll(100)
        unique = set(tags)
        logger.info(f"100 rounds: {len(tags)} reads, {len(unique)} unique tags")

        # --- Timed inventory with a callback ---
        logger.info(f"Reading tags for {POLL_SECONDS} seconds...")
        count = await reader.poll_for_duration_with_callback(POLL_SECONDS, tag_callback)
        logger.info(f"Timed poll finished, {count} tag reads.")

    except Exception as e:
        logger.exception(f"An error occurred: {e}")
    finally:
        logger.info("Disconnecting from reader...")
        await reader.disconnect()
        logger.info("Connection closed.")

if __name__ == "__main__":
    asyncio.run(main())
