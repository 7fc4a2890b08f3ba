# examples/identify_tag_example.py
import asyncio
import logging

from uhf_gen2.core.config import ReaderConfig
from uhf_gen2.core.reader import Reader
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols.framing import build_frame
from uhf_gen2.transport import MockTransport
from uhf_gen2.utils.tag_utils import identify_tag

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def tid_reply(tid: bytes) -> bytes:
    """The frame a module sends back for a successful TID read."""
    return build_frame(const.CMD_READ_TAG_DATA, tid, frame_type=const.FRAME_TYPE_TAG)


async def main():
    # --- Setup Reader with MockTransport ---
    # MockTransport allows simulating reader responses without real hardware.
    transport = MockTransport()
    transport.add_responses([
        tid_reply(bytes.fromhex("E2801105")), # Impinj Monza R6 (MDID 0x801 with XTID bit, TMN 0x105)
        tid_reply(bytes.fromhex("E2003412")), # Alien Higgs-3 (MDID 0x003, TMN 0x412)
        build_frame(const.CMD_READ_TAG_DATA, bytes([const.STATUS_READ_FAILED]),
                    frame_type=const.FRAME_TYPE_NOTIFICATION), # Tag left the field
    ])

    async with Reader(transport, ReaderConfig(settle_delay=0)) as reader:
        logger.info("Attempting to identify tags...")
        for attempt in range(3):
            logger.info(f"--- Attempt {attempt + 1} ---")
            tid = await identify_tag(reader)
            if tid is None:
                logger.error("  Could not identify tag.")
            else:
                logger.info(f"  Mask designer ID: 0x{tid.mask_designer_id:03X}")
                logger.info(f"  Model number:     0x{tid.model_number:03X}")
            print("-" * 20)

    logger.info("Identification example finished.")


if __name__ == "__main__":
    asyncio.run(main())
