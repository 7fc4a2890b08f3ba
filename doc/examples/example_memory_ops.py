# doc/examples/example_memory_ops.py

import asyncio
import logging

from uhf_gen2.core.exceptions import ReaderStatusError, UhfError
from uhf_gen2.core.reader import Reader
from uhf_gen2.protocols.gen2 import LockPayload, SelectParams
from uhf_gen2.protocols.types import LockAction, LockTarget, MemoryBank, SelectMode, SelectTarget
from uhf_gen2.transport.serial_async import SerialTransport
from uhf_gen2.utils.tag_utils import hex_to_bytes

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
logger = logging.getLogger("MemoryOpsExample")

SERIAL_PORT = '/dev/ttyUSB0'
ACCESS_PASSWORD = "00000000"
LOCK_EPC = False # Set to True to try the lock at the end


async def main():
    async with Reader(SerialTransport({'port': SERIAL_PORT})) as reader:
        tag = await reader.single_poll()
        if tag is None:
            logger.warning("No tag in field.")
            return
        logger.info(f"Working with tag EPC={tag.epc}")

        # --- Address only this tag (EPC starts at bit 0x20 of the EPC bank) ---
        await reader.set_select_param(SelectParams(target=SelectTarget.S0, mem_bank=MemoryBank.EPC,
                                                   pointer=0x20, mask=hex_to_bytes(tag.epc)))
        await reader.set_select_mode(SelectMode.NON_POLLING)

        try:
            tid = await reader.read_tag_data(ACCESS_PASSWORD, MemoryBank.TID, 0, 4)
            logger.info(f"TID: {tid.hex().upper()}")

            await reader.write_tag_data(ACCESS_PASSWORD, MemoryBank.USER, 0, bytes.fromhex("CAFE"))
            user = await reader.read_tag_data(ACCESS_PASSWORD, MemoryBank.USER, 0, 1)
            logger.info(f"USER word 0: {user.hex().upper()}")

            if LOCK_EPC:
                await reader.lock_tag(ACCESS_PASSWORD, LockPayload(LockTarget.EPC, LockAction.LOCK))
        except ReaderStatusError as e:
            logger.error(f"Tag rejected the operation: 0x{e.status:02X} ({e.error_message})")
        except UhfError as e:
            logger.error(f"Memory operation failed: {e}")
        finally:
            await reader.set_select_mode(SelectMode.DISABLED)

if __name__ == "__main__":
    asyncio.run(main())
