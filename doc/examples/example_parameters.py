# doc/examples/example_parameters.py

import asyncio
import logging

from uhf_gen2.core.exceptions import UhfError
from uhf_gen2.core.reader import Reader
from uhf_gen2.protocols.gen2 import QueryParams
from uhf_gen2.protocols.types import QuerySession, QueryTarget, Region
from uhf_gen2.transport.serial_async import SerialTransport

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
logger = logging.getLogger("ParametersExample")

SERIAL_PORT = '/dev/ttyUSB0'


async def main():
    async with Reader(SerialTransport({'port': SERIAL_PORT})) as reader:
        try:
            # --- Transmit power ---
            power = await reader.get_tx_power()
            logger.info(f"Transmit power: {power} dBm")
            await reader.set_tx_power(24)

            # --- Region and channel ---
            region = await reader.get_region()
            channel = await reader.get_channel()
            logger.info(f"Region: {region.name}, channel {channel} "
                        f"({region.frequency_from_channel(channel):.3f} MHz)")

            await reader.set_region(Region.EUROPE)
            await reader.set_channel(Region.EUROPE.channel_from_frequency(866.3))
            await reader.set_auto_freq_hop(False)

            # --- Query parameters ---
            query = await reader.get_query_param()
            logger.info(f"Query parameters: {query}")
            await reader.set_query_param(QueryParams(session=QuerySession.S1, target=QueryTarget.A, q=5))

            # --- Link profile ---
            profile = await reader.get_rf_link_profile()
            logger.info(f"RF link profile: {profile.name}")

        except UhfError as e:
            logger.error(f"Reader operation failed: {e}")

if __name__ == "__main__":
    asyncio.run(main())
