# uhf_gen2/core/reader.py

import asyncio
import logging
from typing import Any, Callable, List, Optional, Union

from uhf_gen2.core.config import ReaderConfig, DEFAULT_CONFIG
from uhf_gen2.core.exceptions import InvalidResponseError, ReaderStatusError
from uhf_gen2.core.poller import StreamPoller, TagCallback
from uhf_gen2.core.status import PollState
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols import commands_device as device_cmds
from uhf_gen2.protocols import commands_params as param_cmds
from uhf_gen2.protocols import commands_tags as tag_cmds
from uhf_gen2.protocols import commands_vendor as vendor_cmds
from uhf_gen2.protocols.gen2 import LockPayload, QtControl, QueryParams, SelectParams
from uhf_gen2.protocols.types import BaudRate, MemoryBank, Region, RfLinkProfile, SelectMode, TagInfo
from uhf_gen2.transport.base import BaseTransport

logger = logging.getLogger(__name__)

Password = Union[bytes, bytearray, str]


class Reader:
    """
    Command engine for a UHF RFID module on a 0xBB/0x7E framed byte stream.

    Every operation is one transaction: validate the arguments, build the
    frame, clear stale input, write, wait ``settle_delay``, read the reply and
    check its header, type, command echo and status before decoding it.
    Invalid arguments raise InvalidParameterError before anything is written.

    A Reader owns its transport. Operations must not run concurrently on the
    same instance; a poll occupies the transport until it returns.
    """

    def __init__(self, transport: BaseTransport, config: Optional[ReaderConfig] = None):
        """
        Args:
            transport: An instance of a BaseTransport implementation.
            config: Delays and timeouts; DEFAULT_CONFIG when omitted.
        """
        if not isinstance(transport, BaseTransport):
            raise TypeError("transport must be an instance of BaseTransport")

        self._transport = transport
        self._config = config or DEFAULT_CONFIG
        self._poller: Optional[StreamPoller] = None

        logger.debug(f"Reader initialized with transport: {type(transport).__name__}")

    @property
    def transport(self) -> BaseTransport:
        return self._transport

    @property
    def config(self) -> ReaderConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._transport.is_connected()

    @property
    def poll_state(self) -> PollState:
        """State of the poll in progress, IDLE when none is running."""
        return self._poller.state if self._poller else PollState.IDLE

    async def connect(self) -> None:
        await self._transport.connect()
        logger.info(f"Reader connected via {type(self._transport).__name__}")

    async def disconnect(self) -> None:
        await self._transport.disconnect()
        logger.info("Reader disconnected.")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    # --- Transaction Template ---

    async def _transact(self, command: int, params: bytes = b'',
                        decode: Optional[Callable[[bytes], Any]] = None) -> Any:
        """Sends one command frame and decodes the single reply read after the settle delay."""
        frame = framing.build_frame(command, params)

        await self._transport.clear_input()
        logger.debug(f"Sending command 0x{command:02X}: {frame.hex(' ').upper()}")
        written = await self._transport.write(frame)
        logger.debug(f"Wrote {written} bytes")
        await asyncio.sleep(self._config.settle_delay)

        response = await self._transport.read(self._config.read_size, self._config.response_timeout)
        logger.debug(f"Received {len(response)} bytes: {response.hex(' ').upper()}")

        if decode is None:
            return response
        try:
            return decode(response)
        except ReaderStatusError as e:
            logger.error(f"Reader reported error for command 0x{command:02X}: "
                         f"Status=0x{e.status:02X} ({e.error_message})")
            raise
        except InvalidResponseError as e:
            logger.error(f"Invalid response to command 0x{command:02X}: {e}")
            raise

    async def _transact_status(self, command: int, params: bytes, operation: str,
                               echo: Optional[int] = None) -> None:
        """Runs a command whose reply is a bare status byte."""
        expected_echo = command if echo is None else echo
        await self._transact(command, params,
                             lambda r: framing.expect_success(r, expected_echo, operation))

    # --- Device ---

    async def get_firmware_version(self) -> str:
        return await self._transact(const.CMD_GET_FIRMWARE, device_cmds.encode_get_firmware_request(),
                                    device_cmds.decode_get_firmware_response)

    async def set_baud_rate(self, rate: Union[BaudRate, int]) -> None:
        """
        Changes the module's UART speed. The transport keeps its own settings,
        so it has to be reopened at the new rate before the next command.
        """
        params = device_cmds.encode_set_baud_rate_request(rate)
        await self._transact(const.CMD_SET_BAUD_RATE, params,
                             lambda r: device_cmds.decode_status_response(r, const.CMD_SET_BAUD_RATE, "set baud rate"))
        logger.info(f"Baud rate set to {BaudRate(params[0]).bps} bps; reconnect the transport at the new rate")

    # --- Inventory ---

    async def single_poll(self) -> Optional[TagInfo]:
        """Runs one inventory and returns the tag that answered, or None."""
        return await self._transact(const.CMD_SINGLE_POLL, tag_cmds.encode_single_poll_request(),
                                    tag_cmds.decode_single_poll_response)

    async def multiple_poll_with_callback(self, rounds: int, callback: TagCallback) -> int:
        """
        Runs ``rounds`` inventory rounds (not a tag count) and calls ``callback``
        for every tag frame. Returns the number of tags reported.
        """
        self._poller = StreamPoller(self._transport, self._config)
        return await self._poller.run_rounds(rounds, callback)

    async def multiple_poll(self, rounds: int) -> List[TagInfo]:
        tags: List[TagInfo] = []
        await self.multiple_poll_with_callback(rounds, tags.append)
        return tags

    async def poll_for_duration_with_callback(self, seconds: float, callback: TagCallback) -> int:
        """Polls continuously for ``seconds``, then stops the reader. Returns the tag count."""
        self._poller = StreamPoller(self._transport, self._config)
        return await self._poller.run_for_duration(seconds, callback)

    async def poll_for_duration(self, seconds: float) -> List[TagInfo]:
        tags: List[TagInfo] = []
        await self.poll_for_duration_with_callback(seconds, tags.append)
        return tags

    async def stop_multiple_poll(self) -> None:
        await self._transact_status(const.CMD_STOP_MULTIPLE_POLL, tag_cmds.encode_stop_multiple_poll_request(),
                                    "stop multiple polling")

    # --- RF Parameters ---

    async def get_tx_power(self) -> int:
        """Returns the transmit power in whole dBm."""
        return await self._transact(const.CMD_GET_TX_POWER, b'', param_cmds.decode_get_tx_power_response)

    async def set_tx_power(self, power_dbm: int) -> None:
        """Sets the transmit power; valid range is 18-26 dBm."""
        params = param_cmds.encode_set_tx_power_request(power_dbm)
        await self._transact_status(const.CMD_SET_TX_POWER, params, "set transmit power")
        logger.info(f"Transmit power set to {power_dbm} dBm")

    async def get_region(self) -> Region:
        return await self._transact(const.CMD_GET_REGION, b'', param_cmds.decode_get_region_response)

    async def set_region(self, region: Union[Region, int]) -> None:
        params = param_cmds.encode_set_region_request(region)
        await self._transact_status(const.CMD_SET_REGION, params, "set region")
        logger.info(f"Region set to {Region(params[0]).name}")

    async def get_channel(self) -> int:
        return await self._transact(const.CMD_GET_CHANNEL, b'', param_cmds.decode_get_channel_response)

    async def set_channel(self, channel: int) -> None:
        """Sets the fixed channel index; use Region.frequency_from_channel for the frequency."""
        params = param_cmds.encode_channel_request(channel)
        await self._transact_status(const.CMD_SET_CHANNEL, params, "set channel")
        logger.info(f"Channel set to {channel}")

    async def insert_channel(self, channel: int) -> None:
        """Adds a channel to the frequency hopping table."""
        params = param_cmds.encode_channel_request(channel)
        await self._transact_status(const.CMD_INSERT_CHANNEL, params, "insert channel")

    async def set_auto_freq_hop(self, enabled: bool) -> None:
        await self._transact_status(const.CMD_SET_AUTO_FREQ_HOP, param_cmds.encode_switch_request(enabled),
                                    "set auto frequency hopping")
        logger.info(f"Automatic frequency hopping {'enabled' if enabled else 'disabled'}")

    async def set_continuous_carrier(self, enabled: bool) -> None:
        """Switches the unmodulated test carrier on or off."""
        await self._transact_status(const.CMD_SET_CONTINUOUS_CARRIER, param_cmds.encode_switch_request(enabled),
                                    "set continuous carrier")
        logger.info(f"Continuous carrier {'enabled' if enabled else 'disabled'}")

    async def get_rf_link_profile(self) -> RfLinkProfile:
        return await self._transact(const.CMD_GET_RF_LINK_PROFILE, b'', param_cmds.decode_get_rf_link_profile_response)

    async def set_rf_link_profile(self, profile: Union[RfLinkProfile, int]) -> None:
        params = param_cmds.encode_set_rf_link_profile_request(profile)
        await self._transact_status(const.CMD_SET_RF_LINK_PROFILE, params, "set RF link profile")
        logger.info(f"RF link profile set to {RfLinkProfile(params[0]).name}")

    async def get_reader_sensitivity(self) -> int:
        return await self._transact(const.CMD_GET_READER_SENSITIVITY, b'',
                                    param_cmds.decode_get_reader_sensitivity_response)

    async def set_reader_sensitivity(self, sensitivity: int) -> None:
        params = param_cmds.encode_set_reader_sensitivity_request(sensitivity)
        await self._transact_status(const.CMD_SET_READER_SENSITIVITY, params, "set reader sensitivity")

    # --- Select / Query ---

    async def get_select_param(self) -> SelectParams:
        return await self._transact(const.CMD_GET_SELECT_PARAM, b'', param_cmds.decode_get_select_param_response)

    async def set_select_param(self, params: SelectParams) -> None:
        """Stores the Select filter on the module; it applies until changed."""
        payload = param_cmds.encode_set_select_param_request(params)
        await self._transact_status(const.CMD_SET_SELECT_PARAM, payload, "set select parameters")
        logger.info(f"Select parameters set: {params}")

    async def set_select_mode(self, mode: Union[SelectMode, int]) -> None:
        # The module answers with the set-select-parameter command code
        params = param_cmds.encode_set_select_mode_request(mode)
        await self._transact(const.CMD_SET_SELECT_MODE, params,
                             lambda r: framing.expect_success(r, None, "set select mode"))
        logger.info(f"Select mode set to {SelectMode(params[0]).name}")

    async def get_query_param(self) -> QueryParams:
        return await self._transact(const.CMD_GET_QUERY_PARAM, b'', param_cmds.decode_get_query_param_response)

    async def set_query_param(self, params: QueryParams) -> None:
        payload = param_cmds.encode_set_query_param_request(params)
        await self._transact_status(const.CMD_SET_QUERY_PARAM, payload, "set query parameters")
        logger.info(f"Query parameters set: {params}")

    # --- Tag Memory ---

    async def read_tag_data(self, password: Password, mem_bank: Union[MemoryBank, int],
                            word_ptr: int, word_count: int) -> bytes:
        """
        Reads ``word_count`` words (2 bytes each) starting at ``word_ptr``.

        Args:
            password: 4-byte access password (b'\\x00' * 4 or "00000000" for none).
            mem_bank: Memory bank to read from.
            word_ptr: Starting word address.
            word_count: Number of words, at least 1.

        Raises:
            ReaderStatusError: The module reported the read as failed.
        """
        params = tag_cmds.encode_read_tag_data_request(password, mem_bank, word_ptr, word_count)
        return await self._transact(const.CMD_READ_TAG_DATA, params, tag_cmds.decode_read_tag_data_response)

    async def write_tag_data(self, password: Password, mem_bank: Union[MemoryBank, int],
                             word_ptr: int, data: bytes) -> None:
        """Writes whole words; ``data`` must be non-empty, of even length and at most 64 bytes."""
        params = tag_cmds.encode_write_tag_data_request(password, mem_bank, word_ptr, data)
        await self._transact_status(const.CMD_WRITE_TAG_DATA, params, "write")

    async def lock_tag(self, password: Password, payload: LockPayload) -> None:
        """Applies one lock action to one memory area. Permanent actions cannot be undone."""
        params = tag_cmds.encode_lock_tag_request(password, payload)
        await self._transact_status(const.CMD_LOCK_TAG, params, "lock")
        logger.info(f"Lock applied: {payload.target.name} -> {payload.action.name}")

    async def kill_tag(self, kill_password: Password) -> None:
        """Permanently disables the tag. The kill password must be non-zero."""
        params = tag_cmds.encode_kill_tag_request(kill_password)
        await self._transact_status(const.CMD_KILL_TAG, params, "kill")
        logger.info("Tag killed")

    # --- Reader Buffer ---

    async def inventory_buffer(self, rounds: int) -> None:
        """Runs inventory into the module's own tag buffer; fetch results with get_buffer_data."""
        params = tag_cmds.encode_inventory_buffer_request(rounds)
        await self._transact_status(const.CMD_INVENTORY_BUFFER, params, "start inventory buffer")

    async def get_buffer_data(self) -> List[TagInfo]:
        """Returns the buffered tags. Entries are split assuming 12-byte EPCs."""
        return await self._transact(const.CMD_GET_BUFFER_DATA, b'', tag_cmds.decode_get_buffer_data_response)

    async def clear_buffer(self) -> None:
        await self._transact_status(const.CMD_CLEAR_BUFFER, b'', "clear buffer")

    # --- Vendor Commands ---

    async def block_permalock(self, password: Password, mem_bank: Union[MemoryBank, int],
                              block_ptr: int, block_range: int, mask: int) -> None:
        """Permanently locks the blocks selected by the 16-bit ``mask``. Irreversible."""
        params = vendor_cmds.encode_block_permalock_request(password, mem_bank, block_ptr, block_range, mask)
        await self._transact_status(const.CMD_BLOCK_PERMALOCK, params, "block permalock")

    async def nxp_read_protect(self, password: Password) -> None:
        await self._transact_status(const.CMD_NXP_READ_PROTECT, vendor_cmds.encode_nxp_password_request(password),
                                    "NXP Read Protect")

    async def nxp_reset_read_protect(self, password: Password) -> None:
        await self._transact_status(const.CMD_NXP_RESET_READ_PROTECT,
                                    vendor_cmds.encode_nxp_password_request(password),
                                    "NXP Reset Read Protect")

    async def nxp_change_eas(self, password: Password, enabled: bool) -> None:
        params = vendor_cmds.encode_nxp_change_eas_request(password, enabled)
        await self._transact_status(const.CMD_NXP_CHANGE_EAS, params, "NXP Change EAS")

    async def nxp_eas_alarm(self) -> bool:
        """True when an EAS-enabled NXP tag answers."""
        return await self._transact(const.CMD_NXP_EAS_ALARM, b'', vendor_cmds.decode_nxp_eas_alarm_response)

    async def nxp_change_config(self, password: Password, config_word: int) -> None:
        params = vendor_cmds.encode_nxp_change_config_request(password, config_word)
        await self._transact_status(const.CMD_NXP_CHANGE_CONFIG, params, "NXP Change Config")

    async def impinj_monza_qt(self, password: Password, qt_control: QtControl, read: bool) -> int:
        """
        Reads (``read=True``) or writes the QT control of an Impinj Monza tag.
        Returns the QT control byte from the reply; decode it with QtControl.from_byte.
        """
        params = vendor_cmds.encode_impinj_monza_qt_request(password, qt_control, read)
        return await self._transact(const.CMD_IMPINJ_MONZA_QT, params, vendor_cmds.decode_impinj_monza_qt_response)
