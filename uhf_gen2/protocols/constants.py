# uhf_gen2/protocols/constants.py

"""
Constants for the 0xBB/0x7E framed serial protocol spoken by UHF RFID modules.
"""

# --- Frame Structure Constants ---
FRAME_HEADER: int = 0xBB
FRAME_END: int = 0x7E
HEADER_LENGTH = 1
FRAME_TYPE_LENGTH = 1
COMMAND_LENGTH = 1
PARAM_LENGTH_FIELD_LENGTH = 2
CHECKSUM_LENGTH = 1
END_LENGTH = 1
PARAMS_OFFSET = HEADER_LENGTH + FRAME_TYPE_LENGTH + COMMAND_LENGTH + PARAM_LENGTH_FIELD_LENGTH
MIN_FRAME_LENGTH = PARAMS_OFFSET + CHECKSUM_LENGTH + END_LENGTH
MAX_PARAM_LENGTH = 0xFFFF

# Byte offsets inside a frame
OFFSET_TYPE = 1
OFFSET_COMMAND = 2
OFFSET_LEN_HI = 3
OFFSET_LEN_LO = 4
OFFSET_STATUS = 5 # First parameter byte; status code in notification replies

# --- Frame Type Constants ---
FRAME_TYPE_COMMAND: int = 0x00
FRAME_TYPE_NOTIFICATION: int = 0x01
FRAME_TYPE_TAG: int = 0x02

# --- Command Code Constants (Host -> Reader) ---
CMD_GET_FIRMWARE: int = 0x03
CMD_SET_REGION: int = 0x07
CMD_GET_REGION: int = 0x08
CMD_GET_SELECT_PARAM: int = 0x0B
CMD_SET_SELECT_PARAM: int = 0x0C
CMD_GET_QUERY_PARAM: int = 0x0D
CMD_SET_QUERY_PARAM: int = 0x0E
CMD_SET_BAUD_RATE: int = 0x11
CMD_SET_SELECT_MODE: int = 0x12
CMD_INVENTORY_BUFFER: int = 0x18
CMD_SINGLE_POLL: int = 0x22
CMD_MULTIPLE_POLL: int = 0x27
CMD_STOP_MULTIPLE_POLL: int = 0x28
CMD_GET_BUFFER_DATA: int = 0x29
CMD_CLEAR_BUFFER: int = 0x2A
CMD_READ_TAG_DATA: int = 0x39
CMD_WRITE_TAG_DATA: int = 0x49
CMD_KILL_TAG: int = 0x65
CMD_SET_RF_LINK_PROFILE: int = 0x69
CMD_GET_RF_LINK_PROFILE: int = 0x6A
CMD_LOCK_TAG: int = 0x82
CMD_INSERT_CHANNEL: int = 0xA9
CMD_GET_CHANNEL: int = 0xAA
CMD_SET_CHANNEL: int = 0xAB
CMD_SET_AUTO_FREQ_HOP: int = 0xAD
CMD_SET_CONTINUOUS_CARRIER: int = 0xB0
CMD_SET_TX_POWER: int = 0xB6
CMD_GET_TX_POWER: int = 0xB7
CMD_BLOCK_PERMALOCK: int = 0xD3
CMD_NXP_CHANGE_CONFIG: int = 0xE0
CMD_NXP_READ_PROTECT: int = 0xE1
CMD_NXP_RESET_READ_PROTECT: int = 0xE2
CMD_NXP_CHANGE_EAS: int = 0xE3
CMD_NXP_EAS_ALARM: int = 0xE4
CMD_IMPINJ_MONZA_QT: int = 0xE5
CMD_SET_READER_SENSITIVITY: int = 0xF0
CMD_GET_READER_SENSITIVITY: int = 0xF1

# Command byte carried by reader-originated error/event notifications
CMD_NOTIFICATION_EVENT: int = 0xFF

# --- Fixed Parameter Values ---
FIRMWARE_HARDWARE_VERSION: int = 0x00
FIRMWARE_SOFTWARE_VERSION: int = 0x01
FIRMWARE_MANUFACTURER: int = 0x02
MULTIPLE_POLL_RESERVED: int = 0x22 # Leading byte of multi-poll / buffer inventory params
MAX_POLL_ROUNDS: int = 0xFFFF
SWITCH_ON: int = 0xFF
SWITCH_OFF: int = 0x00
TRUNCATE_ON: int = 0x80
TRUNCATE_OFF: int = 0x00
QT_READ: int = 0x00
QT_WRITE: int = 0x01

# --- Limits ---
MIN_TX_POWER_DBM: int = 18
MAX_TX_POWER_DBM: int = 26
TX_POWER_SCALE: int = 100 # Power travels as dBm * 100
MAX_SELECT_MASK_BYTES: int = 32
MAX_WRITE_DATA_BYTES: int = 64
PASSWORD_LENGTH: int = 4
BUFFER_EPC_LENGTH: int = 12 # Fixed EPC size assumed for buffered tag entries
TAG_FRAME_MIN_LENGTH: int = 12
TAG_EPC_OFFSET: int = 8 # HEADER TYPE CMD LEN(2) RSSI PC(2)
TAG_EPC_OVERHEAD: int = 5 # RSSI + PC + trailing fields counted in LEN

# --- Status Code Constants ---
STATUS_SUCCESS: int = 0x00
STATUS_READ_FAILED: int = 0x09
STATUS_WRITE_FAILED: int = 0x10
STATUS_KILL_FAILED: int = 0x12
STATUS_LOCK_FAILED: int = 0x13
STATUS_BLOCK_PERMALOCK_FAILED: int = 0x14
STATUS_INVENTORY_FAILED: int = 0x15 # Also marks the end of a multi-poll round
STATUS_ACCESS_FAILED: int = 0x16
STATUS_COMMAND_ERROR: int = 0x17
STATUS_NXP_CHANGE_CONFIG_FAILED: int = 0x1A
STATUS_FHSS_FAILED: int = 0x20
STATUS_NXP_READ_PROTECT_FAILED: int = 0x2A
STATUS_NXP_RESET_READ_PROTECT_FAILED: int = 0x2B
STATUS_NXP_CHANGE_EAS_FAILED: int = 0x1B
STATUS_NXP_EAS_ALARM_FAILED: int = 0x1D
STATUS_IMPINJ_QT_FAILED: int = 0x2E

STATUS_MESSAGES: dict[int, str] = {
    STATUS_SUCCESS: "SUCCESS: Command completed successfully.",
    STATUS_READ_FAILED: "READ_FAILED: Tag memory read failed.",
    STATUS_WRITE_FAILED: "WRITE_FAILED: Tag memory write failed.",
    STATUS_KILL_FAILED: "KILL_FAILED: Tag kill operation failed.",
    STATUS_LOCK_FAILED: "LOCK_FAILED: Tag lock operation failed.",
    STATUS_BLOCK_PERMALOCK_FAILED: "BLOCK_PERMALOCK_FAILED: Block permalock operation failed.",
    STATUS_INVENTORY_FAILED: "INVENTORY_FAILED: No tag answered during the inventory round.",
    STATUS_ACCESS_FAILED: "ACCESS_FAILED: Access password rejected by the tag.",
    STATUS_COMMAND_ERROR: "COMMAND_ERROR: Command code, length or checksum rejected by the module.",
    STATUS_NXP_CHANGE_CONFIG_FAILED: "NXP_CHANGE_CONFIG_FAILED: NXP ChangeConfig command failed.",
    STATUS_NXP_CHANGE_EAS_FAILED: "NXP_CHANGE_EAS_FAILED: NXP ChangeEAS command failed.",
    STATUS_NXP_EAS_ALARM_FAILED: "NXP_EAS_ALARM_FAILED: No EAS alarm received.",
    STATUS_FHSS_FAILED: "FHSS_FAILED: Frequency hopping channel is busy.",
    STATUS_NXP_READ_PROTECT_FAILED: "NXP_READ_PROTECT_FAILED: NXP ReadProtect command failed.",
    STATUS_NXP_RESET_READ_PROTECT_FAILED: "NXP_RESET_READ_PROTECT_FAILED: NXP Reset ReadProtect command failed.",
    STATUS_IMPINJ_QT_FAILED: "IMPINJ_QT_FAILED: Impinj Monza QT command failed.",
}
