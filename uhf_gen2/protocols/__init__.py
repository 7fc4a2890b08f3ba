"""Wire protocol of 0xBB/0x7E framed UHF RFID modules: framing, Gen2 field codecs and per-command codecs."""
