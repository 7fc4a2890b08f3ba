"""Helpers for passwords, TID decoding and serial port discovery."""
