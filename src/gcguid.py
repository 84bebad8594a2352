#!/usr/bin/env python3
# encoding=utf-8

# Device GUID handling for SDL mapping lines.
#
# The GUID field is 16 bytes in hex.  SDL packs it as little-endian 16-bit
# words:  bus, crc, vendor, 0, product, 0, version, driver signature/data.
# GUIDs made from a device name instead of USB ids leave words 3 and 5 non-zero.

import re
import struct
import uuid
from collections import namedtuple


GUID_REGEX = re.compile(r"[0-9a-fA-F]{32}|[0-9a-fA-F]{8}(-[0-9a-fA-F]{4}){3}-[0-9a-fA-F]{12}")

# Bus types, as seen in the first GUID word.
BUS_USB = 0x03
BUS_BLUETOOTH = 0x05
BUS_VIRTUAL = 0xFF


def parse_guid (text):
  """Parse GUID text (32 hex digits, or hyphenated 8-4-4-4-12) into uuid.UUID.

Raises ValueError for anything else, including SDL's "xinput" placeholder.
"""
  if not GUID_REGEX.fullmatch(text):
    raise ValueError("Malformed GUID '{}'".format(text))
  return uuid.UUID(text)


DeviceInfo = namedtuple("DeviceInfo", ("bus", "crc", "vendor", "product", "version"))

def device_info (guid):
  """Decode SDL GUID words.  Accepts uuid.UUID or GUID text.

vendor, product and version are None when the GUID does not carry them.
"""
  if not isinstance(guid, uuid.UUID):
    guid = parse_guid(guid)
  words = struct.unpack("<8H", guid.bytes)
  bus, crc = words[0], words[1]
  if words[3] == 0 and words[5] == 0:
    return DeviceInfo(bus, crc, words[2], words[4], words[6])
  return DeviceInfo(bus, crc, None, None, None)
