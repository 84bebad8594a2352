#!/usr/bin/env python3
# encoding=utf-8

# Controller mapping records and mapping databases.
#
# A database is a text file of mapping lines (gamecontrollerdb.txt), one
# device per line, with '#' comment lines and blank lines in between.
# Each line is run through gcmapping.Tokenizer and collected into a
# ControllerMapping.

import uuid
from collections import OrderedDict, namedtuple

import gcguid
import gcsyms
from gcmapping import Tokenizer, MappingError, AxisRange



##########################
# Hat switch directions  #
##########################

# SDL hat direction bits.
HAT_UP = 1
HAT_RIGHT = 2
HAT_DOWN = 4
HAT_LEFT = 8

# A hat reads as two axes per hat, x then y; up and left are the lower halves.
HAT_DIRECTIONS = {
  HAT_UP: ('y', AxisRange.LOWER_HALF),
  HAT_DOWN: ('y', AxisRange.UPPER_HALF),
  HAT_LEFT: ('x', AxisRange.LOWER_HALF),
  HAT_RIGHT: ('x', AxisRange.UPPER_HALF),
  }

HatAxis = namedtuple("HatAxis", ("hat", "axis", "half"))


_RANGE_SIGN = {
  AxisRange.LOWER_HALF: "-",
  AxisRange.UPPER_HALF: "+",
  AxisRange.FULL: "",
  }



class ControllerMapping (object):
  """Everything one mapping line says about a device.

buttons : Button symbol -> ButtonMapping
axes : (Axis symbol, output range) -> AxisMapping
hats : Button symbol -> HatMapping
errors : MappingError for each field that could not be used

A later directive for the same target replaces an earlier one.
"""
  def __init__ (self, guid=None, name=None, platform=None):
    self.guid = guid          # uuid.UUID
    self.name = name
    self.platform = platform
    self.buttons = OrderedDict()
    self.axes = OrderedDict()
    self.hats = OrderedDict()
    self.errors = []

  def __repr__ (self):
    return "{}(guid={!r}, name={!r}, platform={!r})".format(
      self.__class__.__name__,
      self.guid.hex if self.guid else None,
      self.name,
      self.platform)

  def add (self, token):
    """Fold one tokenizer result into the record."""
    toktype = token.TOKTYPE
    if toktype == Tokenizer.TOK_IDENTIFIER:
      self.guid = token.guid
    elif toktype == Tokenizer.TOK_NAME:
      self.name = token.value
    elif toktype == Tokenizer.TOK_PLATFORM:
      self.platform = token.value
    elif toktype == Tokenizer.TOK_BUTTON_MAPPING:
      self.buttons[token.target] = token
    elif toktype == Tokenizer.TOK_AXIS_MAPPING:
      self.axes[(token.target, token.output_range)] = token
    elif toktype == Tokenizer.TOK_HAT_MAPPING:
      self.hats[token.target] = token
    elif toktype == Tokenizer.TOK_ERROR:
      self.errors.append(token)
    else:
      raise ValueError("Unknown token type '{}'".format(toktype))

  @classmethod
  def parse (cls, line, strict=False):
    """Build record from one mapping line.

Raises MappingError when the line is unusable (bad GUID, nothing after the
GUID), or on the first bad field if strict.
"""
    retval = cls()
    tokenizer = Tokenizer(line)
    for result in tokenizer:
      if result.TOKTYPE == Tokenizer.TOK_ERROR:
        if strict or tokenizer.state.FATAL:
          raise result
      retval.add(result)
    return retval

  def hat_axes (self):
    """Hat directives as axis halves: target -> HatAxis.

Only the four single-bit directions are convertible; diagonals and other
bitmasks are left out.
"""
    retval = OrderedDict()
    for target, hat in self.hats.items():
      try:
        axis, half = HAT_DIRECTIONS[hat.direction]
      except KeyError:
        continue
      retval[target] = HatAxis(hat.hat, axis, half)
    return retval

  def to_line (self):
    """Encode as a mapping line (trailing comma, as SDL writes them)."""
    if self.guid is None:
      raise ValueError("Mapping for '{}' has no GUID".format(self.name))
    fields = [ self.guid.hex, self.name or "" ]
    for target, button in self.buttons.items():
      fields.append("{}:b{}".format(gcsyms.button_name(target), button.source))
    for target, hat in self.hats.items():
      fields.append("{}:h{}.{}".format(gcsyms.button_name(target), hat.hat, hat.direction))
    for (target, output_range), axis in self.axes.items():
      fields.append("{}{}:{}a{}{}".format(
        _RANGE_SIGN[output_range],
        gcsyms.axis_name(target),
        _RANGE_SIGN[axis.input_range],
        axis.source,
        "~" if axis.inverted else ""))
    if self.platform is not None:
      fields.append("platform:{}".format(self.platform))
    return ",".join(fields) + ","

  def to_dict (self):
    """Plain dict/list/str/int form, keyed by SDL names (for YAML)."""
    retval = {
      "guid": self.guid.hex if self.guid else None,
      "name": self.name,
      }
    if self.platform is not None:
      retval["platform"] = self.platform
    if self.guid is not None:
      info = gcguid.device_info(self.guid)
      if info.vendor is not None:
        retval["device"] = {
          "bus": info.bus,
          "vendor": "{:04x}".format(info.vendor),
          "product": "{:04x}".format(info.product),
          "version": "{:04x}".format(info.version),
          }
    retval["buttons"] = { gcsyms.button_name(k): v.source for k, v in self.buttons.items() }
    axes = {}
    for (target, output_range), axis in self.axes.items():
      axes[_RANGE_SIGN[output_range] + gcsyms.axis_name(target)] = {
        "source": axis.source,
        "input": axis.input_range,
        "inverted": axis.inverted,
        }
    retval["axes"] = axes
    retval["hats"] = { gcsyms.button_name(k): { "hat": v.hat, "direction": v.direction }
                       for k, v in self.hats.items() }
    if self.errors:
      retval["errors"] = [ str(e) for e in self.errors ]
    return retval



class GameControllerDB (object):
  """Mappings from a database file, in file order.

problems collects (lineno, MappingError) for every error met while loading,
including lines that were dropped because they could not be used at all.
Repeated GUIDs are all kept.
"""
  DEBUG = False

  def __init__ (self):
    self.mappings = []
    self.problems = []

  def __len__ (self):
    return len(self.mappings)

  def __iter__ (self):
    return iter(self.mappings)

  def load_line (self, line, lineno=None):
    """Add one database line; returns the new ControllerMapping, or None."""
    line = line.strip()
    if not line or line.startswith('#'):
      return None
    try:
      mapping = ControllerMapping.parse(line)
    except MappingError as e:
      self.problems.append((lineno, e))
      if self.DEBUG:
        print("line {}: dropped, {}".format(lineno, e))
      return None
    for e in mapping.errors:
      self.problems.append((lineno, e))
    self.mappings.append(mapping)
    return mapping

  def find (self, guid, platform=None):
    """All mappings for a GUID (text or uuid.UUID), optionally of one platform."""
    if not isinstance(guid, uuid.UUID):
      guid = gcguid.parse_guid(guid)
    return [ m for m in self.mappings
             if m.guid == guid and (platform is None or m.platform == platform) ]

  def platforms (self):
    retval = []
    for m in self.mappings:
      if m.platform is not None and m.platform not in retval:
        retval.append(m.platform)
    return retval

  def to_dict (self):
    return [ m.to_dict() for m in self.mappings ]


def load (srcstream):
  """Read database from an iterable of lines (e.g. open file)."""
  db = GameControllerDB()
  for lineno, line in enumerate(srcstream, 1):
    db.load_line(line, lineno)
  return db

def loads (srcstring):
  return load(srcstring.splitlines())
