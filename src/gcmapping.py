#!/usr/bin/env python3
# encoding=utf-8

# Tokenizer for SDL game controller mapping lines, as found in
# gamecontrollerdb.txt and friends:
#
#   GUID,Name,key:value,key:value,...,platform:Linux,
#
# Each call to Tokenizer.next_token() consumes one comma-delimited field and
# yields one token, or a MappingError describing what was wrong with the field.
# Errors are results, not exceptions, so the caller decides whether to skip a
# bad field, the whole line, or give up.

import re
import types
from collections import namedtuple

import gcguid
import gcsyms


AxisRange = types.SimpleNamespace(
  LOWER_HALF = "LowerHalf",
  UPPER_HALF = "UpperHalf",
  FULL = "Full",
  )

ErrorKind = types.SimpleNamespace(
  INVALID_GUID = "InvalidGuid",
  UNEXPECTED_END = "UnexpectedEnd",
  INVALID_KEYVAL_PAIR = "InvalidKeyValPair",
  INVALID_VALUE = "InvalidValue",
  UNKNOWN_AXIS = "UnknownAxis",
  UNKNOWN_BUTTON = "UnknownButton",
  INVALID_PARSER_STATE = "InvalidParserState",
  )

PLATFORM_KEY = "platform"


def byte_offset (line, index):
  """Offset of line[index] in the UTF-8 encoding of line."""
  return len(line[:index].encode('utf-8'))


class MappingError (ValueError):
  """Positioned diagnostic for one field of a mapping line.

position is the byte offset (UTF-8) into the line where the offending field
begins.
"""
  TOKTYPE = 'ERROR'
  DESCRIPTIONS = {
    ErrorKind.INVALID_GUID: "GUID is invalid",
    ErrorKind.UNEXPECTED_END: "mapping does not have all required fields",
    ErrorKind.INVALID_KEYVAL_PAIR: "expected key value pair",
    ErrorKind.INVALID_VALUE: "value is not valid",
    ErrorKind.UNKNOWN_AXIS: "invalid axis name",
    ErrorKind.UNKNOWN_BUTTON: "invalid button name",
    ErrorKind.INVALID_PARSER_STATE: "attempt to parse after unrecoverable error",
    }

  def __init__ (self, kind, position):
    ValueError.__init__(self, kind, position)
    self.kind = kind
    self.position = position

  @property
  def description (self):
    return self.DESCRIPTIONS.get(self.kind, self.kind)

  def __str__ (self):
    return "{} at {}".format(self.description, self.position)



#############
# Tokenizer #
#############

class Tokenizer (object):
  """Tokenizer instance, bound to one mapping line.

Token types:
  IDENTIFIER : device GUID, first field
  NAME : device name, second field, taken verbatim
  PLATFORM : value of the reserved "platform" key, uninterpreted
  AXIS_MAPPING : key resolved to an Axis, value an "a", "+a" or "-a" input
  BUTTON_MAPPING : key resolved to a Button, value a "b" input
  HAT_MAPPING : key resolved to a Button, value an "h<hat>.<direction>" input
  ERROR : MappingError

A bad GUID, or a line ending right after the GUID, leaves the tokenizer in the
Fatal stage; every later call then yields InvalidParserState.  Errors in
key:value fields only concern that field, and parsing carries on with the next.
"""
  TOK_IDENTIFIER = 'IDENTIFIER'
  TOK_NAME = 'NAME'
  TOK_PLATFORM = 'PLATFORM'
  TOK_AXIS_MAPPING = 'AXIS_MAPPING'
  TOK_BUTTON_MAPPING = 'BUTTON_MAPPING'
  TOK_HAT_MAPPING = 'HAT_MAPPING'
  TOK_ERROR = MappingError.TOKTYPE

  DEBUG = False

  def __init__ (self, line):
    self.line = line
    self.pos = 0        # Start of the next unread field.
    self.state = ParseIdentifier(self)

  @property
  def stage (self):
    return self.state.STAGE

  def field (self):
    """Extent of the field under the cursor, as (start, end) offsets."""
    end = self.line.find(',', self.pos)
    if end < 0:
      end = len(self.line)
    return (self.pos, end)

  def fail (self, kind, position=None):
    if position is None:
      position = byte_offset(self.line, self.pos)
    return MappingError(kind, position)

  def next_token (self):
    """Primary entry point -- consume one field.
Returns None once the line is used up, otherwise a token or a MappingError.
"""
    if not self.state.FATAL and self.pos >= len(self.line):
      return None
    retval, self.state = self.state.handle()
    if self.DEBUG:
      print("yield token {!r}".format(retval))
    return retval

  def __iter__ (self):
    """Retrieve results until end of line, or until the tokenizer goes Fatal."""
    while True:
      retval = self.next_token()
      if retval is None:
        return
      yield retval
      if self.state.FATAL:
        return


def tokenize (line):
  """All results for one line, as a list."""
  return list(Tokenizer(line))



# Tokenizer stages (State Pattern)

class ParseState (object):
  """Base class for tokenizer stage."""
  STAGE = None
  FATAL = False

  def __init__ (self, context):
    self.context = context
  def handle (self):
    """per-class override; consume one field, return (result, next stage)."""
    raise NotImplementedError("Executing handle() on base class")

class ParseFatal (ParseState):
  STAGE = 'Fatal'
  FATAL = True
  def handle (self):
    return (self.context.fail(ErrorKind.INVALID_PARSER_STATE), self)

class ParseIdentifier (ParseState):
  STAGE = 'Identifier'
  def handle (self):
    ctx = self.context
    start, end = ctx.field()
    try:
      guid = gcguid.parse_guid(ctx.line[start:end])
    except ValueError:
      return (ctx.fail(ErrorKind.INVALID_GUID), ParseFatal(ctx))
    if end == len(ctx.line):
      # GUID alone is not a mapping.
      return (ctx.fail(ErrorKind.UNEXPECTED_END), ParseFatal(ctx))
    ctx.pos = end + 1
    return (Identifier(guid), ParseName(ctx))

class ParseName (ParseState):
  STAGE = 'Name'
  def handle (self):
    ctx = self.context
    start, end = ctx.field()
    ctx.pos = end + 1
    return (Name(ctx.line[start:end]), ParseKeyVal(ctx))

class ParseKeyVal (ParseState):
  STAGE = 'KeyVal'
  def handle (self):
    ctx = self.context
    start, end = ctx.field()
    ctx.pos = end + 1
    try:
      retval = decode_field(ctx.line, start, end)
    except MappingError as e:
      retval = e
    return (retval, self)



##########
# Tokens #
##########

class Token (tuple):
  """Common base for token tuples; tokens of different types never compare equal."""
  __slots__ = ()
  TOKTYPE = None

  def __eq__ (self, other):
    return type(self) is type(other) and tuple.__eq__(self, other)
  def __ne__ (self, other):
    return not self.__eq__(other)
  def __hash__ (self):
    return hash((self.TOKTYPE, tuple(self)))

class Identifier (Token, namedtuple("Identifier", ("guid",))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_IDENTIFIER

class Name (Token, namedtuple("Name", ("value",))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_NAME

class Platform (Token, namedtuple("Platform", ("value",))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_PLATFORM

class AxisMapping (Token, namedtuple("AxisMapping", ("source", "target", "input_range", "output_range", "inverted"))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_AXIS_MAPPING

class ButtonMapping (Token, namedtuple("ButtonMapping", ("source", "target"))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_BUTTON_MAPPING

# Still in SDL terms; see gcdb.ControllerMapping.hat_axes() for the axis form.
class HatMapping (Token, namedtuple("HatMapping", ("hat", "direction", "target"))):
  __slots__ = ()
  TOKTYPE = Tokenizer.TOK_HAT_MAPPING



################
# Field syntax #
################

ROLE_AXIS = 'axis'
ROLE_BUTTON = 'button'
ROLE_HAT = 'hat'

# Decoded right-hand side of a key:value field.  For hats, source is the hat
# index and direction the SDL direction bitmask.
ValueSpec = namedtuple("ValueSpec", ("role", "source", "input_range", "inverted", "direction"))

_U16_REGEX = re.compile(r"\+?[0-9]+")

def _parse_u16 (text, position):
  if _U16_REGEX.fullmatch(text):
    n = int(text)
    if n <= 0xFFFF:
      return n
  raise MappingError(ErrorKind.INVALID_VALUE, position)


def decode_value (value, position):
  r"""Interpret the value side of a field.

  +a3   axis 3, upper half of its range
  -a3   axis 3, lower half
  a3    axis 3, full range
  a3~   any of the above, inverted
  b5    button 5
  h0.4  hat 0, direction bitmask 4

Raises MappingError(InvalidValue) for anything else.
"""
  head = value[:1]
  if head in ('+', '-') and value[1:2] == 'a':
    input_range = AxisRange.UPPER_HALF if head == '+' else AxisRange.LOWER_HALF
    body = value[2:]
  elif head == 'a':
    input_range = AxisRange.FULL
    body = value[1:]
  elif head == 'b':
    return ValueSpec(ROLE_BUTTON, _parse_u16(value[1:], position), None, False, None)
  elif head == 'h':
    dot = value.find('.')
    if dot < 0:
      raise MappingError(ErrorKind.INVALID_VALUE, position)
    hat = _parse_u16(value[1:dot], position)
    direction = _parse_u16(value[dot+1:], position)
    return ValueSpec(ROLE_HAT, hat, None, False, direction)
  else:
    raise MappingError(ErrorKind.INVALID_VALUE, position)

  inverted = body.endswith('~')
  if inverted:
    body = body[:-1]
  return ValueSpec(ROLE_AXIS, _parse_u16(body, position), input_range, inverted, None)


def decode_key (key):
  """Split output-range sign off an axis key: "+leftx" -> (UpperHalf, "leftx")."""
  head = key[:1]
  if head == '+':
    return (AxisRange.UPPER_HALF, key[1:])
  if head == '-':
    return (AxisRange.LOWER_HALF, key[1:])
  return (AxisRange.FULL, key)


def decode_pair (key, value, position):
  """Resolve one key:value field (other than platform) into a mapping token."""
  spec = decode_value(value, position)

  if spec.role == ROLE_AXIS:
    output_range, name = decode_key(key)
    target = gcsyms.lookup_axis(name)
    if target is None:
      raise MappingError(ErrorKind.UNKNOWN_AXIS, position)
    return AxisMapping(spec.source, target, spec.input_range, output_range, spec.inverted)

  # Buttons and hats both land on buttons; key taken as-is.
  target = gcsyms.lookup_button(key)
  if target is None:
    raise MappingError(ErrorKind.UNKNOWN_BUTTON, position)
  if spec.role == ROLE_HAT:
    return HatMapping(spec.source, spec.direction, target)
  return ButtonMapping(spec.source, target)


def decode_field (line, start, end):
  """Decode line[start:end] as a key:value field; needs exactly one ':'.
Errors carry the byte offset of line[start] in UTF-8.
"""
  position = byte_offset(line, start)
  colon = line.find(':', start, end)
  if colon < 0 or line.find(':', colon + 1, end) >= 0:
    raise MappingError(ErrorKind.INVALID_KEYVAL_PAIR, position)
  key = line[start:colon]
  value = line[colon+1:end]
  if key == PLATFORM_KEY:
    return Platform(value)
  return decode_pair(key, value, position)
