#!/usr/bin/env python3
# encoding=utf-8

# Canonical gamepad vocabulary and SDL name tables.
#
# SDL mapping lines name their targets with short lowercase words ("leftx",
# "dpup", ...); these are resolved into the canonical Button and Axis symbols.

import types
from bisect import bisect_left


###########
# Symbols #
###########

Button = types.SimpleNamespace(
# face
  SOUTH = "South",
  EAST = "East",
  NORTH = "North",
  WEST = "West",
  C = "C",
  Z = "Z",
# shoulders
  LEFT_TRIGGER = "LeftTrigger",
  LEFT_TRIGGER2 = "LeftTrigger2",
  RIGHT_TRIGGER = "RightTrigger",
  RIGHT_TRIGGER2 = "RightTrigger2",
# menu
  SELECT = "Select",
  START = "Start",
  MODE = "Mode",
# sticks
  LEFT_THUMB = "LeftThumb",
  RIGHT_THUMB = "RightThumb",
# dpad
  DPAD_UP = "DPadUp",
  DPAD_DOWN = "DPadDown",
  DPAD_LEFT = "DPadLeft",
  DPAD_RIGHT = "DPadRight",
  )

Axis = types.SimpleNamespace(
  LEFT_STICK_X = "LeftStickX",
  LEFT_STICK_Y = "LeftStickY",
  LEFT_Z = "LeftZ",
  RIGHT_STICK_X = "RightStickX",
  RIGHT_STICK_Y = "RightStickY",
  RIGHT_Z = "RightZ",
  LEFT_TRIGGER = "LeftTrigger",
  LEFT_TRIGGER2 = "LeftTrigger2",
  RIGHT_TRIGGER = "RightTrigger",
  RIGHT_TRIGGER2 = "RightTrigger2",
  )


##########
# Tables #
##########

# Must be sorted!
BUTTONS_SDL = (
  "a", "b", "back", "c", "dpdown", "dpleft", "dpright", "dpup", "guide",
  "leftshoulder", "leftstick", "lefttrigger", "rightshoulder", "rightstick",
  "righttrigger", "start", "x", "y", "z",
  )
BUTTONS = (
  Button.SOUTH, Button.EAST, Button.SELECT, Button.C, Button.DPAD_DOWN,
  Button.DPAD_LEFT, Button.DPAD_RIGHT, Button.DPAD_UP, Button.MODE,
  Button.LEFT_TRIGGER, Button.LEFT_THUMB, Button.LEFT_TRIGGER2,
  Button.RIGHT_TRIGGER, Button.RIGHT_THUMB, Button.RIGHT_TRIGGER2,
  Button.START, Button.WEST, Button.NORTH, Button.Z,
  )

# Must be sorted!
AXES_SDL = (
  "leftshoulder", "lefttrigger", "leftx", "lefty", "leftz",
  "rightshoulder", "righttrigger", "rightx", "righty", "rightz",
  )
AXES = (
  Axis.LEFT_TRIGGER, Axis.LEFT_TRIGGER2, Axis.LEFT_STICK_X, Axis.LEFT_STICK_Y,
  Axis.LEFT_Z, Axis.RIGHT_TRIGGER, Axis.RIGHT_TRIGGER2, Axis.RIGHT_STICK_X,
  Axis.RIGHT_STICK_Y, Axis.RIGHT_Z,
  )


def _search (names, symbols, name):
  """Binary search of sorted names; symbol at the same index, or None."""
  idx = bisect_left(names, name)
  if idx < len(names) and names[idx] == name:
    return symbols[idx]
  return None

def lookup_button (name):
  """Resolve SDL button name to Button symbol, None if not a button name."""
  return _search(BUTTONS_SDL, BUTTONS, name)

def lookup_axis (name):
  """Resolve SDL axis name to Axis symbol, None if not an axis name."""
  return _search(AXES_SDL, AXES, name)


# Reverse direction, for writing mapping lines back out.
_BUTTON_NAMES = dict(zip(BUTTONS, BUTTONS_SDL))
_AXIS_NAMES = dict(zip(AXES, AXES_SDL))

def button_name (symbol):
  try:
    return _BUTTON_NAMES[symbol]
  except KeyError:
    raise KeyError("Unknown button symbol '{}'".format(symbol))

def axis_name (symbol):
  try:
    return _AXIS_NAMES[symbol]
  except KeyError:
    raise KeyError("Unknown axis symbol '{}'".format(symbol))
