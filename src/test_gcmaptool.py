#!/usr/bin/env python3
# encoding=utf-8

import contextlib
import io
import os
import shutil
import tempfile
import unittest
from unittest import mock

import yaml

import gcmaptool
import gcdb


SAMPLE_DB = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                         "..", "examples", "gamecontrollerdb_sample.txt")

X360_LINUX = "030000005e0400008e02000014010000"


class TestConfig (unittest.TestCase):
  def test_empty (self):
    self.assertEqual(gcmaptool.check_config(None), {})
    self.assertEqual(gcmaptool.check_config({}), {})

  def test_accepted (self):
    res = gcmaptool.check_config({ 'format': 'sdl', 'platform': 'Linux', 'strict': True })
    self.assertEqual(res, { 'format': 'sdl', 'platform': 'Linux', 'strict': True })

  def test_rejected (self):
    self.assertRaises(ValueError, gcmaptool.check_config, { 'colour': 'blue' })
    self.assertRaises(ValueError, gcmaptool.check_config, { 'format': 'json' })
    self.assertRaises(ValueError, gcmaptool.check_config, { 'strict': 'yes please' })
    self.assertRaises(ValueError, gcmaptool.check_config, [ 'format', 'sdl' ])


class TestCli (unittest.TestCase):
  def setUp (self):
    self.tmpdir = tempfile.mkdtemp()

  def tearDown (self):
    shutil.rmtree(self.tmpdir)

  def path (self, name):
    return os.path.join(self.tmpdir, name)

  def run_cli (self, *args):
    out = io.StringIO()
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
      errcode = gcmaptool.cli([ "gcmaptool" ] + list(args))
    return errcode, out.getvalue(), err.getvalue()

  def test_check (self):
    errcode, out, err = self.run_cli("--check", "-i", SAMPLE_DB)
    self.assertEqual(errcode, 1)
    self.assertEqual(out, "")
    lines = err.splitlines()
    self.assertEqual(len(lines), 6)
    self.assertEqual(lines[0], "{}:6:1: GUID is invalid".format(SAMPLE_DB))
    self.assertEqual(lines[-1], "{}:15:60: value is not valid".format(SAMPLE_DB))

  def test_check_clean (self):
    with open(self.path("clean.txt"), "wt") as f:
      f.write("# one pad\n" + X360_LINUX + ",Pad,a:b0,platform:Linux,\n")
    errcode, out, err = self.run_cli("--check", "-i", self.path("clean.txt"))
    self.assertEqual(errcode, 0)
    self.assertEqual(err, "")

  def test_yaml_output (self):
    errcode, out, err = self.run_cli("-i", SAMPLE_DB, "-o", self.path("out.yaml"))
    self.assertEqual(errcode, 0)
    self.assertEqual(out, "")
    with open(self.path("out.yaml")) as f:
      d = yaml.safe_load(f)
    self.assertEqual(len(d), 6)
    self.assertEqual(d[2]["name"], "Xbox 360 Controller")
    self.assertEqual(d[2]["buttons"]["guide"], 8)
    self.assertEqual(d[2]["axes"]["lefttrigger"], { "source": 2, "input": "Full", "inverted": False })
    self.assertEqual(d[2]["hats"]["dpdown"], { "hat": 0, "direction": 4 })

  def test_platform_filter (self):
    errcode, out, err = self.run_cli("-i", SAMPLE_DB, "-p", "Linux")
    self.assertEqual(errcode, 0)
    d = yaml.safe_load(out)
    self.assertEqual([ x["name"] for x in d ], [
      "Xbox 360 Controller", "PS4 Controller",
      "DragonRise Generic USB Joystick", "Half Broken Pad" ])

  def test_strict (self):
    errcode, out, err = self.run_cli("-i", SAMPLE_DB, "-p", "Linux", "--strict")
    d = yaml.safe_load(out)
    self.assertEqual([ x["name"] for x in d ], [ "Xbox 360 Controller", "PS4 Controller" ])

  def test_sdl_output (self):
    errcode, out, err = self.run_cli("-i", SAMPLE_DB, "-f", "sdl")
    self.assertEqual(errcode, 0)
    lines = out.splitlines()
    self.assertEqual(len(lines), 6)
    # normalized lines contain only usable fields.
    db = gcdb.loads(out)
    self.assertEqual(len(db), 6)
    self.assertEqual(db.problems, [])
    self.assertTrue(lines[2].startswith(X360_LINUX + ",Xbox 360 Controller,a:b0,b:b1,"))
    self.assertTrue(lines[2].endswith(",platform:Linux,"))

  def test_config_file (self):
    with open(self.path("cfg.yaml"), "wt") as f:
      f.write("format: sdl\nplatform: Mac OS X\n")
    errcode, out, err = self.run_cli("-c", self.path("cfg.yaml"), "-i", SAMPLE_DB)
    self.assertEqual(errcode, 0)
    lines = out.splitlines()
    self.assertEqual(len(lines), 1)
    self.assertTrue(lines[0].startswith("030000005e0400008e02000001000000,Xbox 360 Wired Controller,"))

    # command line wins over config.
    errcode, out, err = self.run_cli("-c", self.path("cfg.yaml"), "-i", SAMPLE_DB, "-f", "yaml", "-p", "Windows")
    d = yaml.safe_load(out)
    self.assertEqual([ x["name"] for x in d ], [ "8Bitdo NES30 Pro" ])

  def test_bad_config (self):
    with open(self.path("cfg.yaml"), "wt") as f:
      f.write("fromat: sdl\n")
    errcode, out, err = self.run_cli("-c", self.path("cfg.yaml"), "-i", SAMPLE_DB)
    self.assertEqual(errcode, 2)
    self.assertIn("Unknown config key 'fromat'", err)
    self.assertEqual(out, "")

  def test_missing_config (self):
    errcode, out, err = self.run_cli("-c", self.path("nope.yaml"), "-i", SAMPLE_DB)
    self.assertEqual(errcode, 2)

  def test_bad_format (self):
    errcode, out, err = self.run_cli("-i", SAMPLE_DB, "-f", "json")
    self.assertEqual(errcode, 2)
    self.assertIn("Unknown output format 'json'", err)

  def test_stdin (self):
    src = io.StringIO(X360_LINUX + ",Pad,a:b0,q:b1,platform:Linux,\n")
    with mock.patch("sys.stdin", src):
      errcode, out, err = self.run_cli("-f", "sdl")
    self.assertEqual(errcode, 0)
    self.assertEqual(out, X360_LINUX + ",Pad,a:b0,platform:Linux,\n")
    self.assertEqual(err, "-:1:43: invalid button name\n")

  def test_column_counts_bytes (self):
    src = io.StringIO(X360_LINUX + ",Manette é,a:b0,q:b1,platform:Linux,\n")
    with mock.patch("sys.stdin", src):
      errcode, out, err = self.run_cli("--check")
    self.assertEqual(errcode, 1)
    self.assertEqual(err, "-:1:50: invalid button name\n")


if __name__ == "__main__":
  unittest.main()
