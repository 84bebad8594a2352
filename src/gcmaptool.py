#!/usr/bin/env python3
# encoding=utf-8

# Read a game controller mapping database, report bad lines and fields,
# and write the mappings back out as YAML or as normalized mapping lines.

import sys, argparse
import yaml

import gcdb


FORMATS = ('yaml', 'sdl')

# Config file keys, and their values when neither config nor command line set them.
DEFAULTS = {
  'format': 'yaml',
  'platform': None,
  'strict': False,
  }


def check_config (cfg):
  """Validate a config mapping (as loaded from YAML); returns a new dict."""
  if cfg is None:
    return {}
  try:
    items = cfg.items()
  except AttributeError:
    raise ValueError("Config must be a mapping, not {!r}".format(cfg))
  retval = {}
  for k, v in items:
    if k not in DEFAULTS:
      raise ValueError("Unknown config key '{}'".format(k))
    if k == 'format' and v not in FORMATS:
      raise ValueError("Unknown output format '{}'".format(v))
    if k == 'strict' and not isinstance(v, bool):
      raise ValueError("Config key 'strict' must be true or false, not {!r}".format(v))
    if k == 'platform' and v is not None:
      v = str(v)
    retval[k] = v
  return retval

def load_config (srcname):
  with open(srcname, "rt") as infile:
    cfg = yaml.safe_load(infile)
  return check_config(cfg)


def report (db, srcname, errstream):
  """Print problems as file:line:column: message, column counting UTF-8 bytes from 1."""
  for lineno, err in db.problems:
    print("{}:{}:{}: {}".format(srcname, lineno, err.position + 1, err.description), file=errstream)

def select (db, platform=None, strict=False):
  retval = []
  for m in db:
    if platform is not None and m.platform != platform:
      continue
    if strict and m.errors:
      continue
    retval.append(m)
  return retval

def dump_yaml (mappings, outstream):
  yaml.safe_dump([ m.to_dict() for m in mappings ], outstream,
                 default_flow_style=False, sort_keys=False, allow_unicode=True)

def dump_sdl (mappings, outstream):
  for m in mappings:
    outstream.write(m.to_line())
    outstream.write("\n")

DUMPERS = {
  'yaml': dump_yaml,
  'sdl': dump_sdl,
  }



def cli (argv):
  parser = argparse.ArgumentParser(prog='gcmaptool')
  parser.add_argument('-i', '--input', metavar='FILE', nargs=1,
                      help='Mapping database to read [-]')
  parser.add_argument('-o', '--output', metavar='FILE', nargs=1,
                      help='Output file [-]')
  parser.add_argument('-f', '--format', metavar='FMT', type=str, nargs=1,
                      help='Output format, yaml or sdl [yaml]')
  parser.add_argument('-p', '--platform', metavar='NAME', type=str, nargs=1,
                      help='Only keep mappings for this platform')
  parser.add_argument('-c', '--config', metavar='FILE', nargs=1,
                      help='YAML file with default settings')
  parser.add_argument('--strict', action='store_true',
                      help='Drop mappings that have any bad field')
  parser.add_argument('--check', action='store_true',
                      help='Only report problems; exit status 1 if there are any')

  args = parser.parse_args(argv[1:])

  srcname = args.input[-1] if args.input else None
  dstname = args.output[-1] if args.output else None

  settings = dict(DEFAULTS)
  try:
    if args.config:
      settings.update(load_config(args.config[-1]))
    if args.format:
      settings.update(check_config({ 'format': args.format[-1] }))
  except (OSError, ValueError, yaml.YAMLError) as e:
    print("gcmaptool: {}".format(e), file=sys.stderr)
    return 2
  if args.platform:
    settings['platform'] = args.platform[-1]
  if args.strict:
    settings['strict'] = True

  if srcname:
    with open(srcname, "rt", encoding="utf-8") as infile:
      db = gcdb.load(infile)
  else:
    db = gcdb.load(sys.stdin)

  report(db, srcname or "-", sys.stderr)
  if args.check:
    return 1 if db.problems else 0

  mappings = select(db, settings['platform'], settings['strict'])
  dumper = DUMPERS[settings['format']]
  if dstname:
    with open(dstname, "wt", encoding="utf-8") as outfile:
      dumper(mappings, outfile)
  else:
    dumper(mappings, sys.stdout)

  return 0


def main ():
  sys.exit(cli(sys.argv))


if __name__ == "__main__":
  main()
