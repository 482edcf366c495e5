# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the CLI application for PhantomScan. This application will allow users to:
# 1. Pick a simulated user (-u) and extra groups (-g) to scan as
# 2. Walk one or more directory trees and see what that identity could reach
# 3. Print the setuid / setgid / writable findings, or write them as text or JSON
# 4. Keep common settings in a JSON config file

from __future__ import annotations  # This lets us use fancy type hints like List[str] | None

import argparse  # For parsing command line arguments
import sys  # stdout / stderr and exiting
from pathlib import Path  # For dealing with file paths
from typing import Any, Dict, List, Optional  # Type hints

### Check if we're running as a script (not imported as a module)
if __package__ is None or __package__ == "":  # support running as a script
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
#$ End conditional

from PhantomScan import __version__
from PhantomScan.core import messages
from PhantomScan.core.colors import Palette, apply_color, set_color_enabled
from PhantomScan.core.errors import ConfigError, IdentityError
from PhantomScan.core.findings import FindingStore
from PhantomScan.core.identity import resolve_identity
from PhantomScan.core.report import emit_report, report_to_dict, write_report
from PhantomScan.core.traversal import ScanContext, ScanStats, scan_paths
from PhantomScan.core.utils import read_config

###########################################################################################################

### The description string that tells people what this tool does
description = f"PhantomScan {__version__}: see what another user and group set could reach in a directory tree."

### Output formats --format and the "format" config key accept
FORMATS = ("text", "json")

###########################################################################################################

"""

Name: build_parser

Function: Builds the argument parser that handles all the command line options.

Arguments: None

Returns: An ArgumentParser object that knows about all our options

"""

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phantomscan",
        description=description,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"PhantomScan {__version__}"
    )

    ### Who to pretend to be (name or number); defaults to the caller
    parser.add_argument(
        "-u", "--user",
        help="Simulate this user name or id. Its group list replaces the caller's groups.",
    )

    ### Extra groups on top of the user's own
    parser.add_argument(
        "-g", "--groups",
        help="Comma-separated group names or ids to add to the simulated group list",
    )

    ### Also report entries that are only readable / only executable
    parser.add_argument(
        "-x", "--extended",
        action="store_true",
        help="Also record readable and execute-only entries",
    )

    parser.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Format for --output (defaults to text)",
    )

    parser.add_argument(
        "--output",
        type=Path,
        help="Write the report to this file"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to JSON configuration file"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors"
    )

    ### Quiet only hides the listing; warnings still go to stderr
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Don't print the findings to the console (use with --output)"
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Directories to scan (may also come from the config file)",
    )

    return parser

#$ End build_parser

###########################################################################################################

"""

Name: ScanOptions

Function: Command line arguments merged over the config file. Flags always

beat config values.

Arguments: args - the parsed argparse namespace

            config - the dictionary from read_config

Returns: No value returned

"""

class ScanOptions:
    def __init__(self, args: argparse.Namespace, config: Dict[str, Any]) -> None:
        self.user: Optional[str] = _as_text(args.user if args.user is not None else config.get("user"))
        self.groups: Optional[str] = args.groups if args.groups is not None else _groups_from_config(config.get("groups"))
        self.extended: bool = args.extended or bool(config.get("extended", False))
        self.format: str = args.format or str(config.get("format", "text"))
        if self.format not in FORMATS:
            raise ConfigError(f"Unknown format in config: {self.format}")
        output = args.output if args.output is not None else config.get("output")
        self.output: Optional[Path] = Path(output).expanduser() if output else None
        self.no_color: bool = args.no_color or bool(config.get("no_color", False))
        self.max_groups: Optional[int] = _as_positive_int(config, "max_groups")
        self.max_path_length: Optional[int] = _as_positive_int(config, "max_path_length")
        self.paths: List[str] = list(args.paths) or _paths_from_config(config.get("paths"))

#$ End ScanOptions

def _as_text(value: Any) -> Optional[str]:
    ### JSON configs may give the uid as a number
    return None if value is None else str(value)

def _groups_from_config(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    return str(value)

def _paths_from_config(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError("Config key 'paths' must be a string or a list of strings")
    return [str(item) for item in value]

def _as_positive_int(config: Dict[str, Any], key: str) -> Optional[int]:
    value = config.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"Config key {key!r} must be a positive integer")
    return value

###########################################################################################################

"""

Name: main

Function: The main driver: work out the identity, walk every root, print and

save the results.

Arguments: argv - Optional list of command line arguments (None means use sys.argv)

Returns: Integer exit code (0 if at least one root was scanned, 1 otherwise)

"""

def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        set_color_enabled(False)
#$ End conditional

    ### Read the config file and merge the flags over it
    try:
        options = ScanOptions(args, read_config(args.config))
    except ConfigError as exc:
        messages.error(str(exc))
        return 1
#$ End try

    if options.no_color:
        set_color_enabled(False)
#$ End conditional

    if not options.paths:
        parser.error("no paths to scan")
#$ End conditional

    ### Who are we pretending to be? (prints the "[*] uid=..." line)
    try:
        identity = resolve_identity(options.user, options.groups, max_groups=options.max_groups)
    except IdentityError as exc:
        messages.error(str(exc))
        return 1
#$ End try

    store = FindingStore(extended=options.extended)
    context = ScanContext(identity=identity, store=store)
    if options.max_path_length is not None:
        context.max_path_length = options.max_path_length
#$ End conditional

    ### Walk every root; per-entry problems are logged inside
    try:
        scanned = scan_paths(options.paths, context)
    except MemoryError:
        messages.error("Out of memory!")
        return 1
#$ End try

    if not args.quiet:
        emit_report(store)
        emit_summary(context.stats, store)
#$ End conditional

    if options.output:
        write_report(report_to_dict(identity, store, context.stats), store, options.output, options.format)
#$ End conditional

    if not scanned:
        messages.error("No paths could be scanned")
        return 1
#$ End conditional
    return 0

#$ End main

###########################################################################################################

"""

Name: emit_summary

Function: One bold line on stderr with the totals for the run.

Arguments: stats - the ScanStats for the run

            store - the FindingStore with the results

Returns: No value returned

"""

def emit_summary(stats: ScanStats, store: FindingStore) -> None:
    line = (
        f"[*] Summary -> findings={store.total()} roots={stats.roots_scanned} "
        f"directories={stats.directories} entries={stats.entries} "
        f"symlinks_skipped={stats.symlinks_skipped} errors={stats.errors}"
    )
    print(apply_color(line, Palette.BOLD, stream=sys.stderr), file=sys.stderr)

#$ End emit_summary

###########################################################################################################

if __name__ == "__main__":
    sys.exit(main())
