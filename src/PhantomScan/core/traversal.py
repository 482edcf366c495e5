# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the traversal module. This module will allow the application to:

# 1. Canonicalize each root path before scanning it

# 2. Walk a directory tree depth-first without ever following symlinks

# 3. Classify every entry against the simulated identity

# 4. Only descend into directories the simulated identity could search

# 5. Log and skip anything that fails, at the smallest scope possible

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from . import messages
from .findings import FindingStore
from .identity import Identity
from .permissions import is_executable
from .snapshot import MetadataSnapshot

### Used when pathconf can't tell us PATH_MAX
DEFAULT_MAX_PATH_LENGTH = 4096

###########################################################################

"""

Name: max_path_length_default

Function: Ask the OS for the longest path it accepts.

Arguments: None

Returns: Integer path length limit in bytes

"""

def max_path_length_default() -> int:
    try:
        limit = os.pathconf("/", "PC_PATH_MAX")
    except (ValueError, OSError):
        return DEFAULT_MAX_PATH_LENGTH
    return limit if limit > 0 else DEFAULT_MAX_PATH_LENGTH

#$ End max_path_length_default

###########################################################################

"""

Name: ScanStats

Function: Running tallies for one scan, shown in the summary and JSON report.

Arguments: None (it's a dataclass, so it's just fields)

Returns: No value returned (it's a class definition)

"""

@dataclass
class ScanStats:
    ### Roots that resolved and were walked
    roots_scanned: int = 0
    ### Roots that couldn't be resolved
    roots_failed: int = 0
    ### Directories opened (roots included)
    directories: int = 0
    ### Entries that were lstat'ed successfully
    entries: int = 0
    symlinks_skipped: int = 0
    ### Logged and skipped problems of any kind
    errors: int = 0

#$ End ScanStats

###########################################################################

"""

Name: ScanContext

Function: Everything one scan needs, passed down explicitly through the

walk: who we are, where findings go, and the counters.

Arguments: None (it's a dataclass, so it's just fields)

Returns: No value returned (it's a class definition)

"""

@dataclass
class ScanContext:
    ### The simulated identity every check is made against
    identity: Identity
    ### Where classified entries end up
    store: FindingStore
    ### Tallies for the summary
    stats: ScanStats = field(default_factory=ScanStats)
    ### Child paths at or over this many bytes are skipped
    max_path_length: int = field(default_factory=max_path_length_default)

#$ End ScanContext

###########################################################################

"""

Name: canonicalize_root

Function: Turn a root argument into an absolute, symlink-free path. A root

that doesn't resolve is logged and skipped; the other roots still run.

Arguments: argument - the path as given on the command line

Returns: The resolved Path, or None if it couldn't be resolved

"""

def canonicalize_root(argument: str | os.PathLike) -> Optional[Path]:
    try:
        return Path(argument).resolve(strict=True)
    except OSError as exc:
        messages.os_error("resolve path", argument, exc)
    except RuntimeError as exc:
        ### Symlink loop on older Pythons
        messages.warn(f'Unable to resolve path "{argument}": {exc}')
    return None

#$ End canonicalize_root

###########################################################################

"""

Name: scan_paths

Function: Scan every root, each on its own. A bad root never stops the

others.

Arguments: paths - root arguments, in the order given

            context - the ScanContext for this run

Returns: Number of roots that were actually scanned

"""

def scan_paths(paths: Iterable[str | os.PathLike], context: ScanContext) -> int:
    scanned = 0
    for argument in paths:
        root = canonicalize_root(argument)
        if root is None:
            context.stats.roots_failed += 1
            context.stats.errors += 1
            continue
        scan_directory(root, context)
        context.stats.roots_scanned += 1
        scanned += 1
    return scanned

#$ End scan_paths

###########################################################################

"""

Name: scan_directory

Function: Walk a directory tree depth-first, classifying each entry and

descending into the subdirectories the simulated identity could enter.

The walk keeps its own stack of open listings, so tree depth is limited only

by the path length check, never by Python's recursion limit. A subdirectory's

listing is pushed as soon as it is found, which keeps discovery in pre-order.

Every listing is closed when its frame pops, or when an error unwinds the stack.

Arguments: directory - absolute path of the directory to list

            context - the ScanContext for this run

Returns: No value returned

"""

def scan_directory(directory: Path, context: ScanContext) -> None:
    root_frame = _open_listing(directory, context)
    if root_frame is None:
        return

    ### (directory, scandir iterator) pairs, deepest last
    stack: List[Tuple[Path, Iterator[os.DirEntry]]] = [root_frame]
    try:
        while stack:
            current, listing = stack[-1]
            try:
                entry = next(listing, None)
            except OSError as exc:
                ### readdir itself failed part way; keep what we have
                messages.os_error("read dir", current, exc)
                context.stats.errors += 1
                entry = None

            if entry is None:
                stack.pop()
                listing.close()
                continue

            subdirectory = _visit(current / entry.name, context)
            if subdirectory is not None:
                frame = _open_listing(subdirectory, context)
                if frame is not None:
                    stack.append(frame)
    finally:
        for _, listing in stack:
            listing.close()

#$ End scan_directory

###########################################################################

"""

Name: _open_listing

Function: Open one directory for listing. Failure is logged and the

subtree is abandoned.

Arguments: directory - absolute path of the directory to open

            context - the ScanContext for this run

Returns: A (directory, scandir iterator) frame, or None if it wouldn't open

"""

def _open_listing(directory: Path, context: ScanContext) -> Optional[Tuple[Path, Iterator[os.DirEntry]]]:
    try:
        listing = os.scandir(directory)
    except OSError as exc:
        ### Permission denied, not a directory, gone already...
        messages.os_error("open dir", directory, exc)
        context.stats.errors += 1
        return None
    context.stats.directories += 1
    return directory, listing

#$ End _open_listing

###########################################################################

"""

Name: _visit

Function: Handle one child: length check, lstat, skip links, classify.

Arguments: child - absolute path of the entry

            context - the ScanContext for this run

Returns: The child's path if it is a directory we should descend into,

otherwise None

"""

def _visit(child: Path, context: ScanContext) -> Optional[Path]:
    ### Leave room for the terminating NUL, like the kernel does
    if len(os.fsencode(child)) >= context.max_path_length:
        messages.warn(f'name too long "{child}"')
        context.stats.errors += 1
        return None

    try:
        snapshot = MetadataSnapshot.from_stat(os.lstat(child))
    except OSError as exc:
        messages.os_error("lstat", child, exc)
        context.stats.errors += 1
        return None
    context.stats.entries += 1

    ### Never classify or follow links
    if snapshot.is_symlink:
        context.stats.symlinks_skipped += 1
        return None

    context.store.classify(child, snapshot, context.identity)

    ### Without search permission nothing inside is reachable for this identity
    if snapshot.is_directory and is_executable(snapshot, context.identity):
        return child
    return None

#$ End _visit
