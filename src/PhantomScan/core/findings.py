# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the findings module. This module will allow the application to:

# 1. Define the categories a finding can land in, in priority order

# 2. Define the Finding data structure (a path plus its metadata)

# 3. Route each entry into exactly one category and keep discovery order

# An entry that is both setuid and world-writable shows up only as setuid:

# the first matching category wins and the rest are never checked.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .identity import Identity
from .permissions import is_executable, is_readable, is_setgid, is_setuid, is_writable
from .snapshot import MetadataSnapshot

###########################################################################

"""

Name: Category

Function: The buckets findings are sorted into. Declaration order is the

classification priority and the report order.

Arguments: None (it's an enum)

Returns: No value returned

"""

class Category(Enum):
    SETUID = "setuid"
    SETGID = "setgid"
    WRITABLE = "writable"
    READABLE = "readable"
    EXECUTABLE_ONLY = "executable_only"

    @property
    def label(self) -> str:
        return _LABELS[self]

#$ End Category

### How each category reads in "Found N entries that are <label>"
_LABELS = {
    Category.SETUID: "set-uid executable",
    Category.SETGID: "set-gid executable",
    Category.WRITABLE: "writable",
    Category.READABLE: "readable",
    Category.EXECUTABLE_ONLY: "only executable",
}

### Always recorded
CORE_CATEGORIES: Tuple[Category, ...] = (Category.SETUID, Category.SETGID, Category.WRITABLE)
### Recorded too when the scan runs in extended mode
EXTENDED_CATEGORIES: Tuple[Category, ...] = CORE_CATEGORIES + (Category.READABLE, Category.EXECUTABLE_ONLY)

### The check behind each category
PREDICATES: Dict[Category, Callable[[MetadataSnapshot, Identity], bool]] = {
    Category.SETUID: is_setuid,
    Category.SETGID: is_setgid,
    Category.WRITABLE: is_writable,
    Category.READABLE: is_readable,
    Category.EXECUTABLE_ONLY: is_executable,
}

###########################################################################

"""

Name: Finding

Function: One entry that matched a category: where it is and what lstat()

said about it at scan time.

Arguments: None (it's a dataclass, so it's just fields)

Returns: No value returned (it's a class definition)

"""

@dataclass(frozen=True)
class Finding:
    ### Absolute path of the entry
    path: str
    ### Owner, group and mode captured during the walk
    snapshot: MetadataSnapshot

#$ End Finding

###########################################################################

"""

Name: FindingStore

Function: Append-only, per-category lists of findings. Nothing is ever

removed or rewritten once recorded, and each list stays in discovery order.

Arguments: extended - also record readable and execute-only entries

Returns: No value returned

"""

class FindingStore:
    def __init__(self, extended: bool = False) -> None:
        self.extended = extended
        ### One list per active category, in priority order
        self._entries: Dict[Category, List[Finding]] = {
            category: [] for category in (EXTENDED_CATEGORIES if extended else CORE_CATEGORIES)
        }

#$ End __init__

    ###########################################################################

    """

    Name: record

    Function: Append a finding to a category. The path is stored as its own

    str, so later changes to the caller's path objects never show up here.

    Arguments: category - the bucket to append to

                path - absolute path of the entry

                snapshot - its metadata

    Returns: The Finding that was stored

    """

    def record(self, category: Category, path: object, snapshot: MetadataSnapshot) -> Finding:
        if category not in self._entries:
            raise ValueError(f"Category {category.value} is not recorded in this scan")
        ### Links are filtered out before classification and never stored
        if snapshot.is_symlink:
            raise ValueError(f"Refusing to record symbolic link {path}")
        finding = Finding(path=str(path), snapshot=snapshot)
        self._entries[category].append(finding)
        return finding

#$ End record

    ###########################################################################

    """

    Name: classify

    Function: Run the checks in priority order and record the entry under the

    first one that matches. Later checks are not evaluated.

    Arguments: path - absolute path of the entry

                snapshot - its metadata

                identity - who we're pretending to be

    Returns: The Category it went into, or None if nothing matched

    """

    def classify(self, path: object, snapshot: MetadataSnapshot, identity: Identity) -> Optional[Category]:
        for category in self._entries:
            if PREDICATES[category](snapshot, identity):
                self.record(category, path, snapshot)
                return category
        return None

#$ End classify

    def categories(self) -> Tuple[Category, ...]:
        return tuple(self._entries)

    def findings(self, category: Category) -> Tuple[Finding, ...]:
        ### Tuple copy: readers can't append behind our back
        return tuple(self._entries[category])

    def counts(self) -> Dict[Category, int]:
        return {category: len(entries) for category, entries in self._entries.items()}

    def total(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

#$ End FindingStore
