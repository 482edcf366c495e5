# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the snapshot module. This module will allow the application to:

# 1. Capture the owner, group and mode of one entry from an lstat() call

# 2. Name the entry type (file, directory, socket, ...) for reports

from __future__ import annotations

import os
import stat
from dataclasses import dataclass

### st_mode type bits -> label used in reports, checked in this order
ENTRY_TYPES = (
    (stat.S_ISSOCK, "socket"),
    (stat.S_ISLNK, "link"),
    (stat.S_ISREG, "file"),
    (stat.S_ISBLK, "blkdev"),
    (stat.S_ISDIR, "directory"),
    (stat.S_ISCHR, "chardev"),
    (stat.S_ISFIFO, "fifo"),
)

###########################################################################

"""

Name: MetadataSnapshot

Function: The part of an lstat() result the permission checks need. The full

st_mode is kept so both the type and the permission bits can be read from it.

Arguments: None (it's a dataclass, so it's just fields)

Returns: No value returned (it's a class definition)

"""

@dataclass(frozen=True)
class MetadataSnapshot:
    ### Owning user id
    uid: int
    ### Owning group id
    gid: int
    ### Raw st_mode (type bits + permission bits)
    mode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "MetadataSnapshot":
        return cls(uid=st.st_uid, gid=st.st_gid, mode=st.st_mode)

    @property
    def permissions(self) -> int:
        ### rwx for all three classes plus setuid/setgid/sticky
        return stat.S_IMODE(self.mode)

    @property
    def entry_type(self) -> str:
        for check, label in ENTRY_TYPES:
            if check(self.mode):
                return label
        return "unknown"

    @property
    def is_directory(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self.mode)

    def has(self, bit: int) -> bool:
        return bool(self.mode & bit)

#$ End MetadataSnapshot
