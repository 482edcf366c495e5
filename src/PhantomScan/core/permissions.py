# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the permissions module. This module will allow the application to:

# 1. Decide whether the simulated identity could execute, write or read an entry

# 2. Decide whether a setuid / setgid bit actually means anything to that identity

# Everything here is a pure function of (snapshot, identity). uid 0 bypasses

# the execute check only; write and read are judged from the bits alone.

from __future__ import annotations

import stat

from .identity import Identity
from .snapshot import MetadataSnapshot

###########################################################################

"""

Name: _granted

Function: The owner/group/other rule shared by all three checks. Other bit

wins outright; the owner bit counts only for the owning uid; the group bit

counts only if the owning gid is one of our groups.

Arguments: snapshot - the entry's metadata

            identity - who we're pretending to be

            owner_bit, group_bit, other_bit - the stat bits for this access kind

Returns: Boolean - True if the bits grant the access

"""

def _granted(snapshot: MetadataSnapshot, identity: Identity, owner_bit: int, group_bit: int, other_bit: int) -> bool:
    if snapshot.has(other_bit):
        return True
    if snapshot.has(owner_bit) and snapshot.uid == identity.uid:
        return True
    if snapshot.has(group_bit) and identity.in_group(snapshot.gid):
        return True
    return False

#$ End _granted

def is_executable(snapshot: MetadataSnapshot, identity: Identity) -> bool:
    """Execute (or, for directories, search) access. uid 0 always passes."""
    if identity.uid == 0:
        return True
    return _granted(snapshot, identity, stat.S_IXUSR, stat.S_IXGRP, stat.S_IXOTH)

def is_setuid(snapshot: MetadataSnapshot, identity: Identity) -> bool:
    """Set-user-id and runnable by us; a setuid file we can't run grants nothing."""
    return is_executable(snapshot, identity) and snapshot.has(stat.S_ISUID)

def is_setgid(snapshot: MetadataSnapshot, identity: Identity) -> bool:
    """Set-group-id and runnable by us."""
    return is_executable(snapshot, identity) and snapshot.has(stat.S_ISGID)

def is_writable(snapshot: MetadataSnapshot, identity: Identity) -> bool:
    """Write access from the bits alone. No root bypass."""
    return _granted(snapshot, identity, stat.S_IWUSR, stat.S_IWGRP, stat.S_IWOTH)

def is_readable(snapshot: MetadataSnapshot, identity: Identity) -> bool:
    """Read access from the bits alone. No root bypass."""
    return _granted(snapshot, identity, stat.S_IRUSR, stat.S_IRGRP, stat.S_IROTH)
