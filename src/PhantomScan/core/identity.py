# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the identity module. This module will allow the application to:

# 1. Build the simulated identity (uid + group set) the scan pretends to be

# 2. Inherit the caller's own groups when no user is requested

# 3. Pull a named user's group memberships from the group database

# 4. Add extra groups by name or number, warning about unknown numeric gids

# 5. Announce the identity that was actually simulated

from __future__ import annotations

import grp
import os
import pwd
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from . import messages
from .errors import InvalidGroupError, InvalidUserError, TooManyGroupsError
from .utils import group_name, id_label, parse_number

### Used when the platform won't tell us NGROUPS_MAX
DEFAULT_MAX_GROUPS = 65536

###########################################################################

"""

Name: Identity

Function: The simulated user. Frozen, since every permission check in a run

must see the same uid and groups.

Arguments: None (it's a dataclass, so it's just fields)

Returns: No value returned (it's a class definition)

"""

@dataclass(frozen=True)
class Identity:
    ### The uid the permission checks compare against owners
    uid: int
    ### Group ids in the order they were discovered, no duplicates
    groups: Tuple[int, ...] = ()
    ### passwd name for the uid, None when the uid has no entry
    name: Optional[str] = None

    def in_group(self, gid: int) -> bool:
        return gid in self.groups

#$ End Identity

###########################################################################

"""

Name: GroupSet

Function: Builder that collects gids in order, drops duplicates and enforces

the group bound. Only used while the identity is being resolved.

Arguments: limit - the largest number of groups allowed

Returns: No value returned

"""

class GroupSet:
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._gids: List[int] = []

    def add(self, gid: int) -> None:
        ### Already a member, nothing to do
        if gid in self._gids:
            return
        ### One more would go past the bound
        if len(self._gids) >= self.limit:
            raise TooManyGroupsError(self.limit)
        self._gids.append(gid)

    def extend(self, gids: Iterable[int]) -> None:
        for gid in gids:
            self.add(gid)

    def freeze(self) -> Tuple[int, ...]:
        return tuple(self._gids)

#$ End GroupSet

###########################################################################

"""

Name: max_groups_default

Function: Ask the OS how many supplementary groups a process may have.

Arguments: None

Returns: Integer bound on the group set

"""

def max_groups_default() -> int:
    try:
        limit = os.sysconf("SC_NGROUPS_MAX")
    except (ValueError, OSError):
        return DEFAULT_MAX_GROUPS
    ### -1 means "no limit reported"
    return limit if limit > 0 else DEFAULT_MAX_GROUPS

#$ End max_groups_default

###########################################################################

"""

Name: resolve_identity

Function: Work out who we are pretending to be.

With no user, the caller's real uid and groups (plus primary group) are used.

With a user, a passwd name is tried first, then a number. A known user gets its

group memberships from the group database. An unknown numeric uid still works,

just with no groups. Extra groups are then added one by one.

Arguments: user_spec - user name or number, or None for the caller

            groups_spec - comma separated group names/numbers, or None

            max_groups - group bound, defaults to NGROUPS_MAX

            announce - print the "[*] uid=..." summary line when True

Returns: The frozen Identity

"""

def resolve_identity(
    user_spec: Optional[str] = None,
    groups_spec: Optional[str] = None,
    *,
    max_groups: Optional[int] = None,
    announce: bool = True,
) -> Identity:
    groups = GroupSet(max_groups if max_groups is not None else max_groups_default())

    if user_spec is None:
        uid, name = _inherit_caller(groups)
    else:
        uid, name = _lookup_user(user_spec, groups)

    ### Extra groups go on top of whatever the user already had
    if groups_spec:
        for token in groups_spec.split(","):
            ### ",," and trailing commas are just skipped
            if token:
                groups.add(_lookup_group(token))

    identity = Identity(uid=uid, groups=groups.freeze(), name=name)
    if announce:
        messages.info(describe_identity(identity))
    return identity

#$ End resolve_identity

###########################################################################

"""

Name: _inherit_caller

Function: Fill the group set from the calling process: its supplementary

groups, and its primary group if getgroups left that out.

Arguments: groups - the GroupSet to fill

Returns: Tuple of (uid, name or None)

"""

def _inherit_caller(groups: GroupSet) -> Tuple[int, Optional[str]]:
    uid = os.getuid()
    try:
        entry = pwd.getpwuid(uid)
    except KeyError:
        entry = None
        messages.warn(f"Unable to find uid {uid}, trying anyway...")

    groups.extend(os.getgroups())
    ### Our own primary group always counts
    groups.add(entry.pw_gid if entry is not None else os.getgid())
    return uid, entry.pw_name if entry is not None else None

#$ End _inherit_caller

###########################################################################

"""

Name: _lookup_user

Function: Resolve the requested user. Name first, then number. A known

user brings its group list along, an unknown uid gets a warning and no groups.

Arguments: user_spec - the -u token

            groups - the GroupSet to fill

Returns: Tuple of (uid, name or None)

"""

def _lookup_user(user_spec: str, groups: GroupSet) -> Tuple[int, Optional[str]]:
    try:
        entry = pwd.getpwnam(user_spec)
    except KeyError:
        entry = None

    if entry is None:
        uid = parse_number(user_spec)
        if uid is None:
            raise InvalidUserError(f"Invalid user id: {user_spec}!")
        try:
            entry = pwd.getpwuid(uid)
        except KeyError:
            ### No record at all: scan as a bare uid without any groups
            messages.warn(f"Unable to find uid {uid}, trying anyway...")
            return uid, None

    groups.extend(os.getgrouplist(entry.pw_name, entry.pw_gid))
    ### getgrouplist normally includes the base gid, but make sure
    groups.add(entry.pw_gid)
    return entry.pw_uid, entry.pw_name

#$ End _lookup_user

###########################################################################

"""

Name: _lookup_group

Function: Resolve a single -g token to a gid. Unknown names are fatal,

unknown numbers only earn a warning.

Arguments: token - group name or number

Returns: The gid to add

"""

def _lookup_group(token: str) -> int:
    try:
        return grp.getgrnam(token).gr_gid
    except KeyError:
        pass

    gid = parse_number(token)
    if gid is None:
        raise InvalidGroupError(f"Unknown/invalid group: {token}")
    try:
        return grp.getgrgid(gid).gr_gid
    except KeyError:
        ### Dangling gid with no name: still worth simulating
        messages.warn(f"Unable to find gid {token}, trying anyway...")
        return gid

#$ End _lookup_group

###########################################################################

"""

Name: describe_identity

Function: Render the identity as "uid=1000(alice), groups=1000(alice),27(sudo)".

Arguments: identity - the Identity to describe

Returns: The summary string (without the "[*]" tag)

"""

def describe_identity(identity: Identity) -> str:
    groups = ",".join(id_label(gid, group_name(gid)) for gid in identity.groups)
    return f"uid={id_label(identity.uid, identity.name)}, groups={groups}"

#$ End describe_identity
