# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the utils module. This module will allow the application to:

# 1. Parse user and group numbers the way C's strtol(..., 0) would

# 2. Turn uids and gids into names for display, falling back to numbers

# 3. Format permission bits as four octal digits

# 4. Read the JSON configuration file

from __future__ import annotations

import grp
import json
import pwd
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

### 0x1f (hex), 017 (octal), 0, or plain decimal. No signs, no whitespace.
_NUMBER_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*")

###########################################################################

"""

Name: parse_number

Function: Parse a user or group id with automatic base detection: a 0x

prefix means hex, a leading zero means octal, anything else is decimal.

Arguments: text - the token to parse

Returns: The integer value, or None if the token isn't a valid number

"""

def parse_number(text: str) -> Optional[int]:
    if not _NUMBER_RE.fullmatch(text):
        return None
    if text[:2].lower() == "0x":
        return int(text[2:], 16)
    if len(text) > 1 and text.startswith("0"):
        return int(text[1:], 8)
    return int(text)

#$ End parse_number

###########################################################################

"""

Name: user_name

Function: Look up the login name for a uid.

Arguments: uid - user ID integer

Returns: The name, or None if the uid has no passwd entry

"""

def user_name(uid: int) -> Optional[str]:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None

#$ End user_name

###########################################################################

"""

Name: group_name

Function: Look up the group name for a gid.

Arguments: gid - group ID integer

Returns: The name, or None if the gid has no group entry

"""

def group_name(gid: int) -> Optional[str]:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None

#$ End group_name

###########################################################################

"""

Name: owner_names

Function: Names for the owner and group of an entry, falling back to the

plain numbers when the databases don't know them.

Arguments: uid - user ID integer

            gid - group ID integer

Returns: Tuple of (owner, group) strings

"""

def owner_names(uid: int, gid: int) -> tuple[str, str]:
    return user_name(uid) or str(uid), group_name(gid) or str(gid)

#$ End owner_names

###########################################################################

"""

Name: id_label

Function: Render an id with its name in parentheses, "?" when unknown.

Arguments: number - the uid or gid

            name - the resolved name, if any

Returns: String like "1000(alice)" or "4242(?)"

"""

def id_label(number: int, name: Optional[str]) -> str:
    return f"{number}({name if name is not None else '?'})"

#$ End id_label

def octal_mode(permissions: int) -> str:
    return f"{permissions:04o}"

###########################################################################

"""

Name: read_config

Function: Read the JSON configuration file. No path means no config.

Arguments: path - optional path to the config file

Returns: Dictionary containing the parsed config data

"""

def read_config(path: Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc.strerror or exc}") from exc
    except ValueError as exc:
        ### json.JSONDecodeError is a ValueError
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    ### The top level has to be an object so we can look keys up
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data

#$ End read_config
