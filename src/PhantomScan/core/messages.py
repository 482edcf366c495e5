# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the messages module. This module will allow the application to:

# 1. Print status lines ("[*] ...") to stdout

# 2. Print warnings and errors ("[!] ...") to stderr so they never mix with findings

# 3. Turn an OSError into a line that names the operation and the path

from __future__ import annotations

import sys

from .colors import Palette, apply_color

### Tags that open every console line
INFO_TAG = "[*]"
ALERT_TAG = "[!]"

###########################################################################

"""

Name: info

Function: Print a status line on stdout.

Arguments: message - text to print (without the tag)

Returns: No value returned

"""

def info(message: str) -> None:
    print(f"{INFO_TAG} {message}", file=sys.stdout)

#$ End info

###########################################################################

"""

Name: warn

Function: Print a recoverable problem on stderr in yellow. The scan keeps

going after a warning.

Arguments: message - text to print (without the tag)

Returns: No value returned

"""

def warn(message: str) -> None:
    line = f"{ALERT_TAG} {message}"
    print(apply_color(line, Palette.YELLOW, stream=sys.stderr), file=sys.stderr)

#$ End warn

###########################################################################

"""

Name: error

Function: Print a fatal or root-level problem on stderr in red.

Arguments: message - text to print (without the tag)

Returns: No value returned

"""

def error(message: str) -> None:
    line = f"{ALERT_TAG} {message}"
    print(apply_color(line, Palette.RED, Palette.BOLD, stream=sys.stderr), file=sys.stderr)

#$ End error

###########################################################################

"""

Name: os_error

Function: Warn about a failed filesystem call, the same way perror would:

what we tried, on which path, and what the OS said.

Arguments: action - what we were doing ("open dir", "lstat", ...)

            path - the path involved

            exc - the OSError that came back

Returns: No value returned

"""

def os_error(action: str, path: object, exc: OSError) -> None:
    ### strerror is None for some synthetic errors, so fall back to str(exc)
    reason = exc.strerror or str(exc)
    warn(f'Unable to {action} "{path}": {reason}')

#$ End os_error
