# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the colors module. This module will allow the application to:

# 1. Hold the ANSI codes used to tag console messages

# 2. Decide whether a given stream can show them

# 3. Wrap text in colour codes, or leave it alone when colour is off

from __future__ import annotations

import os
import sys
from typing import TextIO

###########################################################################

"""

Name: Palette

Function: ANSI escape codes for the handful of colours the scanner uses.

Arguments: None (it's a class with constants)

Returns: No value returned

"""

class Palette:
    ### Fatal problems and failed roots
    RED = "\033[91m"
    ### Recoverable warnings (unreadable dirs, unknown gids)
    YELLOW = "\033[93m"
    ### Category headers
    CYAN = "\033[96m"
    ### Setuid / setgid highlight
    MAGENTA = "\033[95m"
    BOLD = "\033[1m"
    ### Turn everything back off
    RESET = "\033[0m"

#$ End Palette

###########################################################################

"""

Name: supports_color

Function: Check if a stream is a real terminal that understands ANSI codes.

Pipes and files get plain text so reports stay grep-able.

Arguments: stream - the output stream to check (defaults to stdout)

Returns: Boolean - True if colors are supported, False otherwise

"""

def supports_color(stream: TextIO | None = None) -> bool:
    ### Fall back to whatever stdout currently is (tests swap it out)
    stream = stream if stream is not None else sys.stdout
    ### TTY, and not a terminal that asked for no escapes
    return hasattr(stream, "isatty") and stream.isatty() and os.environ.get("TERM", "") != "dumb"

#$ End supports_color

### Global switch, flipped off by --no-color
ENABLE_COLOR = True

###########################################################################

"""

Name: apply_color

Function: Wrap text in colour codes when colour is enabled and the target

stream is a terminal.

Arguments: text - the string to colorize, *codes - ANSI codes to apply,

            stream - where the text is headed (defaults to stdout)

Returns: The colored string (or plain string if colors are off)

"""

def apply_color(text: str, *codes: str, stream: TextIO | None = None) -> str:
    ### Nothing to do for empty text, disabled colour or a non-terminal stream
    if not text or not ENABLE_COLOR or not supports_color(stream):
        return text
    return "".join(codes) + text + Palette.RESET

#$ End apply_color

###########################################################################

"""

Name: set_color_enabled

Function: Enable or disable color output globally.

Arguments: enabled - boolean to enable (True) or disable (False) colors

Returns: No value returned

"""

def set_color_enabled(enabled: bool) -> None:
    global ENABLE_COLOR
    ENABLE_COLOR = enabled

#$ End set_color_enabled
