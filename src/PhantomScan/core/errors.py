# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the errors module. This module will allow the application to:

# 1. Define one base exception every PhantomScan failure inherits from

# 2. Separate fatal identity setup problems from config problems

# 3. Give the CLI something specific to catch and turn into an exit code

from __future__ import annotations

###########################################################################

"""

Name: PhantomScanError

Function: Base class for every error PhantomScan raises on purpose. Anything

else that escapes is a genuine bug.

Arguments: message - human readable explanation

Returns: No value returned

"""

class PhantomScanError(Exception):
    """Base class for PhantomScan failures."""

#$ End PhantomScanError

###########################################################################

"""

Name: IdentityError

Function: Raised when the simulated identity cannot be built. These are

always fatal, since scanning as the wrong identity is worse than not scanning.

Arguments: message - human readable explanation

Returns: No value returned

"""

class IdentityError(PhantomScanError):
    """The simulated identity could not be constructed."""

#$ End IdentityError

class InvalidUserError(IdentityError):
    """A user token is neither a known name nor a valid number."""

#$ End InvalidUserError

class InvalidGroupError(IdentityError):
    """A group token is neither a known name nor a valid number."""

#$ End InvalidGroupError

###########################################################################

"""

Name: TooManyGroupsError

Function: Raised when adding a group would push the group set past its bound.

Arguments: limit - the bound that was hit

Returns: No value returned

"""

class TooManyGroupsError(IdentityError):
    def __init__(self, limit: int) -> None:
        ### Remember the bound so callers can show it
        self.limit = limit
        super().__init__(f"Too many groups (limit is {limit})")

#$ End TooManyGroupsError

###########################################################################

"""

Name: ConfigError

Function: Raised when the JSON config file is missing, unreadable or not a

JSON object.

Arguments: message - human readable explanation

Returns: No value returned

"""

class ConfigError(PhantomScanError):
    """The configuration file could not be used."""

#$ End ConfigError
