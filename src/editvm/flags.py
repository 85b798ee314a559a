"""Runtime defaults for the edit VM.

Centralized so tests and embedders can read one place instead of
sprinkling ad-hoc environment variable reads through the interpreter.
Values are read once per VM construction; changing them mid-run has no
effect on an existing instance.
"""

import os

# Set to "1" to trace every instruction to stderr
DEBUG_ENV_VAR = "EDITVM_DEBUG"

# Tag name of the element created by WrapPrevious
DEFAULT_WRAPPER_TAG = "div"

# How WrapPrevious treats the stored cursor index:
#   "literal" leaves it untouched (drift is recorded, not corrected)
#   "after" re-bases it to just past the new wrapper
WRAP_CURSOR_MODES = ("literal", "after")
DEFAULT_WRAP_CURSOR = "literal"


def env_debug_enabled():
    return os.environ.get(DEBUG_ENV_VAR, "0") == "1"
