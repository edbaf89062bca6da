import enum

VERSION = "1.0.0"


class ExitCode(enum.IntEnum):
    OK = 0
    USAGE = 1
    FILE_OPEN = 2
    FILE_PARSE = 3
    EXT_SUGGEST = 4
    CLANG_FAIL = 5
    MEMORY = 6


class VoidcasterError(Exception):
    """Base class for errors raised by voidcaster"""


class PatchError(VoidcasterError):
    """A queued modification could not be applied to its file"""


class QueueDrainedError(VoidcasterError):
    """The modification queue was used after it had been drained"""


class UserQuit(VoidcasterError):
    """The user closed the interactive prompt"""
