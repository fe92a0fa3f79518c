"""
Errors raised while installing a mod.

Only these unwind out of an install; scan, copy and uninstall problems are
logged where they happen and the operation carries on.
"""


class ModInstallError(Exception):
    """Base class for install failures whose message is shown to the user."""


class UnsupportedSourceType(ModInstallError):
    """The install source has an extension we don't know how to unpack."""


class ExtractionFailure(ModInstallError):
    """An archive could not be read (corrupt, encrypted, missing tool...)."""


class MissingPrerequisite(ModInstallError):
    """The mod targets something that isn't installed, e.g. paints with no bikes."""
