"""Module for shared exceptions in the sbmltools package."""


class SBMLToolsError(Exception):
    """Base class of all sbmltools errors."""

    def __init__(self, message):
        """Inherit parent behaviors."""
        super(SBMLToolsError, self).__init__(message)


class SBMLReadError(SBMLToolsError):
    """Exception for SBML documents that cannot be read."""

    pass


class CompartmentNotFoundError(SBMLToolsError):
    """Exception for compartment identifiers missing from a model."""

    pass


class ReactionNotFoundError(SBMLToolsError):
    """Exception for reaction identifiers missing from a model."""

    pass


class MalformedRowError(SBMLToolsError):
    """Exception for rows of a reaction change table that cannot be used."""

    pass


class ReactionIndexError(SBMLToolsError):
    """Exception for reaction indices outside of a model's reaction list."""

    pass
