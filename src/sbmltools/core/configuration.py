"""Provide a global configuration object."""


import logging
from textwrap import dedent
from typing import Iterable, List, Mapping, Union

from ..io.archive import SBML_LEVEL_3_VERSION_1_RELEASE_2, VCard
from .singleton import Singleton


__all__ = ("Configuration",)


logger = logging.getLogger(__name__)


class Configuration(metaclass=Singleton):
    """
    Define a global configuration object.

    The attributes of this singleton object are used as default values by the
    sbmltools functions and command line programs.

    Attributes
    ----------
    csv_separator : str
        The column separator of reaction change tables (default ";").
    spatial_dimensions : float
        The spatial dimensions given to compartments that do not declare
        any (default 3).
    compartment_size : float
        The size given to compartments without a size (default NaN).
    initial_amount : float
        The initial amount given to species that neither declare an initial
        amount nor an initial concentration (default NaN).
    sbml_extension : str
        The file extension of temporary SBML files (default ".sbml").
    archive_extension : str
        The file extension of generated COMBINE archives (default ".omex").
    sbml_format : str
        The format URI of SBML entries in COMBINE archives.
    archive_creators : list of VCard
        The creators written to the description of COMBINE archives.

    """

    def __init__(self, **kwargs) -> None:
        """Initialize the configuration with its default attribute values."""
        super().__init__(**kwargs)
        self.csv_separator = ";"
        self.spatial_dimensions = 3.0
        self.compartment_size = float("nan")
        self.initial_amount = float("nan")
        self.sbml_extension = ".sbml"
        self.archive_extension = ".omex"
        self.sbml_format = SBML_LEVEL_3_VERSION_1_RELEASE_2
        self._archive_creators = []

    @property
    def archive_creators(self) -> List[VCard]:
        """Return the creators written to archive descriptions."""
        return self._archive_creators

    @archive_creators.setter
    def archive_creators(self, creators: Iterable[Union[VCard, Mapping]]) -> None:
        """Set the archive creators.

        Parameters
        ----------
        creators : iterable of VCard or dict
            Either ready `VCard` instances or mappings with the fields
            `family_name`, `given_name`, `email` and `organization`.

        """
        self._archive_creators = [
            c if isinstance(c, VCard) else VCard(**c) for c in creators
        ]
        logger.debug(f"Using {len(self._archive_creators)} archive creator(s).")

    def __repr__(self) -> str:
        """Return a string representation of the current configuration values."""
        return dedent(
            f"""
            csv_separator: {self.csv_separator!r}
            spatial_dimensions: {self.spatial_dimensions}
            compartment_size: {self.compartment_size}
            initial_amount: {self.initial_amount}
            sbml_extension: {self.sbml_extension}
            archive_extension: {self.archive_extension}
            sbml_format: {self.sbml_format}
            archive_creators: {len(self.archive_creators)}
            """
        )
