"""
Write COMBINE archives (OMEX files).

A COMBINE archive is a ZIP file with a `manifest.xml` describing every
entry and its format, and a `metadata.rdf` that holds descriptive metadata
about the archive, such as its creators and dates. The archive itself is
written by libcombine; the records here collect its contents first.
"""

import datetime
import logging
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Union

import libcombine
import pydantic


__all__ = ("ArchiveEntry", "CombineArchive", "OmexDescription", "VCard")


logger = logging.getLogger(__name__)


SBML_LEVEL_3_VERSION_1_RELEASE_2 = (
    "https://identifiers.org/combine.specifications/"
    "sbml.level-3.version-1.core.release-2"
)


class VCard(pydantic.BaseModel):
    """Creator of a COMBINE archive."""

    family_name: str
    given_name: str
    email: Optional[str] = None
    organization: Optional[str] = None


class OmexDescription(pydantic.BaseModel):
    """Descriptive metadata about an archive or one of its entries."""

    about: str = "."
    creators: List[VCard] = []
    created: datetime.datetime = pydantic.Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    modified: List[datetime.datetime] = []
    description: Optional[str] = None


class ArchiveEntry(NamedTuple):
    """A file stored in a COMBINE archive."""

    path: Path
    location: str
    format: str


class CombineArchive:
    """
    Collect files and metadata and pack them into a COMBINE archive.

    Nothing is written before `pack` is called.

    Parameters
    ----------
    path : str or pathlib.Path
        The location of the archive file.

    Attributes
    ----------
    path : pathlib.Path
        The location of the archive file.
    main_entry : ArchiveEntry or None
        The entry flagged as master in the manifest.

    """

    def __init__(self, path: Union[str, Path]) -> None:
        """Initialize an empty archive."""
        self.path = Path(path)
        self.main_entry: Optional[ArchiveEntry] = None
        self._entries: Dict[str, ArchiveEntry] = {}
        self._descriptions: List[OmexDescription] = []

    @property
    def entries(self) -> List[ArchiveEntry]:
        """Return the entries in the order they were added."""
        return list(self._entries.values())

    @property
    def descriptions(self) -> List[OmexDescription]:
        """Return the descriptions added to the archive."""
        return list(self._descriptions)

    def add_entry(
        self,
        path: Union[str, Path],
        format: str = SBML_LEVEL_3_VERSION_1_RELEASE_2,
        master: bool = False,
    ) -> ArchiveEntry:
        """Add a file to the archive.

        The file is stored at the root of the archive under its own name.
        Adding a file with the same name again replaces the earlier entry.

        Parameters
        ----------
        path : str or pathlib.Path
            The file to add.
        format : str, optional
            The format URI of the file (default SBML L3V1 release 2).
        master : bool, optional
            Whether the entry is the main entry of the archive (default False).

        Returns
        -------
        ArchiveEntry
            The new entry.

        """
        path = Path(path)
        if not path.is_file():
            raise IOError(f"Cannot add '{path}' to the archive: not a file.")
        entry = ArchiveEntry(path=path, location=f"./{path.name}", format=format)
        if entry.location in self._entries:
            logger.warning(f"Replacing archive entry '{entry.location}'.")
        self._entries[entry.location] = entry
        if master:
            self.set_main_entry(entry)
        return entry

    def set_main_entry(self, entry: ArchiveEntry) -> None:
        """Flag `entry` as the master entry of the archive."""
        if entry.location not in self._entries:
            raise KeyError(f"'{entry.location}' is not an entry of this archive.")
        self.main_entry = entry

    def add_description(self, description: OmexDescription) -> None:
        """Add descriptive metadata to the archive."""
        self._descriptions.append(description)

    def pack(self) -> Path:
        """Write the archive file, replacing any existing file.

        Returns
        -------
        pathlib.Path
            The location of the written archive.

        Raises
        ------
        IOError
            If libcombine fails to add an entry or to write the archive.

        """
        logger.info(f"Packing archive {self.path.resolve()}")
        if self.path.exists():
            self.path.unlink()
        master = self.main_entry.location if self.main_entry is not None else None
        archive = libcombine.CombineArchive()
        try:
            for entry in self._entries.values():
                if not archive.addFile(
                    str(entry.path),
                    entry.location,
                    entry.format,
                    entry.location == master,
                ):
                    raise IOError(f"Cannot add '{entry.path}' to the archive.")
            for desc in self._descriptions:
                archive.addMetadata(desc.about, _to_omex_description(desc))
            if not archive.writeToFile(str(self.path)):
                raise IOError(f"Cannot write the archive '{self.path}'.")
        finally:
            archive.cleanUp()
        return self.path


def _to_vcard(creator: VCard) -> "libcombine.VCard":
    """Convert a creator record to a libcombine VCard."""
    vcard = libcombine.VCard()
    vcard.setFamilyName(creator.family_name)
    vcard.setGivenName(creator.given_name)
    if creator.email:
        vcard.setEmail(creator.email)
    if creator.organization:
        vcard.setOrganization(creator.organization)
    return vcard


def _to_date(date: datetime.datetime) -> "libcombine.Date":
    """Convert a datetime to a libcombine date in UTC."""
    if date.tzinfo is not None:
        date = date.astimezone(datetime.timezone.utc)
    return libcombine.Date(
        date.year, date.month, date.day, date.hour, date.minute, date.second, 0, 0, 0
    )


def _to_omex_description(desc: OmexDescription) -> "libcombine.OmexDescription":
    """Convert a description record to a libcombine OmexDescription."""
    omex = libcombine.OmexDescription()
    omex.setAbout(desc.about)
    if desc.description:
        omex.setDescription(desc.description)
    for creator in desc.creators:
        omex.addCreator(_to_vcard(creator))
    omex.setCreated(_to_date(desc.created))
    for date in desc.modified:
        omex.addModification(_to_date(date))
    return omex
