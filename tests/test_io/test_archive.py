"""Test writing COMBINE archives."""

import datetime
from pathlib import Path

import pydantic
import pytest

from sbmltools.io import CombineArchive, OmexDescription, VCard
from sbmltools.io.archive import SBML_LEVEL_3_VERSION_1_RELEASE_2


CEST = datetime.timezone(datetime.timedelta(hours=2))


@pytest.fixture(scope="function")
def model_files(tmp_path: Path) -> list:
    """Provide function-level fixture for two files to archive."""
    paths = []
    for name in ("base.sbml", "liver.sbml"):
        path = tmp_path / name
        path.write_text(f"<sbml>{name}</sbml>")
        paths.append(path)
    return paths


def test_add_entry(tmp_path: Path, model_files: list) -> None:
    """Test that entries are stored at the archive root."""
    archive = CombineArchive(tmp_path / "test.omex")
    entry = archive.add_entry(model_files[0])
    assert entry.location == "./base.sbml"
    assert entry.format == SBML_LEVEL_3_VERSION_1_RELEASE_2
    assert archive.main_entry is None


def test_add_entry_replaces_location(tmp_path: Path, model_files: list) -> None:
    """Test that a second file with the same name replaces the first."""
    other = tmp_path / "other"
    other.mkdir()
    duplicate = other / "base.sbml"
    duplicate.write_text("<sbml/>")
    archive = CombineArchive(tmp_path / "test.omex")
    archive.add_entry(model_files[0])
    archive.add_entry(duplicate)
    assert len(archive.entries) == 1
    assert archive.entries[0].path == duplicate


def test_add_missing_entry(tmp_path: Path) -> None:
    """Test that only existing files can be added."""
    archive = CombineArchive(tmp_path / "test.omex")
    with pytest.raises(IOError):
        archive.add_entry(tmp_path / "missing.sbml")
    with pytest.raises(IOError):
        archive.add_entry(tmp_path)


def test_set_unknown_main_entry(tmp_path: Path, model_files: list) -> None:
    """Test that the main entry must belong to the archive."""
    archive = CombineArchive(tmp_path / "test.omex")
    entry = CombineArchive(tmp_path / "other.omex").add_entry(model_files[0])
    with pytest.raises(KeyError):
        archive.set_main_entry(entry)


def _locations(archive) -> set:
    return {archive.getEntry(k).getLocation() for k in range(archive.getNumEntries())}


def test_pack(tmp_path: Path, model_files: list, open_archive) -> None:
    """Test the entries and the master flag of a packed archive."""
    archive = CombineArchive(tmp_path / "test.omex")
    archive.add_entry(model_files[0], master=True)
    archive.add_entry(model_files[1])
    archive.add_description(
        OmexDescription(creators=[VCard(family_name="Doe", given_name="Jane")])
    )
    path = archive.pack()
    assert path == tmp_path / "test.omex"
    packed = open_archive(path)
    assert {"./base.sbml", "./liver.sbml"} <= _locations(packed)
    assert packed.getMasterFile().getLocation() == "./base.sbml"
    liver = packed.getEntryByLocation("./liver.sbml")
    assert liver.getFormat() == SBML_LEVEL_3_VERSION_1_RELEASE_2
    assert not liver.getMaster()
    assert packed.extractEntryToString("./liver.sbml") == "<sbml>liver.sbml</sbml>"


def test_pack_replaces_file(tmp_path: Path, model_files: list, open_archive) -> None:
    """Test that an existing archive file is replaced."""
    path = tmp_path / "test.omex"
    path.write_text("outdated")
    archive = CombineArchive(path)
    archive.add_entry(model_files[1])
    archive.pack()
    assert "./liver.sbml" in _locations(open_archive(path))


def test_pack_without_description(
    tmp_path: Path, model_files: list, open_archive
) -> None:
    """Test that archives without description have no creators."""
    archive = CombineArchive(tmp_path / "test.omex")
    archive.add_entry(model_files[0])
    packed = open_archive(archive.pack())
    assert packed.getMasterFile() is None
    assert packed.getMetadataForLocation(".").getNumCreators() == 0


def test_metadata(tmp_path: Path, model_files: list, open_archive) -> None:
    """Test the description of the archive."""
    created = datetime.datetime(2020, 5, 17, 14, 30, tzinfo=CEST)
    archive = CombineArchive(tmp_path / "test.omex")
    archive.add_entry(model_files[0], master=True)
    archive.add_description(
        OmexDescription(
            creators=[
                VCard(
                    family_name="Doe",
                    given_name="Jane",
                    email="jane.doe@example.org",
                    organization="University of Examples",
                )
            ],
            created=created,
            description="Two models",
        )
    )
    description = open_archive(archive.pack()).getMetadataForLocation(".")
    assert description.getNumCreators() == 1
    creator = description.getCreator(0)
    assert creator.getFamilyName() == "Doe"
    assert creator.getGivenName() == "Jane"
    assert creator.getEmail() == "jane.doe@example.org"
    assert creator.getOrganization() == "University of Examples"
    assert description.getDescription() == "Two models"
    date = description.getCreated()
    assert (date.getYear(), date.getMonth(), date.getDay()) == (2020, 5, 17)
    assert (date.getHour(), date.getMinute()) == (12, 30)


def test_vcard_requires_names() -> None:
    """Test that creators need a family and a given name."""
    with pytest.raises(pydantic.ValidationError):
        VCard(family_name="Doe")
