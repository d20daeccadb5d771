"""Test the extraction of species identifiers and their annotations."""

import libsbml
import pytest

from sbmltools.exceptions import CompartmentNotFoundError
from sbmltools.manipulation import extract_species_ids, filter_cv_terms
from sbmltools.manipulation.species import format_species_row


CHEBI_WATER = "https://identifiers.org/CHEBI:15377"
KEGG_WATER = "https://identifiers.org/kegg.compound:C00001"
MNX_WATER = "https://identifiers.org/metanetx.chemical:MNXM2"


@pytest.fixture(scope="function")
def nested_document() -> libsbml.SBMLDocument:
    """Provide a document whose species has nested and other CV terms."""
    doc = libsbml.SBMLDocument(3, 2)
    model = doc.createModel()
    specie = model.createSpecies()
    specie.setId("water")
    specie.setMetaId("meta_water")
    outer = libsbml.CVTerm(libsbml.BIOLOGICAL_QUALIFIER)
    outer.setBiologicalQualifierType(libsbml.BQB_IS)
    outer.addResource(CHEBI_WATER)
    nested = libsbml.CVTerm(libsbml.BIOLOGICAL_QUALIFIER)
    nested.setBiologicalQualifierType(libsbml.BQB_IS)
    nested.addResource(MNX_WATER)
    outer.addNestedCVTerm(nested)
    specie.addCVTerm(outer)
    other = libsbml.CVTerm(libsbml.BIOLOGICAL_QUALIFIER)
    other.setBiologicalQualifierType(libsbml.BQB_IS_VERSION_OF)
    other.addResource(KEGG_WATER)
    specie.addCVTerm(other)
    return doc


def test_extract_species_ids(fbc_document: libsbml.SBMLDocument) -> None:
    """Test that the species of a compartment are reported in model order."""
    rows = list(extract_species_ids(fbc_document, "c"))
    assert [sid for sid, _ in rows] == ["A_c", "B_c", "C_c", "D_c"]
    assert rows[0][1] == [CHEBI_WATER, KEGG_WATER]
    assert rows[1][1] == []


def test_extract_species_ids_pattern(fbc_document: libsbml.SBMLDocument) -> None:
    """Test that resources are filtered by a regular expression."""
    rows = dict(extract_species_ids(fbc_document, "c", pattern="CHEBI"))
    assert rows["A_c"] == [CHEBI_WATER]


def test_extract_species_ids_other_compartment(
    fbc_document: libsbml.SBMLDocument,
) -> None:
    """Test that species of other compartments are excluded."""
    assert list(extract_species_ids(fbc_document, "e")) == [("A_e", [])]


def test_extract_species_ids_unknown_compartment(
    fbc_document: libsbml.SBMLDocument,
) -> None:
    """Test that an unknown compartment is rejected."""
    with pytest.raises(CompartmentNotFoundError):
        list(extract_species_ids(fbc_document, "nucleus"))


def test_filter_cv_terms(nested_document: libsbml.SBMLDocument) -> None:
    """Test that nested CV terms are searched and qualifiers respected."""
    specie = nested_document.getModel().getSpecies("water")
    assert filter_cv_terms(specie) == [CHEBI_WATER, MNX_WATER]
    assert filter_cv_terms(specie, recursive=False) == [CHEBI_WATER]
    assert filter_cv_terms(specie, libsbml.BQB_IS_VERSION_OF) == [KEGG_WATER]
    assert filter_cv_terms(specie, pattern="metanetx") == [MNX_WATER]


def test_filter_cv_terms_without_annotation(
    fbc_document: libsbml.SBMLDocument,
) -> None:
    """Test that unannotated elements have no resources."""
    assert filter_cv_terms(fbc_document.getModel().getSpecies("B_c")) == []


def test_format_species_row() -> None:
    """Test the tab-separated output format."""
    assert format_species_row("A_c", ["a", "b"]) == "A_c\ta, b"
    assert format_species_row("B_c", []) == "B_c\t"
