"""Define global fixtures."""

import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterator

import libcombine
import libsbml
import pytest

from sbmltools import Configuration
from sbmltools.io import read_sbml_document, write_sbml_document


CHEBI_WATER = "https://identifiers.org/CHEBI:15377"
KEGG_WATER = "https://identifiers.org/kegg.compound:C00001"
MNX_WATER = "https://identifiers.org/metanetx.chemical:MNXM2"

# reaction id -> (reactants, products)
REACTIONS = {
    "R1": (["A_e"], ["A_c"]),
    "R2": (["A_c"], ["B_c"]),
    "R3": (["B_c"], ["C_c"]),
    "R4": (["A_c"], ["D_c"]),
    "R5": (["C_c"], []),
}


def _add_cv_term(sbase: libsbml.SBase, qualifier: int, *resources: str) -> None:
    cv = libsbml.CVTerm(libsbml.BIOLOGICAL_QUALIFIER)
    cv.setBiologicalQualifierType(qualifier)
    for uri in resources:
        cv.addResource(uri)
    sbase.addCVTerm(cv)


def create_fbc_document() -> libsbml.SBMLDocument:
    """Create an SBML L3V1 document with a small flux balance model.

    The model has the compartments "c" and "e", the species "A_e" in "e" and
    "A_c" to "D_c" in "c", and the irreversible reactions "R1" to "R5" with
    flux bounds. Units, sizes and initial values are not set. Species "A_c"
    is annotated with ChEBI and KEGG identifiers.

    Returns
    -------
    libsbml.SBMLDocument
        The new document.

    """
    doc = libsbml.SBMLDocument(libsbml.SBMLNamespaces(3, 1, "fbc", 2))
    doc.setPackageRequired("fbc", False)
    model: "libsbml.Model" = doc.createModel()
    model.setId("toy")
    model.setName("toy model")
    model_fbc: "libsbml.FbcModelPlugin" = model.getPlugin("fbc")
    model_fbc.setStrict(True)

    for cid in ("c", "e"):
        compartment: "libsbml.Compartment" = model.createCompartment()
        compartment.setId(cid)
        compartment.setConstant(True)

    for sid in ("A_e", "A_c", "B_c", "C_c", "D_c"):
        specie: "libsbml.Species" = model.createSpecies()
        specie.setId(sid)
        specie.setCompartment(sid[-1])
        specie.setHasOnlySubstanceUnits(False)
        specie.setBoundaryCondition(False)
        specie.setConstant(False)
    water = model.getSpecies("A_c")
    water.setMetaId("meta_A_c")
    _add_cv_term(water, libsbml.BQB_IS, CHEBI_WATER, KEGG_WATER)

    for pid, value in (("zero_bound", 0.0), ("upper_bound", 1000.0)):
        parameter: "libsbml.Parameter" = model.createParameter()
        parameter.setId(pid)
        parameter.setValue(value)
        parameter.setConstant(True)
        parameter.setSBOTerm("SBO:0000626")

    for rid, (reactants, products) in REACTIONS.items():
        reaction: "libsbml.Reaction" = model.createReaction()
        reaction.setId(rid)
        reaction.setReversible(False)
        reaction.setFast(False)
        for sid in reactants:
            reference = reaction.createReactant()
            reference.setSpecies(sid)
            reference.setStoichiometry(1.0)
            reference.setConstant(True)
        for sid in products:
            reference = reaction.createProduct()
            reference.setSpecies(sid)
            reference.setStoichiometry(1.0)
            reference.setConstant(True)
        reaction_fbc: "libsbml.FbcReactionPlugin" = reaction.getPlugin("fbc")
        reaction_fbc.setLowerFluxBound("zero_bound")
        reaction_fbc.setUpperFluxBound("upper_bound")

    objective: "libsbml.Objective" = model_fbc.createObjective()
    objective.setId("obj")
    objective.setType("maximize")
    model_fbc.setActiveObjectiveId("obj")
    flux_objective: "libsbml.FluxObjective" = objective.createFluxObjective()
    flux_objective.setReaction("R5")
    flux_objective.setCoefficient(1.0)
    return doc


def create_layout_document() -> libsbml.SBMLDocument:
    """Create an SBML L3V1 document with a layout of one reaction.

    The reaction "R1" converts "A" into "B". The reference to "A" has the
    identifier "ref_A" but its glyph points at "stale_ref"; the reference to
    "B" has no identifier while its glyph points at "ref_B". A third glyph
    depicts species "C", which "R1" does not refer to, with "ref_C".

    Returns
    -------
    libsbml.SBMLDocument
        The new document.

    """
    doc = libsbml.SBMLDocument(libsbml.SBMLNamespaces(3, 1, "layout", 1))
    doc.setPackageRequired("layout", False)
    model: "libsbml.Model" = doc.createModel()
    model.setId("layout_model")
    compartment: "libsbml.Compartment" = model.createCompartment()
    compartment.setId("c")
    compartment.setConstant(True)
    for sid in ("A", "B", "C"):
        specie: "libsbml.Species" = model.createSpecies()
        specie.setId(sid)
        specie.setCompartment("c")
        specie.setHasOnlySubstanceUnits(False)
        specie.setBoundaryCondition(False)
        specie.setConstant(False)
    reaction: "libsbml.Reaction" = model.createReaction()
    reaction.setId("R1")
    reaction.setReversible(False)
    reaction.setFast(False)
    reactant = reaction.createReactant()
    reactant.setId("ref_A")
    reactant.setSpecies("A")
    reactant.setConstant(True)
    product = reaction.createProduct()
    product.setSpecies("B")
    product.setConstant(True)

    layout_plugin: "libsbml.LayoutModelPlugin" = model.getPlugin("layout")
    layout: "libsbml.Layout" = layout_plugin.createLayout()
    layout.setId("layout")
    layout.setDimensions(
        libsbml.Dimensions(libsbml.LayoutPkgNamespaces(3, 1, 1), 400.0, 400.0)
    )
    for sid in ("A", "B", "C"):
        species_glyph: "libsbml.SpeciesGlyph" = layout.createSpeciesGlyph()
        species_glyph.setId(f"sg_{sid}")
        species_glyph.setSpeciesId(sid)
    reaction_glyph: "libsbml.ReactionGlyph" = layout.createReactionGlyph()
    reaction_glyph.setId("rg_R1")
    reaction_glyph.setReactionId("R1")
    for gid, species_glyph_id, reference_id in (
        ("srg_A", "sg_A", "stale_ref"),
        ("srg_B", "sg_B", "ref_B"),
        ("srg_C", "sg_C", "ref_C"),
    ):
        srg: "libsbml.SpeciesReferenceGlyph" = (
            reaction_glyph.createSpeciesReferenceGlyph()
        )
        srg.setId(gid)
        srg.setSpeciesGlyphId(species_glyph_id)
        srg.setSpeciesReferenceId(reference_id)
    return doc


@pytest.fixture(scope="function")
def fbc_document() -> libsbml.SBMLDocument:
    """Provide function-level fixture for a flux balance document."""
    return create_fbc_document()


@pytest.fixture(scope="function")
def layout_document() -> libsbml.SBMLDocument:
    """Provide function-level fixture for a document with a layout."""
    return create_layout_document()


@pytest.fixture(scope="function")
def fbc_file(tmp_path: Path) -> Path:
    """Provide function-level fixture for a flux balance model file."""
    path = tmp_path / "toy.xml"
    write_sbml_document(create_fbc_document(), path)
    return path


@pytest.fixture(scope="function")
def layout_file(tmp_path: Path) -> Path:
    """Provide function-level fixture for a model file with a layout."""
    path = tmp_path / "layout.xml"
    write_sbml_document(create_layout_document(), path)
    return path


@pytest.fixture(scope="function")
def reload() -> Callable[[libsbml.SBMLDocument], libsbml.SBMLDocument]:
    """Provide a function that serializes and reads a document again."""

    def _reload(doc: libsbml.SBMLDocument) -> libsbml.SBMLDocument:
        return read_sbml_document(libsbml.writeSBMLToString(doc))

    return _reload


@pytest.fixture(scope="function")
def make_zip(tmp_path: Path) -> Callable[[str, Dict[str, str]], Path]:
    """Provide a function that writes a ZIP file of text entries."""

    def _make_zip(name: str, entries: Dict[str, str]) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, mode="w") as zf:
            for arcname, content in entries.items():
                zf.writestr(arcname, content)
        return path

    return _make_zip


@pytest.fixture(scope="function")
def configuration() -> Iterator[Configuration]:
    """Provide function-level fixture for a fresh configuration."""
    Configuration.reset()
    yield Configuration()
    Configuration.reset()


@pytest.fixture(scope="function")
def open_archive() -> Iterator[Callable[[Path], libcombine.CombineArchive]]:
    """Provide a function that reads a COMBINE archive with libcombine."""
    archives = []

    def _open_archive(path: Path) -> libcombine.CombineArchive:
        archive = libcombine.CombineArchive()
        assert archive.initializeFromArchive(str(path))
        archives.append(archive)
        return archive

    yield _open_archive
    for archive in archives:
        archive.cleanUp()
