"""
Extract tissue-specific models from a genome-scale base model.

The base model is combined with lists of reaction indices, one list per
tissue or cell type. For each list a hierarchical SBML model is created
that includes the complete base model as a submodel and declares a
`Deletion` for every reaction that is not on the list. All models are then
packed into a COMBINE archive, with the base model as its master entry.

Alternatively, flat models can be created that are copies of the base model
without the deleted reactions.
"""

import logging
import os
import tempfile
import time
import zipfile
from pathlib import Path
from typing import IO, Iterable, List, Optional, Set, Union

import libsbml
import numpy as np
import pandas as pd
from rich.progress import track

from ..core import Configuration
from ..exceptions import ReactionIndexError
from ..io.archive import CombineArchive, OmexDescription, VCard
from ..io.sbml import _check, read_sbml_document, write_sbml_document
from ..manipulation.correct import correct_model
from ..util import (
    convert_to_display_name,
    md5_checksum,
    name_to_sid,
    name_without_extension,
)


__all__ = (
    "TissueModelExtractor",
    "deleted_reaction_indices",
    "extract_tissue_models",
    "parse_reaction_list",
)


logger = logging.getLogger(__name__)


CSV_EXTENSION = ".csv"
MACOSX_HIDDEN_FOLDER = "__MACOSX"


def parse_reaction_list(handle: Union[str, Path, IO]) -> np.ndarray:
    """Read a list of 1-based reaction indices, one per line.

    Parameters
    ----------
    handle : str or pathlib.Path or file handle
        The CSV content.

    Returns
    -------
    numpy.ndarray
        The 0-based indices in file order.

    Raises
    ------
    ReactionIndexError
        If an entry is not an integer.

    """
    try:
        table = pd.read_csv(handle, header=None, usecols=[0], skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        return np.empty(0, dtype=np.int64)
    column = pd.to_numeric(table.iloc[:, 0], errors="coerce")
    if column.isna().any() or not pd.api.types.is_integer_dtype(column):
        raise ReactionIndexError(
            f"Reaction lists must contain one integer per line, got "
            f"{table.iloc[:, 0].tolist()}."
        )
    return column.to_numpy(dtype=np.int64) - 1


def deleted_reaction_indices(
    reaction_count: int, retained: Iterable[int]
) -> np.ndarray:
    """Return the positions of all reactions that are not retained.

    Parameters
    ----------
    reaction_count : int
        The number of reactions in the base model.
    retained : iterable of int
        The 0-based indices of the reactions to keep. They are expected in
        ascending order; other orders and duplicates are accepted.

    Returns
    -------
    numpy.ndarray
        The 0-based indices of the reactions to delete, ascending.

    Raises
    ------
    ReactionIndexError
        If a retained index is outside of the model's reactions.

    """
    retained = np.asarray(list(retained), dtype=np.int64)
    if retained.size > 0:
        if retained.min() < 0 or retained.max() >= reaction_count:
            raise ReactionIndexError(
                f"Reaction indices must lie between 1 and {reaction_count}, got "
                f"{retained.min() + 1} to {retained.max() + 1}."
            )
        if np.any(np.diff(retained) <= 0):
            logger.warning(
                "Reaction indices are not strictly ascending, duplicates are ignored."
            )
    return np.setdiff1d(np.arange(reaction_count, dtype=np.int64), retained)


class TissueModelExtractor:
    """
    Derive submodels from a base model and collect them in an archive.

    Creating the extractor writes the base model to a temporary file in
    `target_dir` and registers it as the master entry of the archive. The
    hierarchical submodels refer to this file by name, so they only resolve
    if they are stored next to it.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The base document from which all submodels are derived.
    archive : CombineArchive
        The archive that bundles all files.
    descriptor : str
        A name for the base model without blanks. It is used as the name of
        the base file and, with underscores replaced by blanks, as the model
        name if the model has none.
    target_dir : str or pathlib.Path
        Where to store the temporary SBML files.

    Attributes
    ----------
    base_doc_file : pathlib.Path
        The temporary file holding the base model.
    md5 : str
        The MD5 checksum of `base_doc_file`.

    """

    def __init__(
        self,
        doc: libsbml.SBMLDocument,
        archive: CombineArchive,
        descriptor: str,
        target_dir: Union[str, Path],
    ) -> None:
        """Write the base model and register it with the archive."""
        self.base_doc = doc
        self.archive = archive
        self.target_dir = Path(target_dir)
        self.base_doc_file = self.write_temporary_model_file(
            doc, descriptor, self.target_dir
        )
        self.md5 = md5_checksum(self.base_doc_file)
        self.archive.add_entry(
            self.base_doc_file, format=Configuration().sbml_format, master=True
        )
        model: "libsbml.Model" = doc.getModel()
        self.base_model_id = (
            model.getId() if model.isSetId() else name_to_sid(descriptor)
        )

    def create_tissue_model_comp(self, indices: Iterable[int]) -> libsbml.SBMLDocument:
        """Create a hierarchical model that keeps only the given reactions.

        Parameters
        ----------
        indices : iterable of int
            0-based indices of the reactions to keep.

        Returns
        -------
        libsbml.SBMLDocument
            A document with the comp package that references the base file
            and deletes all other reactions.

        """
        base_model: "libsbml.Model" = self.base_doc.getModel()
        version = self.base_doc.getVersion() if self.base_doc.getLevel() == 3 else 1
        doc = libsbml.SBMLDocument(libsbml.SBMLNamespaces(3, version, "comp", 1))
        _check(doc.setPackageRequired("comp", True), "set comp package required")

        doc_comp: "libsbml.CompSBMLDocumentPlugin" = doc.getPlugin("comp")
        emd: "libsbml.ExternalModelDefinition" = (
            doc_comp.createExternalModelDefinition()
        )
        _check(emd.setId(self.base_model_id), "set external model definition id")
        _check(emd.setSource(self.base_doc_file.name), "set external model source")
        if base_model.isSetId():
            _check(emd.setModelRef(base_model.getId()), "set external model ref")
        _check(emd.setMd5(self.md5), "set external model md5")

        model: "libsbml.Model" = doc.createModel()
        model_comp: "libsbml.CompModelPlugin" = model.getPlugin("comp")
        submodel: "libsbml.Submodel" = model_comp.createSubmodel()
        _check(
            submodel.setId(name_to_sid(base_model.getName() or self.base_model_id)),
            "set submodel id",
        )
        _check(submodel.setModelRef(self.base_model_id), "set submodel model ref")

        indices = list(indices)
        deleted = deleted_reaction_indices(base_model.getNumReactions(), indices)
        for i in deleted:
            deletion: "libsbml.Deletion" = submodel.createDeletion()
            rid = base_model.getReaction(int(i)).getId()
            _check(deletion.setIdRef(rid), f"set deletion of reaction '{rid}'")
        logger.debug(
            f"Model reaction count = {base_model.getNumReactions()}, "
            f"reaction index count = {len(indices)}, "
            f"deletion count = {submodel.getNumDeletions()}"
        )
        return doc

    def create_tissue_model(self, indices: Iterable[int]) -> libsbml.SBMLDocument:
        """Create a flat copy of the base model with only the given reactions.

        Species that no remaining reaction, rule, initial assignment, event or
        constraint refers to are removed as well, and so are flux objectives
        on removed reactions. Then the model is corrected.

        Parameters
        ----------
        indices : iterable of int
            0-based indices of the reactions to keep.

        Returns
        -------
        libsbml.SBMLDocument
            The reduced copy of the base document.

        """
        indices = list(indices)
        base_model: "libsbml.Model" = self.base_doc.getModel()
        deleted = [
            base_model.getReaction(int(i)).getId()
            for i in deleted_reaction_indices(base_model.getNumReactions(), indices)
        ]
        doc: "libsbml.SBMLDocument" = self.base_doc.clone()
        model: "libsbml.Model" = doc.getModel()
        for rid in deleted:
            model.removeReaction(rid)
        _remove_orphan_species(model)
        _remove_flux_objectives(model, set(deleted))
        correct_model(doc)
        logger.info(
            f"Initial reaction count = {base_model.getNumReactions()}, "
            f"reactions to keep = {len(indices)}, "
            f"submodel reaction count = {model.getNumReactions()}"
        )
        return doc

    def build_submodels(
        self, zip_file: Union[str, Path], flat: bool = False, progress: bool = False
    ) -> List[Path]:
        """Create one submodel per reaction list in a ZIP file.

        Parameters
        ----------
        zip_file : str or pathlib.Path
            A ZIP archive with CSV files of 1-based reaction indices. Hidden
            macOS folders, directories and other files are ignored, empty
            CSV files are skipped.
        flat : bool, optional
            Create flat models instead of hierarchical ones (default False).
        progress : bool, optional
            Display a progress bar (default False).

        Returns
        -------
        list of pathlib.Path
            The written model files, one per used CSV file, in ZIP order.

        """
        models = []
        number = 0
        with zipfile.ZipFile(zip_file) as zf:
            for info in track(
                zf.infolist(), description="Building models", disable=not progress
            ):
                name = info.filename
                if (
                    info.is_dir()
                    or not name.lower().endswith(CSV_EXTENSION)
                    or name.startswith(MACOSX_HIDDEN_FOLDER)
                ):
                    continue
                if info.file_size == 0:
                    logger.info(f"Skipping:\t{name}")
                    continue
                number += 1
                logger.info(f"Processing model number {number}:\t{name}")
                with zf.open(info) as handle:
                    indices = parse_reaction_list(handle)
                logger.debug(f"Current file contains: {indices.tolist()}")
                if flat:
                    sub_doc = self.create_tissue_model(indices)
                else:
                    sub_doc = self.create_tissue_model_comp(indices)
                descriptor = name.rsplit("/", 1)[-1]
                if descriptor.lower().endswith(CSV_EXTENSION):
                    descriptor = descriptor[: -len(CSV_EXTENSION)]
                path = self.write_temporary_model_file(
                    sub_doc, descriptor, self.target_dir
                )
                models.append(path)
        return models

    def pack_archive(
        self, models: List[Path], creators: Optional[List[VCard]] = None
    ) -> Path:
        """Add metadata and all models to the archive and write it.

        Parameters
        ----------
        models : list of pathlib.Path
            The model files to add.
        creators : list of VCard, optional
            The archive creators (default from the configuration).

        Returns
        -------
        pathlib.Path
            The written archive.

        """
        config = Configuration()
        if creators is None:
            creators = config.archive_creators
        self.archive.add_description(OmexDescription(creators=creators))
        for i, sbml in enumerate(models):
            self.archive.add_entry(sbml, format=config.sbml_format)
            logger.info(f"Adding file #{i} to archive: {Path(sbml).resolve()}")
        path = self.archive.pack()
        logger.info(f"Packing archive is done: {path.resolve()}")
        return path

    @staticmethod
    def write_temporary_model_file(
        doc: libsbml.SBMLDocument, descriptor: str, directory: Union[str, Path]
    ) -> Path:
        """Write a document to a new temporary file.

        The file is named "<descriptor>_<random>.sbml" and is not deleted
        automatically.

        Parameters
        ----------
        doc : libsbml.SBMLDocument
            The document to write. Its model is named after `descriptor` if
            it has no name.
        descriptor : str
            The prefix of the file name.
        directory : str or pathlib.Path
            Where to create the file.

        Returns
        -------
        pathlib.Path
            The written file.

        """
        model: "libsbml.Model" = doc.getModel()
        if not model.isSetName():
            _check(
                model.setName(convert_to_display_name(descriptor)), "set model name"
            )
        for k in range(doc.getNumErrors()):
            error: "libsbml.SBMLError" = doc.getError(k)
            if not (error.isWarning() or error.isInfo()):
                logger.error(error.getMessage().strip())
        handle, filename = tempfile.mkstemp(
            prefix=f"{descriptor}_",
            suffix=Configuration().sbml_extension,
            dir=str(directory),
        )
        os.close(handle)
        path = Path(filename)
        write_sbml_document(doc, path)
        logger.info(f"File written: {path.resolve()}")
        return path


def _math_identifiers(element: Optional[libsbml.SBase]) -> Set[str]:
    """Return the names used in the math of an element, if it has any."""
    if element is None or not element.isSetMath():
        return set()
    names = set()
    stack = [element.getMath()]
    while stack:
        node: "libsbml.ASTNode" = stack.pop()
        if node.isName():
            names.add(node.getName())
        stack.extend(node.getChild(k) for k in range(node.getNumChildren()))
    return names


def _referenced_identifiers(model: libsbml.Model) -> Set[str]:
    """Collect the identifiers that reactions, rules, and events refer to."""
    referenced: Set[str] = set()
    reaction: "libsbml.Reaction"
    for reaction in model.getListOfReactions():
        for references in (
            reaction.getListOfReactants(),
            reaction.getListOfProducts(),
            reaction.getListOfModifiers(),
        ):
            referenced.update(ref.getSpecies() for ref in references)
        referenced |= _math_identifiers(reaction.getKineticLaw())
    rule: "libsbml.Rule"
    for rule in model.getListOfRules():
        if rule.isSetVariable():
            referenced.add(rule.getVariable())
        referenced |= _math_identifiers(rule)
    assignment: "libsbml.InitialAssignment"
    for assignment in model.getListOfInitialAssignments():
        referenced.add(assignment.getSymbol())
        referenced |= _math_identifiers(assignment)
    event: "libsbml.Event"
    for event in model.getListOfEvents():
        for part in (event.getTrigger(), event.getDelay(), event.getPriority()):
            referenced |= _math_identifiers(part)
        for event_assignment in event.getListOfEventAssignments():
            referenced.add(event_assignment.getVariable())
            referenced |= _math_identifiers(event_assignment)
    for constraint in model.getListOfConstraints():
        referenced |= _math_identifiers(constraint)
    return referenced


def _remove_orphan_species(model: libsbml.Model) -> None:
    """Remove all species that nothing in the model refers to any more.

    A species is kept if a remaining reaction, a rule, an initial
    assignment, an event or a constraint refers to it.

    """
    referenced = _referenced_identifiers(model)
    orphans = [
        s.getId() for s in model.getListOfSpecies() if s.getId() not in referenced
    ]
    for sid in orphans:
        model.removeSpecies(sid)
    if orphans:
        logger.debug(f"Removed {len(orphans)} unreferenced species.")


def _remove_flux_objectives(model: libsbml.Model, reaction_ids: Set[str]) -> None:
    """Remove flux objectives that refer to any of the given reactions."""
    model_fbc: "libsbml.FbcModelPlugin" = model.getPlugin("fbc")
    if model_fbc is None:
        return
    objective: "libsbml.Objective"
    for objective in model_fbc.getListOfObjectives():
        for k in reversed(range(objective.getNumFluxObjectives())):
            if objective.getFluxObjective(k).getReaction() in reaction_ids:
                objective.removeFluxObjective(k)


def extract_tissue_models(
    base_model: Union[str, Path],
    zip_file: Union[str, Path],
    target_dir: Union[str, Path],
    flat: bool = False,
    creators: Optional[List[VCard]] = None,
    progress: bool = False,
) -> Path:
    """Create a COMBINE archive of tissue models.

    The name of the ZIP file without extension serves as descriptor: the
    models are stored in the folder "<target_dir>/<descriptor>" and the
    archive is written to "<target_dir>/<descriptor>.omex", replacing any
    existing file.

    Parameters
    ----------
    base_model : str or pathlib.Path
        The SBML file of the base model.
    zip_file : str or pathlib.Path
        A ZIP file with CSV lists of reaction indices to keep.
    target_dir : str or pathlib.Path
        Where to create the model folder and the archive.
    flat : bool, optional
        Create flat models instead of hierarchical ones (default False).
    creators : list of VCard, optional
        The archive creators (default from the configuration).
    progress : bool, optional
        Display a progress bar while building the models (default False).

    Returns
    -------
    pathlib.Path
        The written archive.

    """
    start = time.perf_counter()
    base_model = Path(base_model)
    target_dir = Path(target_dir)
    doc = read_sbml_document(base_model)
    descriptor = name_without_extension(zip_file)

    output_folder = target_dir / descriptor
    output_folder.mkdir(parents=True, exist_ok=True)
    archive_file = target_dir / f"{descriptor}{Configuration().archive_extension}"

    extractor = TissueModelExtractor(
        doc,
        CombineArchive(archive_file),
        name_without_extension(base_model),
        output_folder,
    )
    models = extractor.build_submodels(zip_file, flat=flat, progress=progress)
    built = time.perf_counter()

    extractor.pack_archive(models, creators=creators)
    packed = time.perf_counter()
    logger.info(
        f"Time for creating models:\t{(built - start) / 60:.3f} min\n"
        f"Time for packing the archive:\t{(packed - built) / 60:.3f} min"
    )
    return archive_file
