"""Provide functions to extract species identifiers and their annotations."""

import logging
import re
from typing import Iterator, List, Tuple

import libsbml

from ..exceptions import CompartmentNotFoundError


logger = logging.getLogger(__name__)


def filter_cv_terms(
    sbase: libsbml.SBase,
    qualifier: int = libsbml.BQB_IS,
    pattern: str = "",
    recursive: bool = True,
) -> List[str]:
    """Collect the resources of an element's biological CV terms.

    Parameters
    ----------
    sbase : libsbml.SBase
        The annotated element.
    qualifier : int, optional
        The biological qualifier the CV terms must have (default BQB_IS).
    pattern : str, optional
        A regular expression that resources must match; the empty pattern
        matches everything (default "").
    recursive : bool, optional
        Also search nested CV terms (default True).

    Returns
    -------
    list of str
        The matching resource URIs in document order.

    """
    regex = re.compile(pattern)
    resources = []
    cvterms = sbase.getCVTerms()
    stack = [] if cvterms is None else list(cvterms)
    stack.reverse()
    while stack:
        cvterm: "libsbml.CVTerm" = stack.pop()
        if (
            cvterm.getQualifierType() == libsbml.BIOLOGICAL_QUALIFIER
            and cvterm.getBiologicalQualifierType() == qualifier
        ):
            for k in range(cvterm.getNumResources()):
                uri = cvterm.getResourceURI(k)
                if regex.search(uri):
                    resources.append(uri)
        if recursive:
            nested = [
                cvterm.getNestedCVTerm(k) for k in range(cvterm.getNumNestedCVTerms())
            ]
            stack.extend(reversed(nested))
    return resources


def extract_species_ids(
    doc: libsbml.SBMLDocument, compartment_id: str, pattern: str = ""
) -> Iterator[Tuple[str, List[str]]]:
    """Iterate over the species of a compartment and their cross-references.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The document containing the model.
    compartment_id : str
        Identifier of the compartment whose species are reported.
    pattern : str, optional
        Regular expression the `bqbiol:is` resources must match (default
        "", i.e., all resources).

    Yields
    ------
    tuple of str and list of str
        The species identifier and its matching resource URIs.

    Raises
    ------
    CompartmentNotFoundError
        If the model has no compartment `compartment_id`.

    """
    model: "libsbml.Model" = doc.getModel()
    compartment = model.getCompartment(compartment_id)
    if compartment is None:
        raise CompartmentNotFoundError(
            f"Model '{model.getId()}' has no compartment '{compartment_id}'."
        )
    specie: "libsbml.Species"
    for specie in model.getListOfSpecies():
        if specie.isSetCompartment() and specie.getCompartment() == compartment.getId():
            yield specie.getId(), filter_cv_terms(specie, libsbml.BQB_IS, pattern)


def format_species_row(species_id: str, resources: List[str]) -> str:
    """Return a tab-separated output row for one species."""
    return f"{species_id}\t{', '.join(resources)}"
