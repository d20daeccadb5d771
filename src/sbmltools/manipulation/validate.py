"""Provide the validation of SBML documents against the SBML rules."""

import logging
from pathlib import Path
from typing import IO, Dict, List, Optional, Tuple, Union

import libsbml

from ..exceptions import SBMLReadError
from ..io.sbml import _error_string, read_sbml_document


logger = logging.getLogger(__name__)


ERROR_KEYS = ("SBML_FATAL", "SBML_ERROR", "SBML_SCHEMA_ERROR", "SBML_WARNING")


def validate_sbml_document(
    filename: Union[str, IO, Path],
    internal_consistency: bool = True,
    check_units_consistency: bool = False,
    check_modeling_practice: bool = False,
) -> Tuple[Optional[libsbml.SBMLDocument], Dict[str, List[str]]]:
    """Validate an SBML document offline.

    Parameters
    ----------
    filename : str or pathlib.Path or file handle
        The SBML file (or SBML string) to validate.
    internal_consistency: bool, optional
        Check internal consistency (default True).
    check_units_consistency: bool, optional
        Check consistency of units (default False).
    check_modeling_practice: bool, optional
        Check modeling practise (default False).

    Returns
    -------
    (document, errors)
    document : libsbml.SBMLDocument or None
        The document if it could be read, None otherwise.
    errors : dict
        Messages grouped by severity under the keys "SBML_FATAL",
        "SBML_ERROR", "SBML_SCHEMA_ERROR" and "SBML_WARNING".

    """
    errors = {key: [] for key in ERROR_KEYS}
    try:
        doc = read_sbml_document(filename)
    except SBMLReadError as error:
        errors["SBML_FATAL"].append(str(error))
        return None, errors

    doc.setConsistencyChecks(
        libsbml.LIBSBML_CAT_UNITS_CONSISTENCY, check_units_consistency
    )
    doc.setConsistencyChecks(
        libsbml.LIBSBML_CAT_MODELING_PRACTICE, check_modeling_practice
    )
    if internal_consistency:
        doc.checkInternalConsistency()
    doc.checkConsistency()

    for k in range(doc.getNumErrors()):
        e: "libsbml.SBMLError" = doc.getError(k)
        msg = _error_string(e, k=k)
        sev = e.getSeverity()
        if sev == libsbml.LIBSBML_SEV_FATAL:
            errors["SBML_FATAL"].append(msg)
        elif sev == libsbml.LIBSBML_SEV_ERROR:
            errors["SBML_ERROR"].append(msg)
        elif sev == libsbml.LIBSBML_SEV_SCHEMA_ERROR:
            errors["SBML_SCHEMA_ERROR"].append(msg)
        elif sev == libsbml.LIBSBML_SEV_WARNING:
            errors["SBML_WARNING"].append(msg)

    for key in ["SBML_FATAL", "SBML_ERROR", "SBML_SCHEMA_ERROR"]:
        if len(errors[key]) > 0:
            logger.error("SBML errors in validation, check error log for details.")
            break
    if len(errors["SBML_WARNING"]) > 0:
        logger.warning("SBML warnings in validation, check error log for details.")

    return doc, errors


def non_warning_errors(errors: Dict[str, List[str]]) -> List[str]:
    """Return all messages of a validation result that are not warnings."""
    return [msg for key in ERROR_KEYS[:-1] for msg in errors[key]]
