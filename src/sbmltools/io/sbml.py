"""
SBML document import and export using python-libsbml.

All utilities of this package work directly on the libsbml object model.
This module bundles the shared pieces around it:

- reading documents from paths (optionally gzip, bzip2 or zip compressed),
  SBML strings and file handles,
- writing documents to paths and file handles,
- checking libsbml return codes,
- running the offline consistency checks and formatting their errors.
"""

import logging
from collections import namedtuple
from pathlib import Path
from sys import platform
from typing import IO, List, Optional, Union

import libsbml

from ..exceptions import SBMLReadError


logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
SBO_FLUX_BOUND = "SBO:0000625"

COMPRESSED_SUFFIXES = {".bz2", ".gz", ".zip"}

Unit = namedtuple("Unit", ["kind", "scale", "multiplier", "exponent"])


# -----------------------------------------------------------------------------
# Read SBML
# -----------------------------------------------------------------------------
def read_sbml_document(filename: Union[str, IO, Path]) -> libsbml.SBMLDocument:
    """Read an SBML document.

    If the given filename ends with the suffix ".gz" (for example,
    "myfile.xml.gz"), the file is assumed to be compressed in gzip format
    and is decompressed by libsbml upon reading. Similarly, the suffixes
    ".zip" and ".bz2" denote zip and bzip2 compression.

    Parameters
    ----------
    filename : str or pathlib.Path or file handle
        Path to an SBML file, an SBML string, or a text file handle.

    Returns
    -------
    libsbml.SBMLDocument
        The document. Errors encountered while reading stay recorded on the
        document.

    Raises
    ------
    IOError
        If the file does not exist.
    SBMLReadError
        If the input type is not supported, libsbml reports a fatal error,
        or the document does not contain a model.

    """
    doc = _get_doc_from_filename(filename)
    fatal = [
        doc.getError(k)
        for k in range(doc.getNumErrors())
        if doc.getError(k).isFatal()
    ]
    if fatal:
        raise SBMLReadError(
            f"Could not read SBML from '{filename}': "
            + "; ".join(e.getMessage().strip() for e in fatal)
        )
    if doc.getModel() is None:
        raise SBMLReadError(f"No SBML model detected in '{filename}'.")
    logger.debug(
        f"Read <{doc.getModel().getId()}> SBML L{doc.getLevel()}V{doc.getVersion()}."
    )
    return doc


def _get_doc_from_filename(filename: Union[str, IO, Path]) -> libsbml.SBMLDocument:
    """Get SBMLDocument from given filename.

    Parameters
    ----------
    filename : path to SBML, or SBML string, or filehandle

    Returns
    -------
    libsbml.SBMLDocument

    Raises
    ------
    IOError if file not readable or does not contain SBML.
    SBMLReadError if input type is not valid.
    """
    if isinstance(filename, Path):
        if not filename.exists():
            raise IOError(f"The file '{filename}' does not exist.")
        if COMPRESSED_SUFFIXES.isdisjoint(filename.suffixes):
            doc = libsbml.readSBMLFromString(filename.read_text())
        else:
            doc = libsbml.readSBMLFromFile(str(filename))
    elif isinstance(filename, str):
        if "<sbml" in filename:
            doc = libsbml.readSBMLFromString(filename)
        elif (
            ("win" in platform) and (len(filename) < 260) or "win" not in platform
        ) and Path(filename).exists():
            doc = libsbml.readSBMLFromFile(filename)
        else:
            raise IOError(
                f"The file with '{filename}' does not exist, "
                f"or is not an SBML string. Provide the path to "
                f"an existing SBML file or a valid SBML string representation."
            )
    elif hasattr(filename, "read"):
        doc = libsbml.readSBMLFromString(filename.read())
    else:
        raise SBMLReadError(
            f"Input type '{type(filename)}' for '{filename}' is not supported."
            f" Provide a path, SBML str, or file handle."
        )
    return doc


# -----------------------------------------------------------------------------
# Write SBML
# -----------------------------------------------------------------------------
def write_sbml_document(
    doc: libsbml.SBMLDocument, filename: Union[str, IO, Path]
) -> None:
    """Write an SBML document.

    As for reading, the suffixes ".gz", ".zip" and ".bz2" make libsbml
    compress the written file.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The document to write.
    filename : str or pathlib.Path or file handle
        Path to which the document is written, or a text file handle.

    Raises
    ------
    IOError
        If libsbml fails to write the file.

    """
    if isinstance(filename, (str, Path)):
        if not libsbml.writeSBMLToFile(doc, str(filename)):
            raise IOError(f"libsbml could not write the document to '{filename}'.")
        logger.debug(f"File written: {Path(filename).resolve()}")
    elif hasattr(filename, "write"):
        filename.write(libsbml.writeSBMLToString(doc))
    else:
        raise TypeError(
            f"Output type '{type(filename)}' for '{filename}' is not supported."
        )


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _check(value: Union[None, int], message: str) -> bool:
    """Check the libsbml return value and log error messages.

    Parameters
    ----------
    value: None or int
        A libsbml return status code or the object returned by a libsbml
        factory method.
    message: str
        Description of the attempted operation used in the log message.

    Returns
    -------
    bool
        False if libsbml returned a null value or a status code other than
        LIBSBML_OPERATION_SUCCESS, True otherwise.

    """
    if value is None:
        logger.error(f"Error: LibSBML returned a null value trying to <{message}>.")
        return False
    elif type(value) is int:
        if value == libsbml.LIBSBML_OPERATION_SUCCESS:
            return True
        logger.error(f"Error encountered trying to <{message}>.")
        logger.error(
            f"LibSBML error code {str(value)}: "
            f"{libsbml.OperationReturnValue_toString(value).strip()}"
        )
        return False
    return True


def _create_parameter(
    model: libsbml.Model,
    pid: str,
    value: float,
    sbo: Optional[str] = None,
    constant: bool = True,
    units: Optional[str] = None,
) -> libsbml.Parameter:
    """Create parameter in SBML model.

    Parameters
    ----------
    model : libsbml.Model
        SBML model instance
    pid : str
        Parameter id to create in the SBML model.
    value: float
        Value to set parameter
    sbo: str, optional
        SBO term for parameter, e.g., SBO_FLUX_BOUND.
    constant: bool, optional
        Flag if parameter is constant.
    units : str, optional
        Identifier of the parameter's units.

    Returns
    -------
    libsbml.Parameter

    """
    parameter: "libsbml.Parameter" = model.createParameter()
    _check(parameter.setId(pid), f"set parameter id '{pid}'")
    _check(parameter.setValue(value), f"set value of parameter '{pid}'")
    _check(parameter.setConstant(constant), f"set constant on parameter '{pid}'")
    if sbo:
        _check(parameter.setSBOTerm(sbo), f"set SBO term on parameter '{pid}'")
    if units:
        _check(parameter.setUnits(units), f"set units on parameter '{pid}'")
    return parameter


def _create_unit_definition(
    model: libsbml.Model, udef_id: str, name: str, units: List[Unit]
) -> libsbml.UnitDefinition:
    """Create a unit definition composed of the given units.

    Parameters
    ----------
    model : libsbml.Model
        SBML model instance
    udef_id : str
        Identifier of the new unit definition.
    name : str
        Human readable name of the unit definition.
    units : list of Unit
        The factors of the unit definition.

    Returns
    -------
    libsbml.UnitDefinition

    """
    udef: "libsbml.UnitDefinition" = model.createUnitDefinition()
    _check(udef.setId(udef_id), f"set unit definition id '{udef_id}'")
    _check(udef.setName(name), f"set name of unit definition '{udef_id}'")
    for u in units:
        unit: "libsbml.Unit" = udef.createUnit()
        unit.setKind(u.kind)
        unit.setExponent(u.exponent)
        unit.setScale(u.scale)
        unit.setMultiplier(u.multiplier)
    return udef


def _add_is_resource(sbase: libsbml.SBase, meta_id: str, resource: str) -> None:
    """Annotate an SBase with a `bqbiol:is` resource."""
    _check(sbase.setMetaId(meta_id), f"set metaid '{meta_id}'")
    cv: "libsbml.CVTerm" = libsbml.CVTerm()
    cv.setQualifierType(libsbml.BIOLOGICAL_QUALIFIER)
    cv.setBiologicalQualifierType(libsbml.BQB_IS)
    cv.addResource(resource)
    _check(sbase.addCVTerm(cv), f"set cvterm with resource '{resource}'")


# -----------------------------------------------------------------------------
# Consistency
# -----------------------------------------------------------------------------
def consistency_errors(
    doc: libsbml.SBMLDocument, include_warnings: bool = False
) -> List[str]:
    """Run the offline consistency checks of libsbml.

    The errors are returned as strings formatted by `_error_string`.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The document to check.
    include_warnings : bool, optional
        Also return warnings and informational messages (default False).

    Returns
    -------
    list of str
        The errors recorded on the document after the check, one line each
        and numbered in document order.

    """
    doc.checkConsistency()
    messages = []
    for k in range(doc.getNumErrors()):
        error: "libsbml.SBMLError" = doc.getError(k)
        if include_warnings or not (error.isWarning() or error.isInfo()):
            messages.append(_error_string(error, k=k))
    return messages


def _error_string(error: libsbml.SBMLError, k: Optional[int] = None) -> str:
    """Return string representation of SBMLError.

    Parameters
    ----------
    error : libsbml.SBMLError
    k : int, optional
        index of error (default None).

    Returns
    -------
    string representation of error
    """
    package = error.getPackage()
    if package == "":
        package = "core"

    prefix = f"E{k} " if k is not None else ""
    error_str = (
        f"{prefix}({error.getSeverityAsString()}): "
        f"{error.getCategoryAsString()} "
        f"({package}, L{error.getLine()}); "
        f"{error.getShortMessage()}; {error.getMessage().strip()}"
    )
    return error_str
