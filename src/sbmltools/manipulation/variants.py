"""Create model variants by replaying a table of reaction changes."""

import logging
from pathlib import Path
from typing import IO, List, NamedTuple, Optional, Union

import libsbml
import pandas as pd

from ..core import Configuration
from ..exceptions import MalformedRowError, ReactionNotFoundError, SBMLToolsError
from ..io.sbml import (
    SBO_FLUX_BOUND,
    _check,
    _create_parameter,
    read_sbml_document,
    write_sbml_document,
)


logger = logging.getLogger(__name__)


class ReactionChange(NamedTuple):
    """One row of a reaction change table."""

    reaction_id: str
    reversible: bool
    lower_bound: str


def parse_boolean(value: str) -> bool:
    """Return True if `value` is "true", ignoring case, False otherwise.

    Surrounding whitespace is not ignored, so " true" is False.

    """
    return value.lower() == "true"


def _is_missing(value) -> bool:
    return value is None or pd.isna(value) or str(value).strip() == ""


def read_reaction_changes(
    filename: Union[str, Path, IO], separator: Optional[str] = None
) -> List[ReactionChange]:
    """Read a table of reaction changes.

    The first row is a header. The first three columns are the reaction
    identifier, the reversibility flag and the lower flux bound.

    Parameters
    ----------
    filename : str or pathlib.Path or file handle
        The CSV file.
    separator : str, optional
        The column separator (default from the configuration, ";").

    Returns
    -------
    list of ReactionChange
        The changes in file order.

    Raises
    ------
    MalformedRowError
        If the table has fewer than three columns or a row lacks a value.

    """
    if separator is None:
        separator = Configuration().csv_separator
    table = pd.read_csv(
        filename,
        sep=separator,
        header=0,
        dtype=str,
        keep_default_na=False,
        index_col=False,
        skip_blank_lines=True,
        engine="python",
    )
    if table.shape[1] < 3:
        raise MalformedRowError(
            f"Expected the columns reaction id, reversible, and lower bound "
            f"separated by '{separator}' but found {list(table.columns)}."
        )
    changes = []
    for row, values in enumerate(table.iloc[:, :3].itertuples(index=False), start=1):
        reaction_id, reversible, lower_bound = values
        for name, value in zip(("reaction id", "reversible", "lower bound"), values):
            if _is_missing(value):
                raise MalformedRowError(f"Row {row} has no {name}: {list(values)}.")
        changes.append(
            ReactionChange(
                reaction_id.strip(), parse_boolean(reversible), lower_bound.strip()
            )
        )
    return changes


def apply_reaction_change(model: libsbml.Model, change: ReactionChange) -> None:
    """Change reversibility and lower flux bound of one reaction.

    A lower bound naming a parameter of the model is used as is. A numeric
    lower bound is stored in the parameter "<reaction id>_lower_bound",
    which is created if necessary.

    Parameters
    ----------
    model : libsbml.Model
        The model to change in place.
    change : ReactionChange
        The change to apply.

    Raises
    ------
    ReactionNotFoundError
        If the model has no such reaction.
    SBMLToolsError
        If the reaction has no fbc information.
    MalformedRowError
        If the lower bound is neither a parameter nor a number.

    """
    reaction: "libsbml.Reaction" = model.getReaction(change.reaction_id)
    if reaction is None:
        raise ReactionNotFoundError(
            f"Model '{model.getId()}' has no reaction '{change.reaction_id}'."
        )
    reaction_fbc: "libsbml.FbcReactionPlugin" = reaction.getPlugin("fbc")
    if reaction_fbc is None:
        raise SBMLToolsError(
            f"Reaction '{change.reaction_id}' has no fbc information, "
            f"flux bounds cannot be set."
        )
    _check(
        reaction.setReversible(change.reversible),
        f"set reversible on reaction '{change.reaction_id}'",
    )
    pid = _lower_bound_parameter(model, change)
    _check(
        reaction_fbc.setLowerFluxBound(pid),
        f"set lower flux bound on reaction '{change.reaction_id}'",
    )


def _lower_bound_parameter(model: libsbml.Model, change: ReactionChange) -> str:
    """Return the id of the parameter holding the change's lower bound."""
    if model.getParameter(change.lower_bound) is not None:
        return change.lower_bound
    try:
        value = float(change.lower_bound)
    except ValueError as error:
        raise MalformedRowError(
            f"Lower bound '{change.lower_bound}' of reaction "
            f"'{change.reaction_id}' is neither a parameter nor a number."
        ) from error
    pid = f"{change.reaction_id}_lower_bound"
    parameter: Optional["libsbml.Parameter"] = model.getParameter(pid)
    if parameter is None:
        units = model.getExtentUnits() if model.isSetExtentUnits() else None
        _create_parameter(model, pid, value, sbo=SBO_FLUX_BOUND, units=units)
    else:
        _check(parameter.setValue(value), f"set value of parameter '{pid}'")
    return pid


def create_variant(
    model_file: Union[str, Path],
    csv_file: Union[str, Path],
    output_file: Union[str, Path],
    separator: Optional[str] = None,
) -> libsbml.SBMLDocument:
    """Apply a table of reaction changes to a model and write the result.

    Parameters
    ----------
    model_file : str or pathlib.Path
        The base model.
    csv_file : str or pathlib.Path
        The table of changes; see `read_reaction_changes`.
    output_file : str or pathlib.Path
        Where to write the variant.
    separator : str, optional
        The column separator of the table (default from the configuration).

    Returns
    -------
    libsbml.SBMLDocument
        The changed document.

    """
    doc = read_sbml_document(Path(model_file))
    model: "libsbml.Model" = doc.getModel()
    for row, change in enumerate(read_reaction_changes(csv_file, separator), start=1):
        apply_reaction_change(model, change)
        logger.info(
            f"{row}: {change.reaction_id} reversible={change.reversible} "
            f"lower bound={change.lower_bound}"
        )
    write_sbml_document(doc, Path(output_file))
    return doc
