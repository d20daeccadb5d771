"""
Perform smaller corrections to an SBML model so that it passes validation.

Every correction is a rule of the form "if a value is missing, set it to a
default". Each rule returns whether it actually wrote something, and
`correct_model` aggregates these flags.
"""

import logging
from typing import Callable, Tuple

import libsbml

from ..core import Configuration
from ..io.sbml import Unit, _add_is_resource, _check, _create_unit_definition


logger = logging.getLogger(__name__)


UNIT_HOUR = "h"
UNIT_HOUR_LONG = "hour"
UNIT_FEMTO_LITRE = "fL"
UNIT_MMOL_PER_GRAM_DW = "mmol_per_gDW"
UNIT_MMOL_PER_GRAM_DW_PER_HOUR = "mmol_per_gDW_per_hr"

UO_HOUR = "https://identifiers.org/UO:0000032"
UO_FEMTO_LITRE = "https://identifiers.org/UO:0000104"

UNITS_HOUR = [
    Unit(kind=libsbml.UNIT_KIND_SECOND, scale=0, multiplier=3600, exponent=1)
]
UNITS_FEMTO_LITRE = [
    Unit(kind=libsbml.UNIT_KIND_LITRE, scale=-15, multiplier=1, exponent=1)
]
UNITS_MMOL_PER_GRAM_DW = [
    Unit(kind=libsbml.UNIT_KIND_MOLE, scale=-3, multiplier=1, exponent=1),
    Unit(kind=libsbml.UNIT_KIND_GRAM, scale=0, multiplier=1, exponent=-1),
]
UNITS_MMOL_PER_GRAM_DW_PER_HOUR = UNITS_MMOL_PER_GRAM_DW + [
    Unit(kind=libsbml.UNIT_KIND_SECOND, scale=0, multiplier=3600, exponent=-1)
]


def _has_unit_definition(model: libsbml.Model, udef_id: str) -> bool:
    return model.getUnitDefinition(udef_id) is not None


def _supports_model_units(model: libsbml.Model) -> bool:
    """Return whether the SBML level has model-wide default units."""
    if model.getLevel() < 3:
        logger.debug(f"SBML L{model.getLevel()} has no model-wide default units.")
        return False
    return True


def add_hour_unit(model: libsbml.Model) -> bool:
    """Define the unit "h" unless "hour" or "h" already exist."""
    if _has_unit_definition(model, UNIT_HOUR_LONG) or _has_unit_definition(
        model, UNIT_HOUR
    ):
        return False
    unit = _create_unit_definition(
        model, UNIT_HOUR, UNIT_HOUR_LONG, UNITS_HOUR
    ).getUnit(0)
    _add_is_resource(unit, "meta_hour", UO_HOUR)
    logger.debug(f"Added unit definition '{UNIT_HOUR}'.")
    return True


def set_time_units(model: libsbml.Model) -> bool:
    """Set the model's time units to hours if they are missing."""
    if model.isSetTimeUnits() or not _supports_model_units(model):
        return False
    units = UNIT_HOUR if _has_unit_definition(model, UNIT_HOUR) else UNIT_HOUR_LONG
    return _check(model.setTimeUnits(units), "set model time units")


def add_femto_litre_unit(model: libsbml.Model) -> bool:
    """Define the unit "fL" if it is missing."""
    if _has_unit_definition(model, UNIT_FEMTO_LITRE):
        return False
    unit = _create_unit_definition(
        model, UNIT_FEMTO_LITRE, "femto litres", UNITS_FEMTO_LITRE
    ).getUnit(0)
    _add_is_resource(unit, "meta_fL", UO_FEMTO_LITRE)
    logger.debug(f"Added unit definition '{UNIT_FEMTO_LITRE}'.")
    return True


def set_volume_units(model: libsbml.Model) -> bool:
    """Set the model's volume units to femto litres if they are missing."""
    if model.isSetVolumeUnits() or not _supports_model_units(model):
        return False
    return _check(model.setVolumeUnits(UNIT_FEMTO_LITRE), "set model volume units")


def add_mmol_per_gram_unit(model: libsbml.Model) -> bool:
    """Define the unit "mmol_per_gDW" if it is missing."""
    if _has_unit_definition(model, UNIT_MMOL_PER_GRAM_DW):
        return False
    _create_unit_definition(
        model,
        UNIT_MMOL_PER_GRAM_DW,
        "millimoles per gram dry weight",
        UNITS_MMOL_PER_GRAM_DW,
    )
    logger.debug(f"Added unit definition '{UNIT_MMOL_PER_GRAM_DW}'.")
    return True


def set_substance_units(model: libsbml.Model) -> bool:
    """Set the model's substance units to mmol per gram if they are missing."""
    if model.isSetSubstanceUnits() or not _supports_model_units(model):
        return False
    return _check(
        model.setSubstanceUnits(UNIT_MMOL_PER_GRAM_DW), "set model substance units"
    )


def set_extent_units(model: libsbml.Model) -> bool:
    """Set the model's extent units to mmol per gram if they are missing."""
    if model.isSetExtentUnits() or not _supports_model_units(model):
        return False
    return _check(model.setExtentUnits(UNIT_MMOL_PER_GRAM_DW), "set model extent units")


def add_flux_unit(model: libsbml.Model) -> bool:
    """Define the unit "mmol_per_gDW_per_hr" if it is missing."""
    if _has_unit_definition(model, UNIT_MMOL_PER_GRAM_DW_PER_HOUR):
        return False
    _create_unit_definition(
        model,
        UNIT_MMOL_PER_GRAM_DW_PER_HOUR,
        "millimoles per gram dry weight per hour",
        UNITS_MMOL_PER_GRAM_DW_PER_HOUR,
    )
    logger.debug(f"Added unit definition '{UNIT_MMOL_PER_GRAM_DW_PER_HOUR}'.")
    return True


def initialize_compartments(model: libsbml.Model) -> bool:
    """Give every compartment a size and spatial dimensions."""
    config = Configuration()
    changed = False
    compartment: "libsbml.Compartment"
    for compartment in model.getListOfCompartments():
        if not compartment.isSetSize():
            if _check(
                compartment.setSize(config.compartment_size),
                f"set size of compartment '{compartment.getId()}'",
            ):
                logger.debug(
                    f"{compartment.getId()}: set size to {config.compartment_size:g}"
                )
                changed = True
        if not compartment.isSetSpatialDimensions():
            if _check(
                compartment.setSpatialDimensions(float(config.spatial_dimensions)),
                f"set spatial dimensions of compartment '{compartment.getId()}'",
            ):
                logger.debug(
                    f"{compartment.getId()}: set {config.spatial_dimensions:g} "
                    f"as spatial dimensions"
                )
                changed = True
    return changed


def initialize_species(model: libsbml.Model) -> bool:
    """Give every species without initial value an initial amount."""
    config = Configuration()
    changed = False
    specie: "libsbml.Species"
    for specie in model.getListOfSpecies():
        if specie.isSetInitialAmount() or specie.isSetInitialConcentration():
            continue
        if _check(
            specie.setInitialAmount(config.initial_amount),
            f"set initial amount of species '{specie.getId()}'",
        ):
            logger.debug(
                f"{specie.getId()}: set initial amount to {config.initial_amount:g}"
            )
            changed = True
    return changed


def set_parameter_units(model: libsbml.Model) -> bool:
    """Default the units of parameters without units to the extent units."""
    if not model.isSetExtentUnits():
        return False
    extent_units = model.getExtentUnits()
    changed = False
    parameter: "libsbml.Parameter"
    for parameter in model.getListOfParameters():
        if parameter.isSetUnits():
            continue
        if _check(
            parameter.setUnits(extent_units),
            f"set units of parameter '{parameter.getId()}'",
        ):
            logger.debug(f"{parameter.getId()}: set extent units")
            changed = True
    return changed


CORRECTIONS: Tuple[Callable[[libsbml.Model], bool], ...] = (
    add_hour_unit,
    set_time_units,
    add_femto_litre_unit,
    set_volume_units,
    add_mmol_per_gram_unit,
    set_substance_units,
    set_extent_units,
    add_flux_unit,
    initialize_compartments,
    initialize_species,
    set_parameter_units,
)


def correct_model(doc: libsbml.SBMLDocument) -> bool:
    """Apply all corrections to the model of a document.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The document whose model is corrected in place.

    Returns
    -------
    bool
        True if at least one correction changed the model.

    """
    model: "libsbml.Model" = doc.getModel()
    changed = False
    for correction in CORRECTIONS:
        if correction(model):
            logger.debug(f"Correction '{correction.__name__}' changed the model.")
            changed = True
    return changed
