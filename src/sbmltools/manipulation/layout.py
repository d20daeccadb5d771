"""Synchronize layout glyphs with the species references they depict."""

import logging
from typing import Optional

import libsbml

from ..io.sbml import _check


logger = logging.getLogger(__name__)


def find_species_reference(
    reaction: libsbml.Reaction, species_id: str
) -> Optional[libsbml.SimpleSpeciesReference]:
    """Find the first reference to a species within a reaction.

    Reactants are searched first, then products, then modifiers.

    Parameters
    ----------
    reaction : libsbml.Reaction
        The reaction to search.
    species_id : str
        The identifier of the referenced species.

    Returns
    -------
    libsbml.SimpleSpeciesReference or None
        The first matching reference, None if the reaction does not refer
        to the species.

    """
    for references in (
        reaction.getListOfReactants(),
        reaction.getListOfProducts(),
        reaction.getListOfModifiers(),
    ):
        for reference in references:
            if reference.getSpecies() == species_id:
                return reference
    return None


def fix_layout_internal_ids(doc: libsbml.SBMLDocument) -> int:
    """Make species reference glyphs and species references point at each other.

    For every species reference glyph of every reaction glyph the species
    reference of the depicted reaction that refers to the glyph's species is
    looked up. If that reference has an identifier, the glyph is updated to
    use it, otherwise the reference receives the identifier the glyph refers
    to. Glyphs that cannot be resolved are left untouched.

    Parameters
    ----------
    doc : libsbml.SBMLDocument
        The document with a layout; it is modified in place.

    Returns
    -------
    int
        The number of glyphs or references that were changed.

    """
    model: "libsbml.Model" = doc.getModel()
    layout_plugin: "libsbml.LayoutModelPlugin" = model.getPlugin("layout")
    if layout_plugin is None:
        logger.warning(f"Model '{model.getId()}' does not use the layout package.")
        return 0

    changes = 0
    layout: "libsbml.Layout"
    for layout in layout_plugin.getListOfLayouts():
        glyph: "libsbml.ReactionGlyph"
        for glyph in layout.getListOfReactionGlyphs():
            if not glyph.isSetReactionId():
                continue
            reaction = model.getReaction(glyph.getReactionId())
            if reaction is None:
                logger.warning(
                    f"Reaction glyph '{glyph.getId()}' refers to the unknown "
                    f"reaction '{glyph.getReactionId()}'."
                )
                continue
            srg: "libsbml.SpeciesReferenceGlyph"
            for srg in glyph.getListOfSpeciesReferenceGlyphs():
                if _fix_species_reference_glyph(layout, reaction, srg):
                    changes += 1
    logger.info(f"Fixed {changes} layout cross-reference(s).")
    return changes


def _fix_species_reference_glyph(
    layout: libsbml.Layout,
    reaction: libsbml.Reaction,
    srg: libsbml.SpeciesReferenceGlyph,
) -> bool:
    """Synchronize one species reference glyph, return whether anything changed."""
    if not srg.isSetSpeciesGlyphId():
        return False
    species_glyph = layout.getSpeciesGlyph(srg.getSpeciesGlyphId())
    if species_glyph is None:
        logger.warning(
            f"Species reference glyph '{srg.getId()}' refers to the unknown "
            f"species glyph '{srg.getSpeciesGlyphId()}'."
        )
        return False
    reference = find_species_reference(reaction, species_glyph.getSpeciesId())
    if reference is None:
        return False

    glyph_ref = srg.getSpeciesReferenceId()
    if reference.isSetId():
        if reference.getId() == glyph_ref:
            return False
        logger.debug(
            f"{srg.getId()}: speciesReference '{glyph_ref}' -> '{reference.getId()}'"
        )
        srg.setSpeciesReferenceId(reference.getId())
        return srg.getSpeciesReferenceId() == reference.getId()
    if not srg.isSetSpeciesReferenceId():
        return False
    logger.debug(f"{reaction.getId()}: species reference id set to '{glyph_ref}'")
    return _check(
        reference.setId(glyph_ref),
        f"set id of the reference to '{reference.getSpecies()}' "
        f"in '{reaction.getId()}'",
    )
