from sbmltools.manipulation.correct import correct_model
from sbmltools.manipulation.layout import (
    find_species_reference,
    fix_layout_internal_ids,
)
from sbmltools.manipulation.species import extract_species_ids, filter_cv_terms
from sbmltools.manipulation.validate import non_warning_errors, validate_sbml_document
from sbmltools.manipulation.variants import (
    ReactionChange,
    apply_reaction_change,
    create_variant,
    read_reaction_changes,
)
