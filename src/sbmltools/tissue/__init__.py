from sbmltools.tissue.extractor import (
    TissueModelExtractor,
    deleted_reaction_indices,
    extract_tissue_models,
    parse_reaction_list,
)
