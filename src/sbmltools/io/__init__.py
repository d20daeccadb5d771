from sbmltools.io.archive import ArchiveEntry, CombineArchive, OmexDescription, VCard
from sbmltools.io.sbml import (
    consistency_errors,
    read_sbml_document,
    write_sbml_document,
)
