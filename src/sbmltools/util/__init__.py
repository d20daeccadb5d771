from sbmltools.util.util import (
    convert_to_display_name,
    md5_checksum,
    name_to_sid,
    name_without_extension,
    show_versions,
)
