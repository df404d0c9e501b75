"""Project configuration assembly and rendering."""

from .assembler import (  # noqa: F401
    DiagnosticGroups,
    ProjectConfigDraft,
    assemble_config,
    build_user_message,
    relative_package_dir,
    remove_default_flags,
)
from .writer import render_config, write_config  # noqa: F401
