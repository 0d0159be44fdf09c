"""Tool wrapper exports."""

from dsfdeps.tools.dsftool import (
    DsfTool,
    DsftoolResult,
    TextConverter,
    find_dsftool,
    run_dsftool,
)

__all__ = [
    "DsfTool",
    "DsftoolResult",
    "TextConverter",
    "find_dsftool",
    "run_dsftool",
]
