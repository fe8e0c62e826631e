from .orchestrator import run_import
from .summary import describe_config, render_summary_line

__all__ = [
    "describe_config",
    "render_summary_line",
    "run_import",
]
