"""Output module for exporting batch matching results."""

from mentormatch.output.export import (
    export_json,
    export_csv,
    export_markdown,
    export_result,
)

__all__ = [
    "export_json",
    "export_csv",
    "export_markdown",
    "export_result",
]
