"""Table-of-contents exports."""

from .toc_models import DocumentMetadata, TableOfContents, TOCEntry
from .toc_reader import TOCDecodeError, load_table_of_contents, parse_table_of_contents

__all__ = [
    "DocumentMetadata",
    "TableOfContents",
    "TOCEntry",
    "TOCDecodeError",
    "load_table_of_contents",
    "parse_table_of_contents",
]
