"""Read the raw text fields of a CSV log export."""

import csv
import logging
import sys
from querymine.log_analysis.shared import SourceReadError

logger = logging.getLogger(__name__)

# Exported log messages easily exceed the csv module's default cell size.
csv.field_size_limit(sys.maxsize)


def read_fields(file_path, has_header=True):
    """
    Yield every cell of a CSV file, row by row. Rows may have different lengths.

    Raises:
        SourceReadError: if the file can't be opened or isn't readable as CSV.
    """
    try:
        with open(file_path, "r", encoding="utf-8", errors="ignore", newline="") as f:
            reader = csv.reader(f)
            if has_header:
                header = next(reader, None)
                logger.debug("Skipping header row: %s", header)
            for row in reader:
                for field in row:
                    yield field
    except (OSError, csv.Error) as e:
        raise SourceReadError(f"Failed to read {file_path}: {e}") from e
