import logging
from pathlib import Path
from typing import Tuple

from pydantic import ValidationError
from pydantic_core import from_json

from exceptions import DataFileError, EmptySnapshotSequenceError
from models import Snapshot, SnapshotSequence

logger = logging.getLogger(__name__)


def load_snapshots(path: Path | str) -> Tuple[Snapshot, ...]:
    """Read and decode the mock data file once. Any failure here is fatal to startup."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DataFileError(f"cannot read data file {path}: {e}", path) from e

    try:
        # NaN and Infinity are not JSON; reject them here rather than on every request
        sequence = SnapshotSequence.model_validate(from_json(raw, allow_inf_nan=False))
    except (ValueError, ValidationError) as e:
        raise DataFileError(
            f"{path} is not a list of snapshots (lists of location records): {e}", path
        ) from e

    if len(sequence) == 0:
        raise EmptySnapshotSequenceError(path)

    # Freeze the outer structure; nothing mutates it after startup
    snapshots = tuple(tuple(snapshot) for snapshot in sequence.root)
    logger.info(
        "Loaded %d snapshots (%d location records) from %s",
        len(snapshots),
        sum(len(s) for s in snapshots),
        path,
    )
    return snapshots
