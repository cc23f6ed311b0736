from typing import Any, Dict, List, Sequence

from pydantic import RootModel

# Vehicle records are opaque: id, position and status fields pass through as-is
LocationRecord = Dict[str, Any]
Snapshot = Sequence[LocationRecord]


class SnapshotSequence(RootModel[List[List[Dict[str, Any]]]]):
    """Structural shape of the mock data file: a list of snapshots, each a list of records."""

    def __len__(self) -> int:
        return len(self.root)
