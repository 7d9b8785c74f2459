"""StructureDataset: load a list of mmCIF files into Structure objects.

Files are parsed lazily on access and cached by index.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator, Optional, overload

import pandas as pd
from tqdm import tqdm

from cifstruct.config import Settings, load_settings
from cifstruct.core.logging_utils import get_logger
from cifstruct.parsers.base import Structure
from cifstruct.parsers.mmcif import CIFParser

logger = get_logger(__name__)

SUMMARY_COLUMNS = [
    "entry_id", "method", "title", "space_group", "model_count", "chain_count",
    "residue_count", "atom_count", "entity_count", "polymer_entity_count", "ncs_count",
]


class StructureDataset:
    """A dataset of parsed structures.

    Usage::

        from cifstruct.parsers import StructureDataset

        ds = StructureDataset.from_directory("/data/pdb/mmCIF", pattern="*.cif.gz")
        for structure in ds:
            print(structure.entry_id, structure.num_atoms)

        frame = ds.to_frame()
    """

    def __init__(self, paths: list[Path], parser: Optional[CIFParser] = None,
                 settings: Optional[Settings] = None):
        self._paths = paths
        self._settings = settings or load_settings()
        self._parser = parser or CIFParser(self._settings)
        self._cache: dict[int, Structure] = {}

    @classmethod
    def from_paths(cls, paths: list[str | Path], parser: Optional[CIFParser] = None,
                   settings: Optional[Settings] = None) -> "StructureDataset":
        """Create from a list of file paths (strings or Path objects)."""
        return cls([Path(p) for p in paths], parser=parser, settings=settings)

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        pattern: Optional[str] = None,
        parser: Optional[CIFParser] = None,
        settings: Optional[Settings] = None,
    ) -> "StructureDataset":
        """Create from all matching files under a directory (recursive)."""
        settings = settings or load_settings()
        pattern = pattern or settings.dataset_pattern
        d = Path(directory)
        paths = sorted(p for p in d.rglob(pattern) if p.is_file())
        logger.info("StructureDataset: found %d files matching '%s' in %s", len(paths), pattern, d)
        return cls(paths, parser=parser, settings=settings)

    def __len__(self) -> int:
        return len(self._paths)

    @overload
    def __getitem__(self, idx: int) -> Structure: ...
    @overload
    def __getitem__(self, idx: slice) -> list[Structure]: ...

    def __getitem__(self, idx):
        if isinstance(idx, slice):
            return [self._load(i) for i in range(*idx.indices(len(self)))]
        if idx < 0:
            idx = len(self) + idx
        return self._load(idx)

    def __iter__(self) -> Iterator[Structure]:
        for i in range(len(self)):
            yield self._load(i)

    def _load(self, idx: int) -> Structure:
        if idx in self._cache:
            return self._cache[idx]
        path = self._paths[idx]
        try:
            structure = self._parser.parse(path)
        except Exception as e:
            logger.error("Failed to parse %s: %s", path, e)
            raise
        self._cache[idx] = structure
        return structure

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    @property
    def entry_ids(self) -> list[str]:
        return [s.entry_id for s in self]

    def filter(self, predicate: Callable[[Structure], bool]) -> "StructureDataset":
        """New dataset with the structures matching ``predicate`` (parses all)."""
        indices = [i for i in range(len(self)) if predicate(self._load(i))]
        ds = StructureDataset([self._paths[i] for i in indices], parser=self._parser, settings=self._settings)
        for new_idx, old_idx in enumerate(indices):
            ds._cache[new_idx] = self._cache[old_idx]
        return ds

    def to_list(self) -> list[Structure]:
        """Parse all structures and return as a list."""
        indices = range(len(self))
        if self._settings.progress and len(self) > 1:
            indices = tqdm(indices, desc="Parsing mmCIF", unit="file")
        return [self._load(i) for i in indices]

    def to_frame(self) -> pd.DataFrame:
        """One row of Structure.to_dict() per file, sorted by entry_id."""
        rows = [s.to_dict() for s in self.to_list()]
        if not rows:
            return pd.DataFrame(columns=SUMMARY_COLUMNS)
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS).sort_values("entry_id", ignore_index=True)

    def summary(self) -> dict:
        structures = self.to_list()
        methods: dict[str, int] = {}
        for s in structures:
            m = s.method or "unknown"
            methods[m] = methods.get(m, 0) + 1
        return {
            "total": len(structures),
            "methods": methods,
            "total_models": sum(s.num_models for s in structures),
            "total_chains": sum(s.num_chains for s in structures),
            "total_atoms": sum(s.num_atoms for s in structures),
        }

    def __repr__(self) -> str:
        return f"<StructureDataset n={len(self)} paths={self._paths[:3]}...>"
