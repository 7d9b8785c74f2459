"""Tests for StructureDataset."""

import shutil
from pathlib import Path

import pytest

from cifstruct.config import Settings
from cifstruct.exceptions import CIFError
from cifstruct.parsers.base import Structure
from cifstruct.parsers.dataset import SUMMARY_COLUMNS, StructureDataset

FIXTURES = Path(__file__).resolve().parent / "fixtures"
SETTINGS = Settings(progress=False)


@pytest.fixture
def ds() -> StructureDataset:
    return StructureDataset.from_paths([FIXTURES / "sample.cif"], settings=SETTINGS)


@pytest.fixture
def two_files(tmp_path: Path) -> Path:
    root = tmp_path / "cifs"
    (root / "sub").mkdir(parents=True)
    shutil.copy(FIXTURES / "sample.cif", root / "b.cif")
    text = (FIXTURES / "sample.cif").read_text().replace("1TST", "0AAA")
    (root / "sub" / "a.cif").write_text(text)
    (root / "notes.txt").write_text("not a structure")
    return root


def test_len_and_getitem(ds: StructureDataset):
    assert len(ds) == 1
    s = ds[0]
    assert isinstance(s, Structure)
    assert s.entry_id == "1TST"
    assert ds[-1] is s


def test_caching(ds: StructureDataset):
    assert ds[0] is ds[0]


def test_slice_and_iteration(ds: StructureDataset):
    assert [s.entry_id for s in ds[0:1]] == ["1TST"]
    assert [s.entry_id for s in ds] == ["1TST"]
    assert ds.entry_ids == ["1TST"]


def test_filter(ds: StructureDataset):
    kept = ds.filter(lambda s: s.num_models == 2)
    assert len(kept) == 1
    assert kept[0] is ds[0]
    assert len(ds.filter(lambda s: s.num_atoms > 1000)) == 0


def test_from_directory(two_files: Path):
    ds = StructureDataset.from_directory(two_files, settings=SETTINGS)
    assert len(ds) == 2
    assert [p.name for p in ds.paths] == ["b.cif", "a.cif"]


def test_from_directory_pattern(two_files: Path):
    ds = StructureDataset.from_directory(two_files, pattern="a.cif", settings=SETTINGS)
    assert ds.entry_ids == ["0AAA"]


def test_to_frame_sorted(two_files: Path):
    ds = StructureDataset.from_directory(two_files, settings=SETTINGS)
    frame = ds.to_frame()
    assert list(frame.columns) == SUMMARY_COLUMNS
    assert list(frame["entry_id"]) == ["0AAA", "1TST"]
    assert list(frame["atom_count"]) == [10, 10]


def test_to_frame_empty():
    frame = StructureDataset.from_paths([], settings=SETTINGS).to_frame()
    assert frame.empty
    assert list(frame.columns) == SUMMARY_COLUMNS


def test_summary(two_files: Path):
    s = StructureDataset.from_directory(two_files, settings=SETTINGS).summary()
    assert s["total"] == 2
    assert s["methods"] == {"X-RAY DIFFRACTION": 2}
    assert s["total_models"] == 4
    assert s["total_atoms"] == 20


def test_to_list_with_progress(two_files: Path):
    ds = StructureDataset.from_directory(two_files, settings=Settings(progress=True))
    assert len(ds.to_list()) == 2


def test_parse_error_propagates(tmp_path: Path):
    bad = tmp_path / "bad.cif"
    bad.write_text("data_bad\nloop_\n_a.x\n_a.y\n1\n")
    ds = StructureDataset.from_paths([bad], settings=SETTINGS)
    with pytest.raises(CIFError):
        ds[0]


def test_repr(ds: StructureDataset):
    r = repr(ds)
    assert "StructureDataset" in r
    assert "n=1" in r
