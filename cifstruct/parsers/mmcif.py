"""mmCIF data block -> Structure.

The ``_atom_site`` rows are turned into models, chains, residues and atoms in
one forward pass. Rows must come grouped by model, then chain, then residue
(as they do in files from the PDB); the builder only tracks the group it is
currently filling.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

import numpy as np

from cifstruct.cif.block import REQUIRED, Block, Document, as_int, as_number, as_string, is_null
from cifstruct.cif.reader import read_document
from cifstruct.config import Settings, load_settings
from cifstruct.core.logging_utils import get_logger
from cifstruct.exceptions import FormatPreconditionError
from cifstruct.parsers.base import Atom, Chain, Model, NcsOp, Residue, Structure, UnitCell
from cifstruct.parsers.entities import (
    link_chains,
    merge_entities,
    read_chain_entity_map,
    read_entities,
    read_polymer_sequences,
)

logger = get_logger(__name__)

AnisoU = tuple[float, float, float, float, float, float]

# ======================================================================
# _atom_site columns
# ======================================================================

# "?" marks columns that may be missing from the file
ATOM_SITE_FIELDS = (
    "id",
    "type_symbol",
    "label_atom_id",
    "?label_alt_id",
    "label_comp_id",
    "label_asym_id",
    "?label_seq_id",
    "?pdbx_PDB_ins_code",
    "Cartn_x",
    "Cartn_y",
    "Cartn_z",
    "?occupancy",
    "?B_iso_or_equiv",
    "?pdbx_formal_charge",
    "?auth_seq_id",
    "?auth_asym_id",
    "?pdbx_PDB_model_num",
)
(K_ID, K_SYMBOL, K_ATOM_ID, K_ALT_ID, K_COMP_ID, K_ASYM_ID, K_SEQ_ID, K_INS_CODE,
 K_X, K_Y, K_Z, K_OCC, K_BISO, K_CHARGE, K_AUTH_SEQ_ID, K_AUTH_ASYM_ID, K_MODEL_NUM) = range(17)

DEFAULT_OCCUPANCY = 1.0
DEFAULT_B_ISO = 50.0
DEFAULT_MODEL_NAME = "1"

ANISO_FIELDS = ("id", "?U[1][1]", "?U[2][2]", "?U[3][3]", "?U[1][2]", "?U[1][3]", "?U[2][3]")

NCS_OPER_FIELDS = (
    "matrix[1][1]", "matrix[1][2]", "matrix[1][3]",
    "matrix[2][1]", "matrix[2][2]", "matrix[2][3]",
    "matrix[3][1]", "matrix[3][2]", "matrix[3][3]",
    "vector[1]", "vector[2]", "vector[3]", "?code",
)

CELL_FIELDS = ("length_a", "length_b", "length_c", "angle_alpha", "angle_beta", "angle_gamma")

# in pdbx/mmcif v5 date_original was replaced with a much longer tag
OLD_DATE_TAG = "_database_PDB_rev.date_original"
NEW_DATE_TAG = "_pdbx_database_status.recvd_initial_deposition_date"
INFO_TAGS = (
    "_entry.id",
    "_cell.Z_PDB",
    "_exptl.method",
    "_struct.title",
    OLD_DATE_TAG,
    NEW_DATE_TAG,
    "_struct_keywords.pdbx_keywords",
    "_struct_keywords.text",
)


def _one_char(raw: str, tag: str) -> str:
    """Single-character field; null gives ""."""
    if is_null(raw):
        return ""
    value = as_string(raw)
    if len(value) != 1:
        raise FormatPreconditionError(f"{tag} must be a single character, got {raw!r}")
    return value


# ======================================================================
# Structure builder
# ======================================================================

class StructureBuilder:
    """Fills a Structure from ``_atom_site`` rows in one pass.

    A row is any sequence of raw cell strings in ATOM_SITE_FIELDS order.
    Models and chains are looked up by name among their siblings; a residue is
    only matched against the last residue of its chain.
    """

    def __init__(self, structure: Optional[Structure] = None,
                 aniso: Optional[Mapping[str, AnisoU]] = None):
        self.structure = structure if structure is not None else Structure()
        self.aniso = aniso or {}
        self._model: Optional[Model] = None
        self._chain: Optional[Chain] = None
        self._residue: Optional[Residue] = None

    def build(self, rows: Iterable[Sequence[str]]) -> Structure:
        for row in rows:
            self.add_row(row)
        return self.structure

    def add_row(self, row: Sequence[str]) -> Atom:
        model_name = as_string(row[K_MODEL_NUM]) or DEFAULT_MODEL_NAME
        if self._model is None or model_name != self._model.name:
            self._model = self.structure.find_or_add_model(model_name)
            self._chain = None

        chain_name = as_string(row[K_ASYM_ID])
        if self._chain is None or chain_name != self._chain.name:
            self._chain = self._model.find_or_add_chain(chain_name)
            self._chain.auth_name = as_string(row[K_AUTH_ASYM_ID])
            self._residue = None

        residue = self._enter_residue(row)
        atom = self._make_atom(row)
        residue.atoms.append(atom)
        return atom

    def _enter_residue(self, row: Sequence[str]) -> Residue:
        seq_id = as_int(row[K_SEQ_ID], None)
        auth_seq_id = as_int(row[K_AUTH_SEQ_ID], None)
        ins_code = _one_char(row[K_INS_CODE], "pdbx_PDB_ins_code")
        name = as_string(row[K_COMP_ID])

        res = self._residue
        if res is None:
            # entering a chain always opens a residue, even when the chain
            # already ends with one of the same key
            res = self._residue = self._chain.add_residue(seq_id, auth_seq_id, ins_code, name)
            return res
        # label_seq_id, when known, decides; author numbering only splits
        # residues that have no label_seq_id
        if (seq_id != res.seq_id or name != res.name
                or (seq_id is None and (auth_seq_id != res.auth_seq_id or ins_code != res.ins_code))):
            res = self._chain.find_or_add_residue(seq_id, auth_seq_id, ins_code, name)
            self._residue = res
        elif res.auth_seq_id != auth_seq_id or res.ins_code != ins_code:
            logger.debug(
                "Author numbering changes inside residue %s %s of chain %s: %s%s -> %s%s",
                name, seq_id, self._chain.name, res.auth_seq_id, res.ins_code, auth_seq_id, ins_code,
            )
        return res

    def _make_atom(self, row: Sequence[str]) -> Atom:
        charge = 0 if is_null(row[K_CHARGE]) else as_int(row[K_CHARGE])
        atom = Atom(
            name=as_string(row[K_ATOM_ID]),
            element=as_string(row[K_SYMBOL]),
            x=as_number(row[K_X], REQUIRED),
            y=as_number(row[K_Y], REQUIRED),
            z=as_number(row[K_Z], REQUIRED),
            altloc=_one_char(row[K_ALT_ID], "label_alt_id"),
            charge=charge,
            occ=as_number(row[K_OCC], DEFAULT_OCCUPANCY),
            b_iso=as_number(row[K_BISO], DEFAULT_B_ISO),
        )
        if self.aniso:
            atom.aniso = self.aniso.get(as_string(row[K_ID]))
        return atom


# ======================================================================
# Auxiliary tables
# ======================================================================

def get_anisotropic_u(block: Block) -> dict[str, AnisoU]:
    """Atom id -> (U11, U22, U33, U12, U13, U23); null components are 0.0."""
    return {
        row.as_str(0): tuple(row.as_num(n, 0.0) for n in range(1, 7))
        for row in block.find("_atom_site_anisotrop.", ANISO_FIELDS)
    }


def read_unit_cell(block: Block) -> UnitCell:
    cell = block.find("_cell.", CELL_FIELDS)
    if not len(cell):
        return UnitCell()
    c = cell.one()
    return UnitCell(*(c.as_num(n) for n in range(6)))


def read_metadata(block: Block) -> dict[str, str]:
    """Single-value descriptive tags (first value when the tag is looped)."""
    info: dict[str, str] = {}
    for tag in INFO_TAGS:
        values = block.find_values(tag)
        if values:
            info[tag] = as_string(values[0])
        if tag == NEW_DATE_TAG and OLD_DATE_TAG in info and NEW_DATE_TAG not in info:
            info[NEW_DATE_TAG] = info[OLD_DATE_TAG]
    return info


def read_ncs_operators(block: Block) -> list[NcsOp]:
    ops = []
    for op in block.find("_struct_ncs_oper.", NCS_OPER_FIELDS):
        rotation = np.array([op.as_num(n) for n in range(9)], dtype=float).reshape(3, 3)
        translation = np.array([op.as_num(n) for n in range(9, 12)], dtype=float)
        ops.append(NcsOp(given=op.as_str(12) == "given", rotation=rotation, translation=translation))
    return ops


def _read_auxiliary(block: Block, workers: int):
    """Anisotropic map, entity list and polymer sequences (independent reads)."""
    loaders = (get_anisotropic_u, read_entities, read_polymer_sequences)
    if workers <= 1:
        return tuple(load(block) for load in loaders)
    with ThreadPoolExecutor(max_workers=min(workers, len(loaders))) as ex:
        futures = [ex.submit(load, block) for load in loaders]
        return tuple(fut.result() for fut in futures)


# ======================================================================
# Block / document / file entry points
# ======================================================================

def structure_from_block(block: Block, settings: Optional[Settings] = None) -> Structure:
    """Read the whole block. Any error aborts; no partial Structure escapes."""
    settings = settings or load_settings()
    st = Structure(name=block.name)
    st.cell = read_unit_cell(block)
    st.spacegroup_hm = block.find_string("_symmetry.space_group_name_H-M")
    st.info = read_metadata(block)
    st.ncs = read_ncs_operators(block)

    aniso, entities, sequences = _read_auxiliary(block, settings.aux_workers)

    atom_table = block.find("_atom_site.", ATOM_SITE_FIELDS)
    if not atom_table.ok() and block.has_tag("_atom_site.id"):
        logger.warning("Block %s: _atom_site lacks required columns, no atoms read", block.name)
    StructureBuilder(st, aniso).build(atom_table)

    merge_entities(st, entities, sequences)
    link_chains(st, read_chain_entity_map(block))

    logger.info(
        "Block %s: %d model(s), %d chain(s), %d residue(s), %d atom(s), %d entities",
        block.name, st.num_models, st.num_chains, st.num_residues, st.num_atoms, len(st.entities),
    )
    return st


def read_atoms(doc: Document, settings: Optional[Settings] = None) -> Structure:
    """Structure from a document that has exactly one block."""
    return structure_from_block(doc.sole_block(), settings)


class CIFParser:
    """Parse mmCIF files (.cif, .cif.gz) into Structure."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings

    def parse(self, path: Path | str) -> Structure:
        path = Path(path)
        return read_atoms(read_document(path), self.settings)

    @staticmethod
    def extensions() -> list[str]:
        return [".cif", ".cif.gz", ".mmcif"]
