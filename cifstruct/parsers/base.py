"""Hierarchical model of a macromolecular structure.

Hierarchy:
    Structure (top-level)
    ├── cell, spacegroup_hm, info, ncs
    ├── entities: list[Entity]
    └── models: list[Model]
        └── chains: list[Chain]  (Chain.entity -> Entity, non-owning)
            └── residues: list[Residue]
                └── atoms: list[Atom]

Each container owns its children. A chain refers to its entity through a
weak reference; the entity is owned by the Structure.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, NamedTuple, Optional

import numpy as np


# ======================================================================
# Leaves
# ======================================================================

@dataclass
class Atom:
    """Single atom with coordinates and displacement parameters.

    ``aniso`` holds (U11, U22, U33, U12, U13, U23) or None when the file has
    no anisotropic record for this atom.
    """

    name: str
    element: str
    x: float
    y: float
    z: float
    altloc: str = ""
    charge: int = 0
    occ: float = 1.0
    b_iso: float = 50.0
    aniso: Optional[tuple[float, float, float, float, float, float]] = None

    @property
    def coords(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def has_aniso(self) -> bool:
        return self.aniso is not None


@dataclass
class Residue:
    """Residue (monomer) identified by label seq_id and name.

    ``seq_id`` is None when the label sequence number is unknown (ligands,
    waters); ``auth_seq_id`` and ``ins_code`` then tell residues apart.
    """

    name: str
    seq_id: Optional[int] = None
    auth_seq_id: Optional[int] = None
    ins_code: str = ""
    atoms: list[Atom] = field(default_factory=list)

    def matches(self, seq_id: Optional[int], auth_seq_id: Optional[int], ins_code: str, name: str) -> bool:
        return (self.seq_id == seq_id and self.auth_seq_id == auth_seq_id
                and self.ins_code == ins_code and self.name == name)

    def find_atom(self, name: str, altloc: Optional[str] = None) -> Optional[Atom]:
        for a in self.atoms:
            if a.name == name and (altloc is None or a.altloc == altloc):
                return a
        return None

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)

    def __len__(self) -> int:
        return len(self.atoms)

    def __iter__(self) -> Iterator[Atom]:
        return iter(self.atoms)


class EntityType(Enum):
    POLYMER = "polymer"
    NON_POLYMER = "non-polymer"
    WATER = "water"
    BRANCHED = "branched"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, text: str) -> "EntityType":
        """Map ``_entity.type`` text; anything unrecognized is UNKNOWN."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class SequenceItem(NamedTuple):
    num: int  # -1 when the position could not be read
    mon: str


@dataclass(eq=False)
class Entity:
    """Chemically distinct component (polymer, non-polymer, water, ...)."""

    id: str
    entity_type: EntityType = EntityType.UNKNOWN
    sequence: list[SequenceItem] = field(default_factory=list)

    @property
    def is_polymer(self) -> bool:
        return self.entity_type is EntityType.POLYMER

    @property
    def is_nonpolymer(self) -> bool:
        return self.entity_type is EntityType.NON_POLYMER

    @property
    def is_water(self) -> bool:
        return self.entity_type is EntityType.WATER


# ======================================================================
# Containers
# ======================================================================

class Chain:
    """Chain of residues, named by its label_asym_id."""

    def __init__(self, name: str, auth_name: str = ""):
        self.name = name
        self.auth_name = auth_name
        self.residues: list[Residue] = []
        self._entity: Optional[weakref.ref] = None

    @property
    def entity(self) -> Optional[Entity]:
        return self._entity() if self._entity is not None else None

    @entity.setter
    def entity(self, value: Optional[Entity]) -> None:
        self._entity = weakref.ref(value) if value is not None else None

    @property
    def entity_id(self) -> Optional[str]:
        ent = self.entity
        return ent.id if ent is not None else None

    def find_residue(self, seq_id: Optional[int], name: Optional[str] = None) -> Optional[Residue]:
        for r in self.residues:
            if r.seq_id == seq_id and (name is None or r.name == name):
                return r
        return None

    def find_or_add_residue(self, seq_id: Optional[int], auth_seq_id: Optional[int],
                            ins_code: str, name: str) -> Residue:
        """Reuse the last residue if it has this key, else append a new one.

        Only the last residue is compared: a key seen earlier, with other
        residues in between, starts a second residue.
        """
        if self.residues and self.residues[-1].matches(seq_id, auth_seq_id, ins_code, name):
            return self.residues[-1]
        return self.add_residue(seq_id, auth_seq_id, ins_code, name)

    def add_residue(self, seq_id: Optional[int], auth_seq_id: Optional[int],
                    ins_code: str, name: str) -> Residue:
        self.residues.append(Residue(name=name, seq_id=seq_id, auth_seq_id=auth_seq_id, ins_code=ins_code))
        return self.residues[-1]

    def count_atoms(self) -> int:
        return sum(len(r.atoms) for r in self.residues)

    def __len__(self) -> int:
        return len(self.residues)

    def __iter__(self) -> Iterator[Residue]:
        return iter(self.residues)

    def __repr__(self) -> str:
        return f"<Chain {self.name} auth={self.auth_name} residues={len(self.residues)}>"


@dataclass
class Model:
    name: str
    chains: list[Chain] = field(default_factory=list)

    def find_chain(self, name: str) -> Optional[Chain]:
        for ch in self.chains:
            if ch.name == name:
                return ch
        return None

    def find_or_add_chain(self, name: str) -> Chain:
        ch = self.find_chain(name)
        if ch is None:
            ch = Chain(name)
            self.chains.append(ch)
        return ch

    def count_atoms(self) -> int:
        return sum(ch.count_atoms() for ch in self.chains)

    def __iter__(self) -> Iterator[Chain]:
        return iter(self.chains)


@dataclass(frozen=True)
class UnitCell:
    a: float = 1.0
    b: float = 1.0
    c: float = 1.0
    alpha: float = 90.0
    beta: float = 90.0
    gamma: float = 90.0

    @property
    def parameters(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.alpha, self.beta, self.gamma)


@dataclass
class NcsOp:
    """Non-crystallographic symmetry operator: x' = rotation @ x + translation."""

    given: bool
    rotation: np.ndarray = field(default_factory=lambda: np.identity(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def apply(self, xyz) -> np.ndarray:
        return self.rotation @ np.asarray(xyz, dtype=float) + self.translation


# ======================================================================
# Structure
# ======================================================================

ENTRY_ID_TAG = "_entry.id"
METHOD_TAG = "_exptl.method"
TITLE_TAG = "_struct.title"


@dataclass
class Structure:
    """Everything read from one data block."""

    name: str = ""
    cell: UnitCell = field(default_factory=UnitCell)
    spacegroup_hm: str = ""
    info: dict[str, str] = field(default_factory=dict)
    ncs: list[NcsOp] = field(default_factory=list)
    entities: list[Entity] = field(default_factory=list)
    models: list[Model] = field(default_factory=list)

    def get_model(self, name: str) -> Optional[Model]:
        for m in self.models:
            if m.name == name:
                return m
        return None

    def find_or_add_model(self, name: str) -> Model:
        model = self.get_model(name)
        if model is None:
            model = Model(name)
            self.models.append(model)
        return model

    def find_entity(self, entity_id: str) -> Optional[Entity]:
        for e in self.entities:
            if e.id == entity_id:
                return e
        return None

    def find_or_add_entity(self, entity_id: str) -> Entity:
        ent = self.find_entity(entity_id)
        if ent is None:
            ent = Entity(entity_id)
            self.entities.append(ent)
        return ent

    @property
    def entry_id(self) -> str:
        return self.info.get(ENTRY_ID_TAG) or self.name

    @property
    def method(self) -> Optional[str]:
        return self.info.get(METHOD_TAG)

    @property
    def title(self) -> Optional[str]:
        return self.info.get(TITLE_TAG)

    @property
    def chains(self) -> list[Chain]:
        """Chains of the first model."""
        return self.models[0].chains if self.models else []

    @property
    def num_models(self) -> int:
        return len(self.models)

    @property
    def num_chains(self) -> int:
        return sum(len(m.chains) for m in self.models)

    @property
    def num_residues(self) -> int:
        return sum(len(ch.residues) for m in self.models for ch in m.chains)

    @property
    def num_atoms(self) -> int:
        return sum(m.count_atoms() for m in self.models)

    @property
    def polymer_entity_count(self) -> int:
        return sum(1 for e in self.entities if e.is_polymer)

    def to_dict(self) -> dict:
        """Flat dict for summaries / DataFrame usage."""
        return {
            "entry_id": self.entry_id,
            "method": self.method,
            "title": self.title,
            "space_group": self.spacegroup_hm or None,
            "model_count": self.num_models,
            "chain_count": self.num_chains,
            "residue_count": self.num_residues,
            "atom_count": self.num_atoms,
            "entity_count": len(self.entities),
            "polymer_entity_count": self.polymer_entity_count,
            "ncs_count": len(self.ncs),
        }

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.entry_id} "
            f"models={self.num_models} chains={self.num_chains} "
            f"entities={len(self.entities)} atoms={self.num_atoms}>"
        )
