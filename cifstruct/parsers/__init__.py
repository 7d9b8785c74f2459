"""cifstruct.parsers: mmCIF blocks into hierarchical Structure objects.

Architecture:
    - base.py: data model (Structure, Model, Chain, Residue, Atom, Entity, NcsOp)
    - mmcif.py: StructureBuilder, auxiliary table readers, CIFParser
    - entities.py: entity list, polymer sequences, chain -> entity links
    - dataset.py: StructureDataset (loads files, returns Structure objects)

Usage::

    from cifstruct.parsers import CIFParser

    s = CIFParser().parse("1abc.cif.gz")
    for model in s.models:
        for chain in model.chains:
            print(model.name, chain.name, chain.auth_name, chain.entity_id, len(chain))
"""

from cifstruct.parsers.base import (
    Atom,
    Chain,
    Entity,
    EntityType,
    Model,
    NcsOp,
    Residue,
    SequenceItem,
    Structure,
    UnitCell,
)
from cifstruct.parsers.mmcif import (
    ATOM_SITE_FIELDS,
    CIFParser,
    StructureBuilder,
    get_anisotropic_u,
    read_atoms,
    structure_from_block,
)
from cifstruct.parsers.entities import (
    link_chains,
    merge_entities,
    read_chain_entity_map,
    read_entities,
    read_polymer_sequences,
)
from cifstruct.parsers.dataset import StructureDataset

__all__ = [
    # Data model
    "Structure",
    "Model",
    "Chain",
    "Residue",
    "Atom",
    "Entity",
    "EntityType",
    "SequenceItem",
    "NcsOp",
    "UnitCell",
    # Building
    "ATOM_SITE_FIELDS",
    "StructureBuilder",
    "get_anisotropic_u",
    "structure_from_block",
    "read_atoms",
    "CIFParser",
    # Entities
    "read_entities",
    "read_polymer_sequences",
    "read_chain_entity_map",
    "merge_entities",
    "link_chains",
    # Dataset
    "StructureDataset",
]
