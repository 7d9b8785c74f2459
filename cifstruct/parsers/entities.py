"""Entities, their polymer sequences and chain -> entity links.

The three tables (``_entity``, ``_entity_poly_seq``, ``_struct_asym``) are read
independently and combined afterwards, so the reads can run in any order or
in parallel. Missing tables and unmatched ids leave things unset; nothing
here raises on absent data.
"""

from __future__ import annotations

from typing import Mapping, Optional

from cifstruct.cif.block import Block
from cifstruct.core.logging_utils import get_logger
from cifstruct.exceptions import MalformedNumericError
from cifstruct.parsers.base import Entity, EntityType, SequenceItem, Structure

logger = get_logger(__name__)


def read_entities(block: Block) -> list[Entity]:
    return [
        Entity(row.as_str(0), EntityType.from_string(row.as_str(1)))
        for row in block.find("_entity.", ["id", "type"])
    ]


def read_polymer_sequences(block: Block) -> dict[str, list[SequenceItem]]:
    """entity id -> (num, mon_id) list, in file order."""
    sequences: dict[str, list[SequenceItem]] = {}
    for row in block.find("_entity_poly_seq.", ["entity_id", "num", "mon_id"]):
        try:
            num = row.as_int(1, -1)
        except MalformedNumericError:
            logger.debug("Unreadable _entity_poly_seq.num %r", row[1])
            num = -1
        sequences.setdefault(row.as_str(0), []).append(SequenceItem(num, row.as_str(2)))
    return sequences


def read_chain_entity_map(block: Block) -> dict[str, str]:
    """label_asym_id -> entity id from ``_struct_asym``; empty if absent."""
    mapping: dict[str, str] = {}
    for row in block.find("_struct_asym.", ["id", "entity_id"]):
        mapping.setdefault(row.as_str(0), row.as_str(1))
    return mapping


def merge_entities(
    structure: Structure,
    entities: list[Entity],
    sequences: Mapping[str, list[SequenceItem]],
) -> None:
    """Add entities, then attach sequences (an unlisted entity id is created)."""
    structure.entities.extend(entities)
    for entity_id, items in sequences.items():
        structure.find_or_add_entity(entity_id).sequence.extend(items)


def link_chains(structure: Structure, chain_to_entity: Optional[Mapping[str, str]]) -> int:
    """Point each chain at its entity. Returns the number of linked chains.

    Must run after all models and chains exist.
    """
    linked = 0
    for model in structure.models:
        for chain in model.chains:
            entity_id = chain_to_entity.get(chain.name) if chain_to_entity else None
            if entity_id is None:
                chain.entity = None
                continue
            chain.entity = structure.find_or_add_entity(entity_id)
            linked += 1
    if chain_to_entity is not None and linked < structure.num_chains:
        logger.debug("%d of %d chains have no entity", structure.num_chains - linked, structure.num_chains)
    return linked
