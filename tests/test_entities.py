"""Tests for entity, polymer sequence and chain linkage reading."""

import gc

from cifstruct.cif.reader import read_string
from cifstruct.parsers.base import Chain, Entity, EntityType, Model, SequenceItem, Structure
from cifstruct.parsers.entities import (
    link_chains,
    merge_entities,
    read_chain_entity_map,
    read_entities,
    read_polymer_sequences,
)

TEXT = """\
data_ent
loop_
_entity.id
_entity.type
1 polymer
2 non-polymer
3 water
4 branched
5 macrolide
loop_
_entity_poly_seq.entity_id
_entity_poly_seq.num
_entity_poly_seq.mon_id
1 1 MET
1 2 ALA
7 ? DG
7 x DC
loop_
_struct_asym.id
_struct_asym.entity_id
A 1
B 2
"""


def _block(text=TEXT):
    return read_string(text).sole_block()


def _structure_with_chains(*names) -> Structure:
    st = Structure()
    model = st.find_or_add_model("1")
    for n in names:
        model.find_or_add_chain(n)
    return st


def test_entity_types():
    entities = read_entities(_block())
    assert [e.id for e in entities] == ["1", "2", "3", "4", "5"]
    assert [e.entity_type for e in entities] == [
        EntityType.POLYMER,
        EntityType.NON_POLYMER,
        EntityType.WATER,
        EntityType.BRANCHED,
        EntityType.UNKNOWN,
    ]


def test_entity_type_from_string():
    assert EntityType.from_string("Polymer") is EntityType.POLYMER
    assert EntityType.from_string("") is EntityType.UNKNOWN
    assert EntityType.from_string("something else") is EntityType.UNKNOWN


def test_polymer_sequences():
    seqs = read_polymer_sequences(_block())
    assert list(seqs) == ["1", "7"]
    assert seqs["1"] == [SequenceItem(1, "MET"), SequenceItem(2, "ALA")]
    # null and unreadable positions become -1
    assert seqs["7"] == [SequenceItem(-1, "DG"), SequenceItem(-1, "DC")]


def test_merge_tolerates_forward_reference():
    block = _block()
    st = Structure()
    merge_entities(st, read_entities(block), read_polymer_sequences(block))
    assert [e.id for e in st.entities] == ["1", "2", "3", "4", "5", "7"]
    assert st.find_entity("1").sequence[1].mon == "ALA"
    extra = st.find_entity("7")
    assert extra.entity_type is EntityType.UNKNOWN
    assert len(extra.sequence) == 2


def test_merge_order_independent_of_reading_order():
    block = _block()
    seqs = read_polymer_sequences(block)
    ents = read_entities(block)
    st = Structure()
    merge_entities(st, ents, seqs)
    assert st.find_entity("1").entity_type is EntityType.POLYMER
    assert st.find_entity("1").sequence == seqs["1"]


def test_chain_entity_map():
    assert read_chain_entity_map(_block()) == {"A": "1", "B": "2"}
    assert read_chain_entity_map(_block("data_empty\n_entry.id X\n")) == {}


def test_link_chains():
    block = _block()
    st = _structure_with_chains("A", "B", "C")
    merge_entities(st, read_entities(block), {})
    linked = link_chains(st, read_chain_entity_map(block))
    a, b, c = st.models[0].chains
    assert linked == 2
    assert a.entity is st.find_entity("1")
    assert b.entity_id == "2"
    assert c.entity is None


def test_link_chains_creates_missing_entity():
    st = _structure_with_chains("A")
    link_chains(st, {"A": "9"})
    assert st.models[0].chains[0].entity is st.find_entity("9")
    assert len(st.entities) == 1


def test_link_chains_without_table():
    st = _structure_with_chains("A", "B")
    st.find_or_add_model("2").find_or_add_chain("A")
    assert link_chains(st, None) == 0
    assert link_chains(st, {}) == 0
    assert all(ch.entity is None for m in st.models for ch in m.chains)


def test_chain_entity_is_not_owned():
    chain = Chain("A")
    entity = Entity("1", EntityType.POLYMER)
    chain.entity = entity
    assert chain.entity is entity
    del entity
    gc.collect()
    assert chain.entity is None


def test_model_chain_lookup():
    model = Model("1")
    a = model.find_or_add_chain("A")
    assert model.find_or_add_chain("A") is a
    assert model.find_chain("B") is None
