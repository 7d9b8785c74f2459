"""cifstruct: PDBx/mmCIF blocks -> Structure / Model / Chain / Residue / Atom."""

__version__ = "0.1.0"
