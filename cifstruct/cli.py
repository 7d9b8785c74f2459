from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from cifstruct.config import load_settings
from cifstruct.core.logging_utils import get_logger
from cifstruct.core.numfmt import format_fixed, format_number
from cifstruct.exceptions import CIFError
from cifstruct.parsers.dataset import StructureDataset
from cifstruct.parsers.mmcif import CIFParser

logger = get_logger(__name__)
app = typer.Typer(no_args_is_help=True)


@app.command("summary")
def summary(
    paths: List[Path] = typer.Argument(..., exists=True, help="mmCIF files (.cif, .cif.gz)."),
    table: bool = typer.Option(False, help="Print a pandas table instead of one line per file."),
):
    """Counts of models, chains, residues, atoms and entities per file."""
    ds = StructureDataset.from_paths(paths, settings=load_settings())
    try:
        if table:
            typer.echo(ds.to_frame().to_string(index=False))
            return
        for s in ds:
            typer.echo(
                f"{s.entry_id}\tmodels={s.num_models}\tchains={s.num_chains}\t"
                f"residues={s.num_residues}\tatoms={s.num_atoms}\tentities={len(s.entities)}"
            )
    except CIFError as e:
        logger.error("Failed to read structure: %s", e)
        raise typer.Exit(code=1)


@app.command("tree")
def tree(path: Path = typer.Argument(..., exists=True, help="mmCIF file.")):
    """Models and chains of one file, with residue and atom counts."""
    try:
        s = CIFParser(load_settings()).parse(path)
    except CIFError as e:
        logger.error("Failed to read structure: %s", e)
        raise typer.Exit(code=1)
    typer.echo(repr(s))
    for model in s.models:
        typer.echo(f"model {model.name}")
        for chain in model.chains:
            entity = chain.entity_id or "-"
            typer.echo(
                f"  chain {chain.name} (auth {chain.auth_name}) entity={entity} "
                f"residues={len(chain)} atoms={chain.count_atoms()}"
            )


@app.command("fmt", context_settings={"ignore_unknown_options": True})
def fmt(
    value: float = typer.Argument(..., help="Number to format."),
    precision: Optional[int] = typer.Option(None, min=0, max=6, help="Fixed fractional digits."),
    single: bool = typer.Option(False, help="Format as single precision (6 significant digits)."),
):
    """Print a number the way it would be written to a CIF file."""
    if precision is not None:
        typer.echo(format_fixed(value, precision))
    else:
        typer.echo(format_number(value, single=single))


if __name__ == "__main__":
    app()
