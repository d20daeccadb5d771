"""Provide the command line interface of sbmltools."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.logging import RichHandler

from sbmltools import __version__
from sbmltools.io.archive import VCard
from sbmltools.io.sbml import (
    consistency_errors,
    read_sbml_document,
    write_sbml_document,
)
from sbmltools.manipulation.correct import correct_model
from sbmltools.manipulation.layout import fix_layout_internal_ids
from sbmltools.manipulation.species import extract_species_ids, format_species_row
from sbmltools.manipulation.validate import non_warning_errors, validate_sbml_document
from sbmltools.manipulation.variants import create_variant
from sbmltools.tissue.extractor import extract_tissue_models
from sbmltools.util import show_versions


logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False, help="sbmltools: manipulate and validate SBML models"
)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=False)],
    )


def _parse_creator(text: str) -> VCard:
    """Parse "FAMILY,GIVEN[,EMAIL[,ORGANIZATION]]" into a VCard."""
    parts = [part.strip() for part in text.split(",")]
    if len(parts) < 2 or len(parts) > 4 or not all(parts[:2]):
        raise typer.BadParameter(
            f"Expected 'FAMILY,GIVEN[,EMAIL[,ORGANIZATION]]' but got '{text}'."
        )
    fields = dict(zip(("family_name", "given_name", "email", "organization"), parts))
    return VCard(**{key: value for key, value in fields.items() if value})


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging."
    ),
) -> None:
    """Entry point."""
    _setup_logging(verbose=verbose)


@app.command("extract-species-ids")
def extract_species_ids_command(
    model: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file, may be gzip compressed."
    ),
    compartment: str = typer.Argument(..., help="Identifier of the compartment."),
    pattern: str = typer.Option(
        "", "--pattern", "-p", help="Regular expression the resources must match."
    ),
) -> None:
    """Print the species of a compartment with their cross-references."""
    doc = read_sbml_document(model)
    for species_id, resources in extract_species_ids(doc, compartment, pattern):
        typer.echo(format_species_row(species_id, resources))


@app.command("fix-layout")
def fix_layout_command(
    input_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file with a layout."
    ),
    output_file: Path = typer.Argument(..., dir_okay=False, help="Output file."),
) -> None:
    """Synchronize species reference glyphs with their species references."""
    doc = read_sbml_document(input_file)
    fix_layout_internal_ids(doc)
    write_sbml_document(doc, output_file)
    logger.info(f"File written: {output_file.resolve()}")
    fixed = read_sbml_document(output_file)
    for message in consistency_errors(fixed):
        typer.echo(message)


@app.command("correct")
def correct_command(
    input_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file to correct."
    ),
    output_file: Path = typer.Argument(..., dir_okay=False, help="Output file."),
) -> None:
    """Set missing units and initial values to defaults."""
    doc = read_sbml_document(input_file)
    if correct_model(doc):
        write_sbml_document(doc, output_file)
        logger.info(f"File written: {output_file.resolve()}")
    else:
        logger.info("The model needed no corrections, nothing written.")


@app.command("create-variant")
def create_variant_command(
    model: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file of the base model."
    ),
    csv_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Table of reaction id, reversibility and lower bound.",
    ),
    output_file: Path = typer.Argument(..., dir_okay=False, help="Output file."),
    separator: Optional[str] = typer.Argument(
        None, help="Column separator of the table (default ';')."
    ),
) -> None:
    """Change reversibility and lower bounds of reactions from a table."""
    create_variant(model, csv_file, output_file, separator=separator)
    logger.info(f"File written: {output_file.resolve()}")


@app.command("extract-tissue-models")
def extract_tissue_models_command(
    base_model: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file of the base model."
    ),
    zip_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="ZIP file of CSV files with 1-based reaction indices to keep.",
    ),
    target_dir: Path = typer.Argument(
        ..., file_okay=False, help="Directory for the models and the archive."
    ),
    flat: bool = typer.Option(
        False, "--flat", help="Create flat models instead of hierarchical ones."
    ),
    creator: Optional[List[str]] = typer.Option(
        None,
        "--creator",
        "-c",
        help="Archive creator as 'FAMILY,GIVEN[,EMAIL[,ORGANIZATION]]'.",
    ),
    progress: bool = typer.Option(
        False, "--progress", help="Display a progress bar."
    ),
) -> None:
    """Create tissue-specific models and pack them into a COMBINE archive."""
    creators = [_parse_creator(text) for text in creator] if creator else None
    archive = extract_tissue_models(
        base_model,
        zip_file,
        target_dir,
        flat=flat,
        creators=creators,
        progress=progress,
    )
    typer.echo(str(archive))


@app.command("validate")
def validate_command(
    model: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="SBML file to validate."
    ),
    units: bool = typer.Option(
        False, "--units", help="Also check the consistency of units."
    ),
    modeling_practice: bool = typer.Option(
        False, "--modeling-practice", help="Also check modeling practice."
    ),
) -> None:
    """Validate a model and print every error that is not a warning."""
    _, errors = validate_sbml_document(
        model,
        check_units_consistency=units,
        check_modeling_practice=modeling_practice,
    )
    messages = non_warning_errors(errors)
    for message in messages:
        typer.echo(message)
    if messages:
        raise typer.Exit(code=1)
    logger.info(f"No errors found in '{model}'.")


@app.command()
def version(
    dependencies: bool = typer.Option(
        False, "--dependencies", help="Also list the installed dependencies."
    ),
) -> None:
    """Print package version."""
    typer.echo(__version__)
    if dependencies:
        show_versions()


if __name__ == "__main__":
    app()
