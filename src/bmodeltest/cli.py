"""Command-line interface."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from bmodeltest.exceptions import BModelTestError

app = typer.Typer(help="bModelTest: summarize model-indicator traces and rate priors")
console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _fail(error: BModelTestError) -> None:
    console.print(f"[red]Error: {error.message}[/red]")
    raise typer.Exit(code=1)


@app.command()
def version():
    """Show bmodeltest version."""
    from bmodeltest import __version__
    console.print(f"bmodeltest version {__version__}")


@app.command()
def analyse(
    log: Path = typer.Argument(..., help="Trace log file of a bModelTest analysis"),
    prefix: str = typer.Option("substmodel", help="Prefix of the model-indicator columns"),
    burnin: int = typer.Option(10, help="Percentage of the log to disregard as burn-in"),
    model_set: str = typer.Option(
        "transitionTransversionSplit",
        help="Model set used in the analysis that generated the log",
    ),
    threshold: float = typer.Option(95.0, help="Credible-set threshold in percent"),
    json_out: Optional[Path] = typer.Option(None, "--json", help="Write reports as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """List the HPD set of models for every model-indicator trace in LOG."""
    from bmodeltest.core.config import AnalyserConfig
    from bmodeltest.core.summary import TraceSummarizer
    from bmodeltest.core.trace import load_traces
    from bmodeltest.models.structure import RevJumpModelService

    _configure_logging(verbose)
    try:
        config = AnalyserConfig(
            prefix=prefix, burnin=burnin, model_set=model_set, threshold=threshold
        )
        traces = load_traces(log, prefix=config.prefix, burnin=config.burnin)
        service = RevJumpModelService(config.model_set)
        summarizer = TraceSummarizer(config.threshold, tail_cutoff=config.tail_cutoff)
        reports = [
            summarizer.summarize(trace, model_ids=service.model_ids()) for trace in traces
        ]
    except BModelTestError as e:
        _fail(e)

    if not reports:
        console.print(f"[yellow]No trace starting with '{prefix}' in {log}[/yellow]")

    for report in reports:
        table = Table(title=f"File: {log.name} item: {report.label}")
        table.add_column("posterior support", justify="right", style="green")
        table.add_column("cumulative support", justify="right")
        table.add_column("model", style="cyan")

        in_tail = False
        for entry in report.entries:
            if not entry.in_credible_set and not in_tail:
                table.add_section()
                in_tail = True
            table.add_row(
                f"{entry.support:6.2f}%",
                f"{entry.cumulative:6.2f}%",
                str(entry.model_id),
                style=None if entry.in_credible_set else "dim",
            )
        console.print(table)
        console.print(
            f"{len(report.credible_set)} models in the {report.threshold:g}% HPD set; "
            f"models drawn without circles have "
            f"{'at most ' if report.max_tail_support > 0 else ''}"
            f"{report.max_tail_support:.2f}% support\n"
        )

    if json_out is not None:
        with open(json_out, "w") as f:
            json.dump([r.to_dict() for r in reports], f, indent=2)
        logger.info(f"Reports written to {json_out}")


@app.command()
def models(
    model_set: str = typer.Option("transitionTransversionSplit", help="Model set to list"),
):
    """List the models of a model set."""
    from bmodeltest.models.structure import RevJumpModelService

    try:
        service = RevJumpModelService(model_set)
    except BModelTestError as e:
        _fail(e)

    table = Table(title=f"{service.model_set.value} ({service.model_count()} models)")
    table.add_column("index", justify="right")
    table.add_column("model", style="cyan")
    table.add_column("groups", justify="right")
    table.add_column("name", style="green")
    for index, model_id in enumerate(service.model_ids()):
        structure = service.structure(model_id)
        label = structure.label if structure.label != str(model_id) else ""
        table.add_row(str(index), str(model_id), str(structure.group_count), label)
    console.print(table)


@app.command()
def prior(
    model_id: int = typer.Argument(..., help="Packed model ID, e.g. 121121"),
    rates: List[float] = typer.Argument(..., help="One rate per rate group"),
    prior_type: str = typer.Option(
        "onTransitionsAndTransversions", help="Rate prior parameterization"
    ),
    model_set: str = typer.Option("allreversible", help="Model set containing the model"),
    check: bool = typer.Option(True, help="Check that weighted rates sum to 6"),
):
    """Evaluate the rate prior log-density of RATES under MODEL_ID."""
    from bmodeltest.core.rate_prior import RatePriorEvaluator
    from bmodeltest.models.structure import RevJumpModelService

    try:
        evaluator = RatePriorEvaluator(
            RevJumpModelService(model_set),
            prior_type=prior_type,
            check_consistency=check,
        )
        log_p = evaluator.log_density(rates, model_id)
    except BModelTestError as e:
        _fail(e)

    console.print(f"log P = {log_p:.6f}")


if __name__ == "__main__":
    app()
