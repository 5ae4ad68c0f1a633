"""Typer-based command line interface for project evaluation."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError as ModelValidationError
from rich.console import Console
from rich.table import Table

from ..config import AdvisorSettings, configure_logging
from ..core.distribution import build_percentile_table
from ..core.monte_carlo import SimulationConfig
from ..core.random_source import seeded_driver
from ..core.risk_matrix import MATRIX_SIZE
from ..core.validator import ValidationError
from ..engine import CapitalProjectEngine, ProjectInputs
from ..integration.advisor_client import AdvisorClient
from ..models.results import DistributionSummary
from ..models.risk import RiskAssessment, RiskItem
from ..models.scenario import ScenarioType
from ..reporting.narrative import AdvisorService, InMemoryAdvisorCache
from ..utils.numbers import as_rate

app = typer.Typer(help="Capital project valuation under uncertainty")
console = Console()

BUCKET_LABELS = ("Low", "Medium", "High")

NAME_OPTION = typer.Option("New project", "--name", help="Project name")
INVESTMENT_OPTION = typer.Option(800_000_000.0, "--investment", help="Initial investment amount")
RATE_OPTION = typer.Option(
    0.25, "--rate", help="Nominal discount rate; |x| <= 1.5 is a decimal (0.25), larger is percent (25)"
)
INFLATION_OPTION = typer.Option(
    0.35, "--inflation", help="Annual inflation; |x| <= 1.5 is a decimal (0.35), larger is percent (35)"
)
REAL_OPTION = typer.Option(False, "--real/--nominal", help="Discount at the inflation-adjusted rate")
YEARS_OPTION = typer.Option(5, "--years", min=1, max=20, help="Projection horizon in years")
SCENARIO_OPTION = typer.Option(ScenarioType.BASE, "--scenario", help="Scenario preset")


def _format_amount(value: Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:,.0f}"


def _format_pct(value: Optional[float], decimals: int = 2) -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    return f"{value * 100:.{decimals}f}%"


def _build_engine(
    name: str,
    investment: float,
    rate: float,
    inflation: float,
    real: bool,
    years: int,
    scenario: ScenarioType,
) -> CapitalProjectEngine:
    inputs = ProjectInputs(
        project_name=name,
        initial_investment=abs(investment),
        discount_rate=as_rate(rate),
        inflation=as_rate(inflation),
        use_real_rate=real,
        years=years,
        scenario=scenario,
    )
    return CapitalProjectEngine(inputs)


def _fail(exc: Exception) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1)


def _print_summary(summary: DistributionSummary) -> None:
    if summary.is_empty:
        console.print("[yellow]No simulation results yet.[/yellow]")
        return
    table = Table(title=f"NPV distribution ({summary.count:,} trials)")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Mean", _format_amount(summary.mean))
    table.add_row("Std dev", _format_amount(summary.std))
    for level, value in sorted(summary.percentiles.items()):
        table.add_row(f"P{level:g}", _format_amount(value))
    table.add_row("P(NPV > 0)", f"{summary.probability_positive:.1f}%")
    console.print(table)

    peak = max((b.count for b in summary.histogram), default=1) or 1
    hist = Table(title="Histogram", show_header=True)
    hist.add_column("From", justify="right")
    hist.add_column("To", justify="right")
    hist.add_column("Count", justify="right")
    hist.add_column("")
    for b in summary.histogram:
        hist.add_row(_format_amount(b.lower), _format_amount(b.upper), str(b.count), "#" * round(30 * b.count / peak))
    console.print(hist)


def _print_risk(assessment: RiskAssessment) -> None:
    if assessment.is_empty:
        console.print("[yellow]No risk items supplied.[/yellow]")
        return
    table = Table(title="Risk register")
    table.add_column("Risk")
    table.add_column("Score", justify="right")
    table.add_column("Level")
    for item in assessment.items:
        table.add_row(item.name, str(item.score), item.level.value)
    console.print(table)
    console.print(
        f"Project risk score: [bold]{assessment.project_score:.2f}[/bold] "
        f"({assessment.project_level.value})"
    )

    matrix = Table(title="Risk matrix (rows: probability, columns: impact)", show_lines=True)
    matrix.add_column("P \\ I")
    for label in BUCKET_LABELS:
        matrix.add_column(label)
    for p_bucket in reversed(range(MATRIX_SIZE)):
        cells = ["\n".join(names) or "-" for names in assessment.matrix[p_bucket]]
        matrix.add_row(BUCKET_LABELS[p_bucket], *cells)
    console.print(matrix)

    console.print("\n[bold]Mitigation priorities[/bold]")
    for plan in assessment.mitigations:
        console.print(f"{plan.name} (score {plan.score}, {plan.level.value})")
        for suggestion in plan.suggestions[:3]:
            console.print(f"  - {suggestion}")


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to CAPWISE_LOG_LEVEL, then WARNING)"
    ),
) -> None:
    configure_logging(log_level)


@app.command()
def evaluate(
    name: str = NAME_OPTION,
    investment: float = INVESTMENT_OPTION,
    rate: float = RATE_OPTION,
    inflation: float = INFLATION_OPTION,
    real: bool = REAL_OPTION,
    years: int = YEARS_OPTION,
    scenario: ScenarioType = SCENARIO_OPTION,
) -> None:
    """Print deterministic NPV/IRR and the NPV profile."""
    try:
        engine = _build_engine(name, investment, rate, inflation, real, years, scenario)
        kpis = engine.valuation()
        profile = engine.npv_profile()
    except (ValidationError, ModelValidationError) as exc:
        _fail(exc)
        return

    console.print(f"[bold]{name}[/bold] ({scenario.value} scenario)")
    console.print(f"Effective discount rate: {_format_pct(kpis.effective_rate)}")
    console.print(f"NPV: {_format_amount(kpis.npv)}")
    console.print(f"IRR: {_format_pct(kpis.irr) if kpis.irr_available else 'not available'}")

    table = Table(title="NPV profile")
    table.add_column("Rate", justify="right")
    table.add_column("NPV", justify="right")
    for row in profile.itertuples(index=False):
        table.add_row(_format_pct(row.rate, 0), _format_amount(row.npv))
    console.print(table)


@app.command()
def simulate(
    name: str = NAME_OPTION,
    investment: float = INVESTMENT_OPTION,
    rate: float = RATE_OPTION,
    inflation: float = INFLATION_OPTION,
    real: bool = REAL_OPTION,
    years: int = YEARS_OPTION,
    scenario: ScenarioType = SCENARIO_OPTION,
    trials: int = typer.Option(1000, help="Number of trials (200..50,000)"),
    revenue_volatility: float = typer.Option(0.15, help="Std dev of revenue shock"),
    cost_volatility: float = typer.Option(0.12, help="Std dev of cost shock"),
    revenue_drift: float = typer.Option(0.03, help="Annual revenue growth"),
    cost_drift: float = typer.Option(0.02, help="Annual cost growth"),
    randomize_rate: bool = typer.Option(False, "--randomize-rate", help="Perturb the discount rate per trial"),
    rate_volatility: float = typer.Option(0.05, help="Std dev of the discount rate shock"),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible runs"),
    ladder: bool = typer.Option(False, "--ladder", help="Also print a percentile ladder"),
) -> None:
    """Run the Monte Carlo simulation and summarise the NPV distribution."""
    try:
        engine = _build_engine(name, investment, rate, inflation, real, years, scenario)
        config = SimulationConfig.from_user_inputs(
            trials,
            revenue_volatility=revenue_volatility,
            cost_volatility=cost_volatility,
            revenue_drift=revenue_drift,
            cost_drift=cost_drift,
            randomize_discount_rate=randomize_rate,
            discount_rate_volatility=rate_volatility,
        )
        outcomes = engine.run_monte_carlo(config, seeded_driver(seed))
        summary = engine.summarize(outcomes)
    except (ValidationError, ModelValidationError) as exc:
        _fail(exc)
        return

    _print_summary(summary)
    if ladder:
        table = Table(title="Percentile ladder")
        table.add_column("Percentile", justify="right")
        table.add_column("NPV", justify="right")
        for row in build_percentile_table(outcomes).itertuples(index=False):
            table.add_row(f"P{row.percentile}", _format_amount(row.npv))
        console.print(table)


def _parse_risk_item(text: str) -> RiskItem:
    """Parse ``NAME:PROBABILITY:IMPACT`` into a risk item."""
    parts = text.rsplit(":", 2)
    if len(parts) != 3:
        raise typer.BadParameter(f"expected NAME:PROBABILITY:IMPACT, got {text!r}", param_hint="--item")
    name, probability, impact = parts
    try:
        ratings = int(probability), int(impact)
    except ValueError as exc:
        raise typer.BadParameter(f"ratings must be integers, got {text!r}", param_hint="--item") from exc
    return RiskItem(name=name, probability=ratings[0], impact=ratings[1])


def _edited_register(defaults: List[RiskItem], edits: List[RiskItem]) -> List[RiskItem]:
    """Apply rating edits by name; unknown names are added to the register."""
    register = [item.model_copy() for item in defaults]
    by_name = {item.name: item for item in register}
    for edit in edits:
        existing = by_name.get(edit.name)
        if existing is None:
            register.append(edit)
            by_name[edit.name] = edit
        else:
            existing.probability = edit.probability
            existing.impact = edit.impact
    return register


@app.command()
def risk(
    top: int = typer.Option(2, help="Number of risks to prioritise"),
    item: Optional[List[str]] = typer.Option(
        None,
        "--item",
        help="Rate a risk as NAME:PROBABILITY:IMPACT (1..5); repeatable",
    ),
) -> None:
    """Assess the risk register, applying any edited ratings."""
    engine = CapitalProjectEngine()
    try:
        edits = [_parse_risk_item(text) for text in item or []]
        engine.set_risks(_edited_register(engine.risks, edits))
    except ModelValidationError as exc:
        _fail(exc)
        return
    _print_risk(engine.risk_assessment(top_k=top))


@app.command()
def advise(
    name: str = NAME_OPTION,
    investment: float = INVESTMENT_OPTION,
    rate: float = RATE_OPTION,
    inflation: float = INFLATION_OPTION,
    real: bool = REAL_OPTION,
    years: int = YEARS_OPTION,
    scenario: ScenarioType = SCENARIO_OPTION,
    offline: bool = typer.Option(False, "--offline", help="Skip the advisor and use local analysis"),
) -> None:
    """Print commentary from the advisor, or the local analysis when unavailable."""
    try:
        engine = _build_engine(name, investment, rate, inflation, real, years, scenario)
        client = None if offline else AdvisorClient(AdvisorSettings.from_env())
        narrative = engine.narrative(AdvisorService(client=client, cache=InMemoryAdvisorCache()))
    except (ValidationError, ModelValidationError) as exc:
        _fail(exc)
        return
    if narrative.error:
        console.print(f"[yellow]Advisor unavailable ({narrative.error}).[/yellow]\n")
    console.print(narrative.text)


@app.command()
def export(
    output: Path = typer.Argument(Path("capwise_cashflows.csv"), help="CSV destination"),
    years: int = YEARS_OPTION,
    scenario: ScenarioType = SCENARIO_OPTION,
) -> None:
    """Write the scenario cash flow schedule to CSV."""
    engine = CapitalProjectEngine(ProjectInputs(years=years, scenario=scenario))
    frame = engine.scenario_schedule().to_frame()
    frame.columns = [column.capitalize() for column in frame.columns]
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, index=False)
    console.print(f"Cash flows exported to: {output}")


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
