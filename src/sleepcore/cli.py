"""CLI for the sleepcore sleep-session analyzer."""

import logging

import click

from sleepcore.config import ConfigError, MonitorConfig, STAGE_UPDATE_INTERVAL


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """sleepcore — sleep stage, score and recommendation analyzer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("analyze")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, help="Write the report JSON to file.")
@click.option("--interval", default=STAGE_UPDATE_INTERVAL, type=float,
              help="Seconds between stage classifications.")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON.")
def analyze_cmd(file: str, output: str | None, interval: float, as_json: bool) -> None:
    """Replay a JSONL sample log and print the sleep report."""
    from sleepcore.replay import replay_file

    try:
        config = MonitorConfig(stage_update_interval=interval).validate()
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--interval")

    result = replay_file(file, output, config=config)
    if result is None:
        click.echo("No samples to analyze.")
        return

    if as_json:
        click.echo(result.to_json())
        return

    factors = result.quality_factors
    click.echo(f"\n{'=' * 60}")
    click.echo(f"  Sleep Report: {result.date.date().isoformat()}")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Score:       {result.sleep_score}/100")
    click.echo(f"  Total:       {result.total_sleep_time / 60:.0f} min "
               f"(eff {result.efficiency:.0%})")
    for stage, seconds in result.time_in_stage.items():
        click.echo(f"  {stage.value + ':':<12} {seconds / 60:.0f} min")
    click.echo(f"  Movement:    {factors.movement:.1f}")
    click.echo(f"  Snoring:     {factors.snoring:.1f}")
    if factors.room_temperature is not None:
        click.echo(f"  Room temp:   {factors.room_temperature:.1f} °C")
    click.echo(f"  Conditions:  {factors.quality_score}/100")
    click.echo(f"  Cycles:      {len(result.cycles)}")
    click.echo(f"{'=' * 60}")

    if result.recommendations:
        click.echo("\nRecommendations:")
        for rec in result.recommendations:
            click.echo(f"  [{rec.priority}] {rec.title} ({rec.category.value})")
            click.echo(f"      {rec.description}")

    if output:
        click.echo(f"\nReport written to {output}")


@main.command("stages")
@click.option("--hours", default=8.0, help="Length of the night to lay out.")
@click.option("--interval", default=STAGE_UPDATE_INTERVAL, type=float,
              help="Seconds between stage classifications.")
def stages_cmd(hours: float, interval: float) -> None:
    """Print the stage template for a still sleeper (no movement)."""
    from sleepcore.analytics.stages import classify_stage
    from sleepcore.models import QualityFactors

    if interval <= 0:
        raise click.BadParameter("must be positive", param_hint="--interval")

    still = QualityFactors()
    previous = None
    t = 0.0
    while t < hours * 3600:
        stage = classify_stage(still, 0.0, t)
        if stage != previous:
            click.echo(f"  {int(t) // 3600:02d}:{int(t) % 3600 // 60:02d}  {stage.value}")
            previous = stage
        t += interval


if __name__ == "__main__":
    main()
