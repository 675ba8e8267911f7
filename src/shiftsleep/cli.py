"""CLI for the shiftsleep sleep-report engine."""

import logging

import click

from shiftsleep import config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log dropped samples and window decisions.")
@click.version_option(config.get_version(), prog_name="shiftsleep")
def main(verbose: bool) -> None:
    """shiftsleep: shift-aware sleep reports from wearable samples."""
    config.get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)


def _hm(seconds: float) -> str:
    hours, minutes = divmod(int(round(seconds / 60)), 60)
    return f"{hours}h {minutes}m"


@main.command("report")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--date", "-d", "day", required=True, help="Reference date (YYYY-MM-DD).")
@click.option("--shift", "-s", default=None,
              help="Shift type: day, night, fullday, off. Omit for no window.")
@click.option("--device", default=None, help="Only use samples from this device.")
@click.option("--tz", default="UTC", show_default=True, help="Time zone for shift windows.")
@click.option("--mapping", type=click.Choice(["direct", "magnitude"]), default="direct",
              show_default=True, help="Motion value to sleep stage mapping.")
@click.option("--no-filter-vitals", is_flag=True,
              help="Do not apply the shift window to heart rate / blood oxygen.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.option("--output", "-o", default=None, help="Write report JSON to file.")
def report_cmd(
    file: str,
    day: str,
    shift: str | None,
    device: str | None,
    tz: str,
    mapping: str,
    no_filter_vitals: bool,
    as_json: bool,
    output: str | None,
) -> None:
    """Compute a sleep report from a .json or .jsonl sample file."""
    from shiftsleep.samples import load_samples
    from shiftsleep.analytics.report import compute_sleep_report
    from shiftsleep.analytics.scoring import quality_percent
    from shiftsleep.exceptions import InvalidDateError

    try:
        samples = load_samples(file)
    except ValueError as exc:
        raise click.BadParameter(f"{file} is not readable JSON: {exc}", param_hint="FILE") from exc
    try:
        report = compute_sleep_report(
            samples,
            day,
            shift=shift,
            device_id=device,
            tz=tz,
            mapping=mapping,
            filter_vitals=not no_filter_vitals,
        )
    except InvalidDateError as exc:
        raise click.BadParameter(str(exc)) from exc

    if as_json:
        click.echo(report.to_json())
    else:
        d = report.stage_durations
        click.echo(f"\n{'=' * 60}")
        click.echo(f"  Sleep Report: {report.device_id or '-'} {report.date}"
                   f" (shift: {report.shift or 'none'})")
        click.echo(f"{'=' * 60}")
        click.echo(f"  Total sleep:   {_hm(report.total_sleep_time)}"
                   f"{'' if report.is_normal_sleep else '  (abnormal)'}")
        click.echo(f"  Quality:       {quality_percent(report.sleep_quality):.2f}%")
        click.echo(f"  Efficiency:    {report.sleep_efficiency:.0%}")
        click.echo(f"  Deep:          {_hm(d.deep_sleep)}")
        click.echo(f"  Light:         {_hm(d.light_sleep)}")
        click.echo(f"  Eye movement:  {_hm(d.eye_movement)}")
        click.echo(f"  Awake:         {_hm(d.awake)}")
        click.echo(f"  Heart rate:    {report.heart_rate.min:.0f}-{report.heart_rate.max:.0f}"
                   f" bpm (avg {report.heart_rate.avg})")
        click.echo(f"  Blood oxygen:  {report.blood_oxygen.min:.0f}-{report.blood_oxygen.max:.0f}"
                   f"% (avg {report.blood_oxygen.avg})")
        click.echo(f"  Intervals:     {len(report.intervals)}")
        if report.dropped:
            dropped = ", ".join(f"{k}={v}" for k, v in sorted(report.dropped.items()))
            click.echo(f"  Dropped:       {dropped}")
        click.echo(f"{'=' * 60}")

    if output:
        with open(output, "w") as f:
            f.write(report.to_json())
        click.echo(f"\nReport written to {output}")


@main.command("window")
@click.argument("shift")
@click.option("--date", "-d", "day", required=True, help="Reference date (YYYY-MM-DD).")
@click.option("--tz", default="UTC", show_default=True, help="Time zone for shift windows.")
def window_cmd(shift: str, day: str, tz: str) -> None:
    """Show the sleep window a shift gets on a date."""
    from datetime import datetime

    from shiftsleep.analytics.shift import resolve_tz, shift_window
    from shiftsleep.exceptions import InvalidDateError

    try:
        window = shift_window(shift, day, tz=tz)
        zone = resolve_tz(tz)
    except InvalidDateError as exc:
        raise click.BadParameter(str(exc)) from exc

    if window is None:
        click.echo(f"{shift}: no sleep window (all intervals kept)")
        return
    start = datetime.fromtimestamp(window.start_ms / 1000, tz=zone)
    end = datetime.fromtimestamp(window.end_ms / 1000, tz=zone)
    click.echo(f"{shift}: {start.isoformat()} -> {end.isoformat()}")


if __name__ == "__main__":
    main()
