# Path: grc_risk/cli.py
import click
from flask import Flask

from .models import db
from .reclassification import build_service


def _echo_report(report):
    click.echo(f"Examined: {report.examined}")
    click.echo(f"Changed:  {report.changed_count}")
    click.echo(f"Failed:   {report.failed_count}")
    for result in report.results:
        click.echo(f"  Risk {result.risk_id} ({result.title}): "
                   f"{result.old_risk_score} -> {result.new_risk_score} | {result.rationale}")
    for failure in report.failures:
        click.echo(f"  Risk {failure.risk_id} FAILED ({failure.error_type}): {failure.message}")


def register_commands(app: Flask):
    @app.cli.command('reclassify-all')
    def reclassify_all_command():
        """Recalculate every active, monitored or pending risk with linked assets."""
        report = build_service(db.session).reclassify_all_risks()
        _echo_report(report)
        if report.failed_count:
            raise SystemExit(1)

    @app.cli.command('reclassify-asset')
    @click.argument('asset_id', type=int)
    def reclassify_asset_command(asset_id):
        """Recalculate the risks linked to ASSET_ID."""
        report = build_service(db.session).reclassify_risks_by_asset(asset_id)
        _echo_report(report)
        if report.failed_count:
            raise SystemExit(1)
