"""Flask CLI commands for the settings store."""

from __future__ import annotations

import json

import click

from .errors import SettingValidationError


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    from .extensions import get_settings_service

    @app.cli.command("globalsettings-seed")
    def globalsettings_seed() -> None:
        """Create default settings that do not exist yet."""

        from .services.defaults import seed_defaults

        summary = seed_defaults(get_settings_service(app))
        click.echo(f"Created {len(summary.created)} setting(s), skipped {len(summary.skipped)}.")

    @app.cli.command("globalsettings-get")
    @click.argument("key")
    @click.option("--default", "default", default=None, help="Value printed when KEY is missing")
    def globalsettings_get(key: str, default: str | None) -> None:
        """Print the decoded value of KEY as JSON."""

        value = get_settings_service(app).get(key, default)
        click.echo(json.dumps(value))

    @app.cli.command("globalsettings-set")
    @click.argument("key")
    @click.argument("value")
    @click.option("--json", "as_json", is_flag=True, default=False, help="Parse VALUE as JSON")
    def globalsettings_set(key: str, value: str, as_json: bool) -> None:
        """Store VALUE under KEY."""

        parsed = value
        if as_json:
            try:
                parsed = json.loads(value)
            except ValueError as exc:
                raise click.BadParameter(f"not valid JSON: {exc}", param_hint="VALUE") from exc
        try:
            get_settings_service(app).set(key, parsed)
        except SettingValidationError as exc:
            raise click.ClickException("; ".join(m for msgs in exc.errors.values() for m in msgs)) from exc
        click.echo(f"Set {key}.")
