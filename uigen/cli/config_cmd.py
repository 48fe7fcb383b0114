"""
Configuration management commands.
"""

from pathlib import Path
from typing import Optional

import click
from dotenv import dotenv_values, set_key

from uigen.config import Settings, validate_config

SECRET_MARKERS = ("API_KEY", "PASSWORD")


def mask_secret(value: str) -> str:
    """Mask sensitive values such as API keys."""
    if len(value) <= 12:
        return value
    return f"{value[:10]}...{value[-4:]}"


def _display(key: str, value: Optional[str]) -> str:
    if value and any(marker in key for marker in SECRET_MARKERS):
        value = mask_secret(value)
    return f"{key}={value}"


@click.group()
def config() -> None:
    """Manage uigen configuration."""
    pass


@config.command()
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--env-file", default=".env", help="Path to .env file")
def set(key: Optional[str], value: Optional[str], env_file: str) -> None:
    """Set configuration value."""
    if not key or not value:
        click.echo("Usage: uigen config set KEY VALUE")
        return

    if key not in Settings.model_fields:
        click.echo(f"❌ Invalid configuration key: {key}")
        return

    result = validate_config({key: value})
    if key in result and not result[key].is_valid:
        click.echo(f"❌ Invalid value for {key}: {result[key].message}")
        return

    try:
        set_key(env_file, key, value)
        click.echo(f"✅ Successfully set {key}")
    except OSError as e:
        click.echo(f"❌ Error setting {key}: {str(e)}")


@config.command()
@click.argument("key", required=False)
@click.option("--env-file", default=".env", help="Path to .env file")
def get(key: Optional[str], env_file: str) -> None:
    """Get configuration value(s)."""
    if not Path(env_file).exists():
        click.echo("❌ Environment file not found")
        return

    config_values = dotenv_values(env_file)
    if not config_values:
        click.echo("No configuration values found")
        return

    if key:
        if key not in config_values:
            click.echo("Key not found")
            return
        click.echo(_display(key, config_values[key]))
    else:
        for k, v in config_values.items():
            click.echo(_display(k, v))


@config.command()
@click.option("--env-file", default=".env", help="Path to .env file")
def check(env_file: str) -> None:
    """Validate the values in the environment file."""
    if not Path(env_file).exists():
        click.echo("❌ Environment file not found")
        return

    config_values = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
    unknown = [k for k in config_values if k not in Settings.model_fields]
    results = validate_config(config_values)

    has_errors = False
    for key in unknown:
        click.echo(f"⚠️  Unknown configuration key: {key}")
    for key, result in results.items():
        if result.is_valid:
            click.echo(f"✅ {key}: {result.message}")
        else:
            has_errors = True
            click.echo(f"❌ {key}: {result.message}")

    if has_errors:
        click.echo("❌ Configuration has errors")
    else:
        click.echo("✅ Configuration is valid")


if __name__ == "__main__":
    config()
