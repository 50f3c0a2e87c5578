"""
Command line front-end for lingora using Click.

Resolves keys against the configured source, lists locales and manages the
offline cache. Mostly useful for checking translation files and remote
endpoints from a shell or CI job.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from . import __version__
from .config.loader import load_config
from .config.schema import AppConfig
from .errors import ConfigurationError, LocaleUnavailable, SourceError
from .factory import build_runtime
from .hooks import RuntimeHooks
from .logging import configure_logging
from .runtime import Runtime
from .sources import FileStorage

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_MISSING_KEY = 2
EXIT_CONFIG_ERROR = 3
EXIT_SOURCE_ERROR = 4


def _parse_param(raw: str) -> tuple[str, Any]:
    """Parse ``name=value``; numeric values become int/float for plural rules."""
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise click.BadParameter(f"expected name=value, got '{raw}'", param_hint="--param")
    for cast in (int, float):
        try:
            return name, cast(value)
        except ValueError:
            continue
    return name, value


def _load_app_config(kwargs: dict[str, Any]) -> AppConfig:
    try:
        config = load_config(config_path=kwargs.get("config"), cli_args=kwargs)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (ValidationError, yaml.YAMLError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(config.logging, quiet=kwargs.get("quiet", False))
    return config


async def _prepare(runtime: Runtime, namespaces: tuple[str, ...]) -> None:
    """Load every locale of the fallback chain the source can serve, then namespaces."""
    if runtime.source is not None:
        for locale in runtime.fallback_chain:
            try:
                await runtime.load_locale(locale)
            except LocaleUnavailable:
                continue
    for namespace in namespaces:
        await runtime.load_namespace(namespace)


def _config_options(fn):
    fn = click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, path_type=Path),
        help="Path to the YAML configuration file",
    )(fn)
    fn = click.option(
        "--messages-dir",
        type=click.Path(file_okay=False, path_type=Path),
        help="Directory with one <locale>.json/.yaml file per locale",
    )(fn)
    fn = click.option("--remote-url", help="Base URL serving <locale>.json")(fn)
    fn = click.option("-v", "--verbose", count=True, help="More log output (-v, -vv)")(fn)
    fn = click.option("--log-file", type=click.Path(path_type=Path), help="JSON log file")(fn)
    fn = click.option("--quiet", is_flag=True, help="No log output on stderr")(fn)
    return fn


@click.group()
@click.version_option(version=__version__, prog_name="lingora")
def main() -> None:
    """lingora - message resolution and formatting runtime.

    Resolves translation keys through locale fallback chains, with
    plural/select template grammar and offline-cached remote sources.
    """
    pass


@main.command()
@click.argument("key", required=True)
@click.option("-l", "--locale", help="Current locale (e.g. tr-TR)")
@click.option("-f", "--fallback", help="Fallback locale")
@click.option("-p", "--param", "params", multiple=True, help="Parameter as name=value (repeatable)")
@click.option("-n", "--namespace", "namespaces", multiple=True, help="Namespace to load (repeatable)")
@click.option("--strict", is_flag=True, help="Exit with code 2 when the key is missing")
@_config_options
def translate(key: str, **kwargs: Any) -> None:
    """Resolve KEY and print the rendered message.

    Examples:

        \b
        $ lingora translate greeting -l tr --messages-dir ./locales -p name=Ann

        \b
        $ lingora translate cart.items -l en -p count=3 --remote-url https://cdn.example.com/i18n
    """
    config = _load_app_config(kwargs)
    params = dict(_parse_param(raw) for raw in kwargs.get("params", ()))

    missing: list[str] = []
    hooks = RuntimeHooks(on_missing_key=lambda k, _locale: missing.append(k))
    runtime = build_runtime(config, hooks=hooks)

    try:
        asyncio.run(_prepare(runtime, kwargs.get("namespaces", ())))
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (SourceError, LocaleUnavailable) as e:
        click.echo(f"Source error: {e}", err=True)
        sys.exit(EXIT_SOURCE_ERROR)

    click.echo(runtime.t(key, params or None))

    if missing and kwargs.get("strict"):
        click.echo(f"Missing translation: {key} ({config.locale})", err=True)
        sys.exit(EXIT_MISSING_KEY)


@main.command()
@_config_options
def locales(**kwargs: Any) -> None:
    """List the locales the configured source advertises."""
    config = _load_app_config(kwargs)
    runtime = build_runtime(config)
    if runtime.source is None:
        click.echo("No message source configured (use --messages-dir or --remote-url)", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    available = runtime.available_locales()
    if not available:
        click.echo("No locales known yet")
        return
    for locale in available:
        marker = " (fallback)" if locale == config.fallback else ""
        click.echo(f"  {locale}{marker}")


@main.command("validate-config")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the configuration file to validate",
)
def validate_config(config: Path | None) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except (ValidationError, yaml.YAMLError) as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_FAILED)

    source = "messages_dir" if app_config.messages_dir else "remote" if app_config.remote else "none"
    click.echo("Valid configuration")
    click.echo(f"  Locale: {app_config.locale} (fallback {app_config.fallback})")
    click.echo(f"  Source: {source}")
    click.echo(f"  Cache: {'on' if app_config.cache.enabled else 'off'}, ttl {app_config.cache.ttl_ms} ms")


@main.group()
def cache() -> None:
    """Manage the offline message cache."""
    pass


@cache.command("clear")
@_config_options
def cache_clear(**kwargs: Any) -> None:
    """Remove every cached locale for the configured prefix."""
    config = _load_app_config(kwargs)
    storage = FileStorage(config.cache.directory, prefix=config.cache.prefix)
    asyncio.run(storage.clear())
    click.echo(f"Cache cleared: {storage.cache_dir} ({storage.prefix})")


if __name__ == "__main__":
    main()
