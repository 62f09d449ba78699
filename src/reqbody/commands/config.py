"""Config commands -- view and modify the global configuration.

Provides the ``reqbody config`` sub-command group for reading, updating and
resetting the user's :class:`~reqbody.models.GlobalConfig`. The stored
values are the lowest-precedence layer under ``./reqbody.json``,
``REQBODY_LIMIT`` and command-line flags.
"""

from __future__ import annotations

from typing import Any

import typer

from reqbody.output import error, format_result, info, success


config_app = typer.Typer(no_args_is_help=True)


def _coerce(current: Any, value: str) -> Any:
    """Convert the CLI string *value* to the type of the *current* setting.

    Unset (``None``) settings take booleans and integers when the text looks
    like one, so ``body_parser.strict false`` stores ``False``.
    """
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(current, bool) or (current is None and value.lower() in ("true", "false")):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int) or (current is None and value.isdigit()):
        return int(value)
    return value


@config_app.command("show")
def config_show() -> None:
    """Show the stored global configuration.

    Example::

        reqbody config show
        reqbody --json config show
    """
    from reqbody.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_result(config.model_dump(mode="json", by_alias=True))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g. 'body_parser.json.strict')."
    ),
    value: str = typer.Argument(help="Value to set. Lists take comma-separated items."),
) -> None:
    """Set a configuration value.

    Nested keys use dot notation. Per-format sub-objects (``json``,
    ``urlencoded``, ``text``) are created on first use. The updated config is
    validated against :class:`~reqbody.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 for an unknown key or an invalid value.

    Example::

        reqbody config set body_parser.limit 2mb
        reqbody config set body_parser.urlencoded.extended false
        reqbody config set plugins.disabled csv,msgpack
    """
    from reqbody.config import load_global_config, save_global_config
    from reqbody.exceptions import ConfigError
    from reqbody.models import GlobalConfig
    from reqbody.options import parse_size_limit

    config = load_global_config()
    data = config.model_dump(mode="json", by_alias=True)

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k in target and target[k] is None:
            target[k] = {}
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    # Sub-objects created above start empty; accept any option name and let
    # validation reject the unknown ones.
    if final_key not in target and target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    try:
        coerced = _coerce(target.get(final_key), value)
    except ValueError:
        error(f"Expected integer for {key}, got: {value}")
        raise typer.Exit(code=2) from None
    if final_key == "limit":
        try:
            parse_size_limit(coerced)
        except ConfigError as exc:
            error(str(exc))
            raise typer.Exit(code=2) from None
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the configuration to defaults.

    Raises:
        typer.Exit: If the user declines confirmation.

    Example::

        reqbody config reset --force
    """
    from reqbody.config import save_global_config
    from reqbody.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
