from functools import wraps

import click

from .utils.logging import configure_logging


def _debug_option():
    return dict(
        is_eager=True,
        expose_value=False,
        callback=lambda ctx, param, value: _set_debug(ctx, value),
        help="Enable debug mode",
    )


def add_debug_option(cmd):
    """Decorator to add debug option to commands and groups"""
    if isinstance(cmd, click.Command):
        if not any(param.name == "debug" for param in cmd.params):
            cmd.params.insert(0, click.Option(["--debug/--no-debug"], **_debug_option()))
        return cmd

    @click.option("--debug/--no-debug", **_debug_option())
    @wraps(cmd)
    def wrapper(*args, **kwargs):
        return cmd(*args, **kwargs)

    return wrapper


def _set_debug(ctx, value: bool):
    """Callback function for debug flag"""
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    # a --debug on the group stays on for its subcommands
    if value or "DEBUG" not in root_ctx.obj:
        root_ctx.obj["DEBUG"] = value

    configure_logging(root_ctx.obj["DEBUG"])
    return root_ctx.obj["DEBUG"]
