"""
Helpers for converting methods into scripts, and checking the host before they run.
"""

from functools import wraps
from inspect import cleandoc, signature
import logging
from subprocess import CalledProcessError
import sys
from typing import Any, Callable, cast, Dict, List, Optional, Union

from docopt import docopt

from ..plumbing import host


DocOptArgs = Dict[str, Union[bool, str, List[str]]]


ENTRYPOINTS: List[str] = []


def entrypoint(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator to make an entrypoint out of a generic function.

    This uses `docopt` to parse arguments according to the method docstring, and will be formatted
    with `{script}` set to the script name.  At minimum, it should contain `Usage: {script}`.

    Functions may optionally accept arguments, but they must be annotated with a recognised type in
    order to be filled in:

    - `DocOptArgs` (a `dict` of input parameters parsed from the usage line)
    - `str` (the raw value of an input parameter matching the variable name, declared in the usage
      line either in upper case or surrounded by arrow brackets, e.g. `IFACE` or `<iface>`)

    An example function:

        @entrypoint
        def show(opts: DocOptArgs, iface: str):
            \"""
            Show an interface.

            Usage: {script} IFACE
            \"""
    """
    label = "nic-{}-{}".format(fn.__module__.rsplit(".", 1)[-1], fn.__qualname__).replace("_", "-")

    @wraps(fn)
    def wrap(opts: Optional[DocOptArgs] = None):
        extra: Dict[str, Any] = {}
        script = "{} [--debug]".format(label)
        if opts is None:
            doc = cleandoc(fn.__doc__.format(script=script))
            opts = docopt(doc)
        if opts.pop("--debug", False):
            logging.basicConfig(level=logging.DEBUG)
        else:
            logging.basicConfig(level=logging.INFO, format="%(message)s")
        sig = signature(fn)
        for param in sig.parameters.values():
            name = param.name
            cls = param.annotation
            if cls is DocOptArgs:
                extra[name] = opts
                continue
            try:
                try:
                    value = cast(str, opts[name.upper()])
                except KeyError:
                    value = cast(str, opts["<{}>".format(name)])
            except KeyError:
                raise RuntimeError("Missing argument {!r}".format(name))
            if cls is str:
                extra[name] = value
            else:
                raise RuntimeError("Bad parameter {!r} type {!r}".format(name, cls))
        try:
            return fn(**extra)
        except CalledProcessError as ex:
            error("Error: command {!r} failed with exit code {}".format(ex.cmd, ex.returncode),
                  exit=1)
    wrap.__doc__ = wrap.__doc__.format(script=label)
    # Create a console script line for setup.
    target = "{}:{}".format(fn.__module__, fn.__qualname__)
    ENTRYPOINTS.append("{}={}".format(label, target))
    return wrap


def error(msg: Optional[str] = None, *, exit: Optional[int] = None, colour: Optional[str] = None):
    """
    Print an error message and/or exit.
    """
    if msg:
        colour = colour or ("1" if exit else "3")
        print("\033[9{}m{}\033[0m".format(colour, msg), file=sys.stderr)
    if exit is not None:
        sys.exit(exit)


def require_root():
    """
    Exit unless running as root.
    """
    if not host.is_root():
        error("Error: run as root (use sudo).", exit=1)


def require_tools(*names: str):
    """
    Exit unless all of the given commands (bare names or full paths) are installed.
    """
    for name in names:
        if not host.get_tool(name):
            error("Error: {} not installed.".format(name), exit=1)


def require_interface(iface: str):
    """
    Exit unless the named network interface exists.
    """
    if not host.interface_exists(iface):
        error("Error: interface {!r} not found.".format(iface), exit=1)
