import caption_editor.utils.i18n  # noqa: F401

"""CLI interface for caption_editor project.

Every folder under ``caption_editor/cli`` with an ``__init__.py`` exposing
``COMMAND_DESCRIPTION`` and ``command(subparser)`` becomes a subcommand.
"""

import logging
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

from caption_editor.utils.misc import load_module

logger = logging.getLogger(__name__)


def add_subcommand(subparsers, name: str, submodule):
    subparser = subparsers.add_parser(name, help=submodule.COMMAND_DESCRIPTION)
    common_flags(subparser)
    handler = submodule.command(subparser)
    subparser.set_defaults(fn=handler)


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Give more details about what is happening"),
    )  # noqa: E501
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        help=_("Print version and exit"),
    )  # noqa: E501


def add_object_flags(parser):
    """Flags describing the overlays to place, shared by subcommands."""
    parser.add_argument("image", help=_("Image URL, data URI or file path"))
    parser.add_argument(
        "-c", "--caption", dest="captions", action="append", default=[],
        help=_("Caption text, may be repeated"),
    )
    parser.add_argument("--font-size", dest="font_size", type=int, default=None)
    parser.add_argument("--color", dest="color", default=None, help=_("Caption fill color"))
    parser.add_argument("--stroke", dest="stroke", default=None, help=_("Caption outline color"))
    parser.add_argument(
        "-e", "--emoji", dest="emojis", action="append", default=[],
        help=_("Emoji glyph, may be repeated"),
    )
    parser.add_argument(
        "-s", "--shape", dest="shapes", action="append", default=[],
        help=_("rectangle, circle, triangle or star; may be repeated"),
    )


def build_session(args):
    """
    Create a session for ``args.image`` and place the requested overlays.

    Returns None when the image could not be loaded. Otherwise the caller
    closes both the session and its loader.
    """
    import os

    from caption_editor.core.editing import EditingSession, LoadState
    from caption_editor.core.loading import ImmediateImageLoader
    from caption_editor.interfaces import EditorViewAdapter
    from caption_editor.utils.config import get_default_cfg
    from caption_editor.utils.env import load_cfg_from_env

    cfg = load_cfg_from_env(get_default_cfg(), dict(os.environ))
    session = EditingSession(ImmediateImageLoader(timeout=cfg.IMAGE.LOAD_TIMEOUT), cfg)
    adapter = EditorViewAdapter(session)
    if args.font_size is not None:
        adapter.font_size = args.font_size
    if args.color is not None:
        adapter.text_color = args.color
    if args.stroke is not None:
        adapter.stroke_color = args.stroke

    adapter.open({"imageUrl": args.image})
    if session.load_state is not LoadState.READY:
        logger.error(_("Could not load {image}").format(image=args.image))
        session.close()
        session.loader.close()
        return None

    for text in args.captions:
        adapter.add_caption(text)
    for glyph in args.emojis:
        adapter.add_emoji(glyph)
    for kind in args.shapes:
        adapter.add_shape(kind)
    return adapter


def main():  # pragma: no cover
    """
    The main function executes on commands:
    `python -m caption_editor` and `$ caption-editor `.
    """
    logging.basicConfig()
    parser = ArgumentParser(
        prog="caption_editor", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for module in sorted(Path(__file__).parent.glob("*/__init__.py")):
        if str(module).find("pycache") > 0:
            continue
        module_name = module.parent.name
        subcommand_module = load_module(
            module, module_name=f"caption_editor.cli.{module_name}"
        )
        add_subcommand(subparsers, module_name, subcommand_module)

    args = parser.parse_args()

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = (Path(__file__).parent.parent / "VERSION").read_text().strip()
    if args.is_show_version:
        print(version)
        sys.exit(0)
    logger.debug(f"{_('Starting')} caption_editor v{version}")

    fn = args.__dict__.get("fn")
    args.__dict__["fn"] = None
    if fn is not None:
        sys.exit(fn(args) or 0)
    else:
        parser.parse_args([*sys.argv[1:], "--help"])
