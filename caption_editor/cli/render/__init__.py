# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Place captions, emoji and shapes over an image and save the PNG")


def command(subparser):
    from caption_editor.cli import add_object_flags

    add_object_flags(subparser)
    subparser.add_argument(
        "-o", "--output-dir", dest="output_dir", type=Path, default=Path("."),
        help=_("Folder that receives edited-image.png"),
    )

    def handle(args):
        from caption_editor.cli import build_session

        adapter = build_session(args)
        if adapter is None:
            return 1
        with adapter.session, adapter.session.loader:
            target = adapter.download(args.output_dir)
        print(target)
        return 0

    return handle
