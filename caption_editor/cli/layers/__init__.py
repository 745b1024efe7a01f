# flake8: noqa E501

from gettext import gettext as _

COMMAND_DESCRIPTION = _("Print the layer stack as JSON")


def command(subparser):
    from caption_editor.cli import add_object_flags

    add_object_flags(subparser)

    def handle(args):
        from caption_editor.cli import build_session

        adapter = build_session(args)
        if adapter is None:
            return 1
        with adapter.session, adapter.session.loader:
            print(adapter.session.introspector.dump())
        return 0

    return handle
