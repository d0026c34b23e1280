# src/qeinput/cli/_completers.py
try:
    from argcomplete.completers import FilesCompleter
except ImportError:  # argcomplete is optional
    FilesCompleter = None


def complete_files(action, *extensions: str):
    """Attach a file completer to an argparse action when argcomplete is installed."""
    if FilesCompleter is not None:
        action.completer = FilesCompleter(extensions or ())
    return action
