"""fxdesk - currency exchange back office."""

__version__ = "0.1.0"


def __getattr__(name):
    # The CLI pulls in every command module, so load it on first use
    if name == "main":
        from fxdesk.cli.main import main

        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
