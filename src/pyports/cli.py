"""CLI entry point for pyports."""

import click

KEYBINDINGS_HELP = """\b
Keybindings:
  j/k, Up/Down    Navigate ports
  /               Search/filter
  enter           Kill selected port (asks y/n)
  ctrl+k          Kill selected port (no confirm)
  ESC             Clear filter / exit search
  r               Refresh
  ?               Toggle help overlay
  q, ctrl+c       Quit
"""


@click.command(
    epilog=KEYBINDINGS_HELP,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(None, "-v", "--version", package_name="pyports", message="%(version)s")
def main() -> None:
    """Interactive TUI for viewing and killing listening TCP ports."""
    from pyports.app import PortsApp
    from pyports.config import Config
    from pyports.logging import configure

    config = Config()
    configure(config)
    PortsApp(config=config).run()
