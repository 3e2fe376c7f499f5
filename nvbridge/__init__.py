"""Building blocks for a Neovim GUI client: redraw event and API info parsing,
command-line settings, locating and launching Neovim, and clipboard requests."""

__version__ = "0.1.0"