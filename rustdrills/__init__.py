"""A command-line runner that compiles, runs and checks small Rust exercises."""

__version__ = "5.5.1"