# src/primetree/output_manager.py
from __future__ import annotations

import os
import sys

from primetree.fmt import strip_ansi


def resolve_output_path(path: str, root: str) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(root, path))


class OutputManager:
    """
    Handles all printing/output, to screen and/or one file.

    Usage:
        om = OutputManager(output_file="results/all.txt")
        om.write("Hello")   # prints and appends (ANSI stripped)
        om.close()          # blank line between runs
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, root: str | None = None):
        """
        Parameters:
            output_file: None or "" => screen only; otherwise append to this file
            quiet:       if True, no output to screen (only to file)
            root:        base for a relative output_file (default: current dir)
        """
        self.quiet = quiet
        self._wrote = False
        self._path: str | None = None
        self._file_failed = False

        if output_file:
            self._path = resolve_output_path(output_file, root or os.getcwd())
            parent = os.path.dirname(self._path)
            if parent:
                os.makedirs(parent, exist_ok=True)

    @property
    def path(self) -> str | None:
        return self._path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._wrote = True

        if not self.quiet:
            print(text, end="")

        if self._path:
            self._append(strip_ansi(text))

    def _append(self, text: str) -> None:
        if self._file_failed:
            return
        try:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as e:
            # Warn once, keep printing to screen
            self._file_failed = True
            print(f"[WARNING] Could not write output file: {self._path} ({type(e).__name__}: {e})", file=sys.stderr)

    def close(self) -> None:
        """Add a separator line between runs in the output file."""
        if self._path and self._wrote:
            self._append("\n")
