"""Progress reporting for batch runs."""

from __future__ import annotations

import sys

from tqdm import tqdm


class ProgressReporter:
    """
    Thin abstraction over a tqdm progress bar.

    When disabled every call is a no-op, so the pipeline can report
    unconditionally.
    """

    def __init__(self, total: int, description: str = "Resizing",
                 enabled: bool = True) -> None:
        self.total = total
        self.completed = 0
        self.description = description
        self._bar = tqdm(
            total=total, desc=description, unit="file",
            file=sys.stderr, dynamic_ncols=True, disable=not enabled,
        )

    def update(self, n: int = 1, suffix: str = "") -> None:
        self.completed += n
        if suffix:
            self._bar.set_postfix_str(suffix)
        self._bar.update(n)

    def close(self) -> None:
        self._bar.close()
