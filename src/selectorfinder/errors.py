from __future__ import annotations


class FinderError(RuntimeError):
    """Base class for selector synthesis failures."""


class InvalidTargetError(FinderError):
    pass


class SelectorNotFoundError(FinderError):
    def __init__(self, levels: int) -> None:
        super().__init__(f"Selector was not found after {levels} level(s).")
        self.levels = levels


class InternalInconsistencyError(FinderError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"Can't select any node with this selector: {selector}")
        self.selector = selector
