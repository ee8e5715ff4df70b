from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from constraints import (
    ConstraintLine,
    FormatError,
    Run,
    format_constraint,
    parse_constraint,
    run_from_dict,
    run_to_dict,
)
from solver import Grid, Logger, NonogramSolver, SolverResult, unsolve

LineData = Union[str, List[dict]]


def line_from_data(data: LineData) -> ConstraintLine:
    """Accept either a constraint string or a list of run objects."""
    if isinstance(data, str):
        return parse_constraint(data)
    if not isinstance(data, list):
        raise FormatError(f"constraint must be a string or a list of runs: {data!r}")
    return [run_from_dict(item) for item in data]


def line_to_data(line: Sequence[Run]) -> LineData:
    """Prefer the string form, falling back to run objects when it can't be written."""
    try:
        return format_constraint(line)
    except FormatError:
        return [run_to_dict(run) for run in line]


class PuzzleModel:
    """Row and column constraints of one puzzle document.

    ``styles`` maps a symbol to display style names. Nothing here renders
    them; they are kept so a document read by ``from_dict`` comes back
    unchanged from ``to_dict`` for whatever front end draws the grid.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.rows: List[ConstraintLine] = []
        self.cols: List[ConstraintLine] = []
        self.styles: Dict[str, List[str]] = {}

    def add_row(self, line: LineData) -> None:
        self.rows.append(line_from_data(line))

    def add_col(self, line: LineData) -> None:
        self.cols.append(line_from_data(line))

    def set_style(self, symbol: str, styles: Sequence[str]) -> None:
        self.styles[symbol] = list(styles)

    @property
    def shape(self) -> tuple:
        return len(self.rows), len(self.cols)

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleModel":
        if not isinstance(data, dict) or "rows" not in data or "cols" not in data:
            raise FormatError("puzzle must have 'rows' and 'cols'")
        model = cls()
        for line in data["rows"]:
            model.add_row(line)
        for line in data["cols"]:
            model.add_col(line)
        for symbol, styles in (data.get("styles") or {}).items():
            model.set_style(symbol, styles)
        return model

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[str]]) -> "PuzzleModel":
        model = cls()
        model.rows, model.cols = unsolve(grid)
        return model

    def to_dict(self) -> dict:
        data: dict = {
            "rows": [line_to_data(line) for line in self.rows],
            "cols": [line_to_data(line) for line in self.cols],
        }
        if self.styles:
            data["styles"] = {k: list(v) for k, v in self.styles.items()}
        return data

    def solver(self) -> NonogramSolver:
        return NonogramSolver(self.rows, self.cols)

    def solve(self, logger: Optional[Logger] = None) -> SolverResult:
        return self.solver().solve(logger)

    def solve_grid(self, logger: Optional[Logger] = None) -> Grid:
        return self.solver().solve_or_raise(logger)
