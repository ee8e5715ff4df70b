from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from constraints import (
    BLANK,
    Alphabet,
    ConstraintLine,
    NoSolutionError,
    NonogramError,
    Run,
    constraints_hold,
    normalize_constraints,
    verify_line_totals,
    verify_tallies,
)

Grid = List[List[str]]
Logger = Callable[[str], None]

REPORT_INTERVAL_S = 60


@dataclass
class SolverResult:
    status: str
    solution: Optional[Grid]
    duration_ms: int
    steps: int = 0
    backtracks: int = 0
    message: str = ""


@dataclass
class SearchStats:
    """Counters for one search; each call gets its own."""

    steps: int = 0
    backtracks: int = 0


@dataclass
class Cell:
    """Search record for one grid position.

    ``symbol`` is None once every symbol of the alphabet has been tried. The
    undo stacks hold the runs popped off the row and column lines when the
    symbol was committed, in pop order.
    """

    symbol: Optional[str] = BLANK
    row_undo: List[Run] = field(default_factory=list)
    col_undo: List[Run] = field(default_factory=list)


def _consume(symbol: str, line: ConstraintLine, undo: List[Run]) -> None:
    while line[-1].symbol != symbol:
        undo.append(line.pop())
    tail = line[-1]
    tail.count -= 1
    if not tail.count and not tail.variable:
        undo.append(line.pop())


def _release(symbol: str, line: ConstraintLine, undo: List[Run]) -> None:
    # The decremented run is either still the tail or the last one popped.
    if line[-1].symbol == symbol:
        line[-1].count += 1
    else:
        undo[-1].count += 1
    while undo:
        line.append(undo.pop())


class NonogramSolver:
    def __init__(
        self,
        row_constraints: Sequence[Sequence[Run]],
        col_constraints: Sequence[Sequence[Run]],
        report_interval_s: float = REPORT_INTERVAL_S,
    ) -> None:
        self.row_constraints = row_constraints
        self.col_constraints = col_constraints
        self.report_interval_s = report_interval_s

    def _prepare(self) -> Tuple[List[ConstraintLine], List[ConstraintLine], Alphabet]:
        alphabet = Alphabet()
        row_lines, row_tally = normalize_constraints(self.row_constraints, alphabet)
        col_lines, col_tally = normalize_constraints(self.col_constraints, alphabet)
        verify_line_totals(row_lines, len(col_lines), "row", "column")
        verify_line_totals(col_lines, len(row_lines), "column", "row")
        verify_tallies(row_tally, col_tally)
        return row_lines, col_lines, alphabet

    def _search(
        self,
        row_lines: List[ConstraintLine],
        col_lines: List[ConstraintLine],
        alphabet: Alphabet,
        stats: SearchStats,
        logger: Optional[Logger] = None,
    ) -> Grid:
        rows = len(row_lines)
        cols = len(col_lines)
        size = rows * cols
        cells = [Cell() for _ in range(size)]
        start = time.time()
        last_report = start
        i = size - 1
        while i >= 0:
            now = time.time()
            if now - last_report >= self.report_interval_s:
                print(
                    f"[solver] {int(now - start)}s elapsed; cursor at cell {i}/{size}; "
                    f"{stats.backtracks} backtracks"
                )
                last_report = now
            r, c = divmod(i, cols)
            cell = cells[i]
            if cell.symbol is None:
                if i == size - 1:
                    raise NoSolutionError("no solutions found")
                cell.symbol = BLANK
                i += 1
                r, c = divmod(i, cols)
                cell = cells[i]
                _release(cell.symbol, row_lines[r], cell.row_undo)
                _release(cell.symbol, col_lines[c], cell.col_undo)
                stats.backtracks += 1
                if logger:
                    logger(f"Backtrack: r{r + 1}c{c + 1}")
                cell.symbol = alphabet.next_after(cell.symbol)
            elif constraints_hold(cell.symbol, col_lines[c], r) and constraints_hold(
                cell.symbol, row_lines[r], c
            ):
                _consume(cell.symbol, row_lines[r], cell.row_undo)
                _consume(cell.symbol, col_lines[c], cell.col_undo)
                stats.steps += 1
                if logger:
                    logger(f"Place: r{r + 1}c{c + 1} = {cell.symbol!r}")
                i -= 1
            else:
                cell.symbol = alphabet.next_after(cell.symbol)
        return [[cells[r * cols + c].symbol for c in range(cols)] for r in range(rows)]

    def solve_or_raise(
        self,
        logger: Optional[Logger] = None,
        stats: Optional[SearchStats] = None,
    ) -> Grid:
        """Solve or raise; pass ``stats`` to read the counters afterwards."""
        if stats is None:
            stats = SearchStats()
        row_lines, col_lines, alphabet = self._prepare()
        return self._search(row_lines, col_lines, alphabet, stats, logger)

    def solve(self, logger: Optional[Logger] = None) -> SolverResult:
        start = time.time()
        stats = SearchStats()
        print(
            f"[solver] solve start: {len(self.row_constraints)}x"
            f"{len(self.col_constraints)} grid"
        )
        try:
            solution = self.solve_or_raise(logger, stats)
        except NonogramError as exc:
            duration_ms = int((time.time() - start) * 1000)
            print(f"[solver] solve end in {duration_ms} ms; {exc.status}: {exc}")
            return SolverResult(
                status=exc.status,
                solution=None,
                duration_ms=duration_ms,
                steps=stats.steps,
                backtracks=stats.backtracks,
                message=str(exc),
            )
        duration_ms = int((time.time() - start) * 1000)
        print(
            f"[solver] solve end in {duration_ms} ms; {stats.steps} placements, "
            f"{stats.backtracks} backtracks"
        )
        return SolverResult(
            status="solved",
            solution=solution,
            duration_ms=duration_ms,
            steps=stats.steps,
            backtracks=stats.backtracks,
            message="Solved successfully.",
        )


def solve(
    row_constraints: Sequence[Sequence[Run]],
    col_constraints: Sequence[Sequence[Run]],
    logger: Optional[Logger] = None,
) -> Grid:
    """Solve a nonogram, raising a NonogramError subclass if it can't be solved.

    >>> from constraints import parse_constraint
    >>> solve([parse_constraint("1"), []], [parse_constraint("1"), []])
    [['█', ' '], [' ', ' ']]
    """
    return NonogramSolver(row_constraints, col_constraints).solve_or_raise(logger)


def _encode(symbols: Sequence[str]) -> List[Run]:
    line: List[Run] = []
    for symbol in symbols:
        if line and line[-1].symbol == symbol:
            line[-1].count += 1
        else:
            line.append(Run(symbol, 1))
    return line


def unsolve(grid: Sequence[Sequence[str]]) -> Tuple[List[List[Run]], List[List[Run]]]:
    """Derive the exact row and column constraints of a grid.

    Blank runs come out as fixed counts; nothing is made variable.
    """
    if not grid or not grid[0]:
        raise ValueError("grid must have at least one row and one column")
    width = len(grid[0])
    if any(len(row) != width for row in grid):
        raise ValueError("grid rows must all have the same length")
    row_lines = [_encode(row) for row in grid]
    col_lines = [_encode([row[c] for row in grid]) for c in range(width)]
    return row_lines, col_lines
