from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

BLANK = " "
DEFAULT_SYMBOL = "█"

_TOKEN = re.compile(r"( +|\d+[^\d +]?)")


class NonogramError(ValueError):
    status: str = "error"


class FormatError(NonogramError):
    status = "format-error"


class DuplicateRunError(NonogramError):
    status = "duplicate-run"


class CapacityError(NonogramError):
    status = "capacity"


class TallyMismatchError(NonogramError):
    status = "tally-mismatch"

    def __init__(
        self, row_totals: Dict[str, str], col_totals: Dict[str, str]
    ) -> None:
        super().__init__(
            "rows and columns had different counts of characters. "
            f"row: {row_totals}, cols: {col_totals}"
        )
        self.row_totals = row_totals
        self.col_totals = col_totals


class NoSolutionError(NonogramError):
    status = "no-solution"


@dataclass
class Run:
    symbol: str
    count: int
    variable: bool = False

    def copy(self) -> "Run":
        return Run(self.symbol, self.count, self.variable)


ConstraintLine = List[Run]
SymbolTally = Dict[str, Tuple[int, bool]]


class Alphabet:
    """Symbol -> ordinal table for a single solve; blank is always ordinal 0."""

    def __init__(self) -> None:
        self.symbols: List[str] = [BLANK]
        self.index: Dict[str, int] = {BLANK: 0}

    def add(self, symbol: str) -> int:
        if symbol not in self.index:
            self.index[symbol] = len(self.symbols)
            self.symbols.append(symbol)
        return self.index[symbol]

    def next_after(self, symbol: str) -> Optional[str]:
        pos = self.index[symbol] + 1
        return self.symbols[pos] if pos < len(self.symbols) else None

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.index


def parse_constraint(text: str) -> ConstraintLine:
    """Parse a constraint string such as ``"1 3 1"`` or ``"2.2@2. 2@"``.

    A number followed by a character is that many of the character; the
    character may be omitted to mean the default block. Any run of spaces is a
    variable gap of at least one blank.
    """
    line: ConstraintLine = []
    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if not match:
            raise FormatError(f"{text[pos:]!r} is improper format")
        token = match.group(0)
        pos = match.end()
        if token[0] == BLANK:
            line.append(Run(BLANK, 1, True))
        elif token[-1].isdigit():
            line.append(Run(DEFAULT_SYMBOL, int(token)))
        else:
            line.append(Run(token[-1], int(token[:-1])))
    return line


def format_constraint(line: Sequence[Run]) -> str:
    parts: List[str] = []
    for run in line:
        if run.symbol == BLANK:
            if not run.variable or run.count != 1:
                raise FormatError(
                    "string formats only allow single variable spaces: "
                    f"{run_to_dict(run)}"
                )
            parts.append(BLANK)
        else:
            if run.variable:
                raise FormatError(
                    "string formats don't allow variable length colors: "
                    f"{run_to_dict(run)}"
                )
            parts.append(f"{run.count}{run.symbol}")
    return "".join(parts)


def run_to_dict(run: Run) -> dict:
    data = {"char": run.symbol, "count": run.count}
    if run.variable:
        data["multi"] = True
    return data


def run_from_dict(data: dict) -> Run:
    try:
        symbol = data["char"]
        count = data["count"]
    except (KeyError, TypeError) as exc:
        raise FormatError(f"run must have 'char' and 'count': {data!r}") from exc
    if not isinstance(symbol, str) or len(symbol) != 1:
        raise FormatError(f"run char must be a single character: {symbol!r}")
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise FormatError(f"run count must be a non-negative integer: {count!r}")
    return Run(symbol, count, bool(data.get("multi", False)))


def normalize_constraints(
    lines: Sequence[Sequence[Run]], alphabet: Alphabet
) -> Tuple[List[ConstraintLine], SymbolTally]:
    """Copy lines, add blank boundary runs and tally symbol usage for one axis.

    New symbols are registered in ``alphabet`` in first-seen order.
    """
    tally: SymbolTally = {BLANK: (0, True)}
    normalized: List[ConstraintLine] = []
    for raw in lines:
        line = [run.copy() for run in raw]
        for run in line:
            alphabet.add(run.symbol)
            total, variable = tally.get(run.symbol, (0, False))
            tally[run.symbol] = (total + run.count, variable or run.variable)
        for prev, run in zip(line, line[1:]):
            if prev.symbol == run.symbol:
                raise DuplicateRunError(
                    "constraints can't have consecutive duplicate characters: "
                    f"{format_runs(raw)}"
                )
        if not line or line[0].symbol != BLANK:
            line.insert(0, Run(BLANK, 0, True))
        else:
            line[0].variable = True
        if line[-1].symbol != BLANK:
            line.append(Run(BLANK, 0, True))
        else:
            line[-1].variable = True
        normalized.append(line)
    return normalized, tally


def format_runs(line: Iterable[Run]) -> str:
    return repr([run_to_dict(run) for run in line])


def verify_line_totals(
    lines: Sequence[ConstraintLine], limit: int, current: str, other: str
) -> None:
    """Each line may not claim more cells than the opposite axis provides."""
    for i, line in enumerate(lines):
        if sum(run.count for run in line) > limit:
            raise CapacityError(
                f"{current} {i + 1} had more characters than the number of "
                f"{other}s ({limit})"
            )


def _tally_text(tally: SymbolTally, keys: Iterable[str]) -> Dict[str, str]:
    return {
        k: f"{tally[k][0]}+" if tally[k][1] else str(tally[k][0]) for k in keys
    }


def verify_tallies(row_tally: SymbolTally, col_tally: SymbolTally) -> None:
    """Check that row and column totals of every symbol can agree."""
    rows = dict(row_tally)
    cols = dict(col_tally)
    keys = list(rows)
    keys.extend(k for k in cols if k not in rows)
    for k in keys:
        rows.setdefault(k, (0, False))
        cols.setdefault(k, (0, False))
    for k in keys:
        row_total, row_var = rows[k]
        col_total, col_var = cols[k]
        if row_var and col_var:
            continue
        if col_var and col_total <= row_total:
            continue
        if row_var and row_total <= col_total:
            continue
        if row_total == col_total:
            continue
        raise TallyMismatchError(_tally_text(rows, keys), _tally_text(cols, keys))


def constraints_hold(symbol: str, line: Sequence[Run], remaining: int) -> bool:
    """Return True if ``symbol`` can fill the next cell of a line read from the tail.

    ``remaining`` is the number of cells of the line still unassigned before
    this one. Runs at the tail that still need cells block any other symbol.
    """
    found = False
    for run in reversed(line):
        if found:
            remaining -= max(run.count, 0)
        elif run.symbol == symbol:
            found = True
            remaining -= max(run.count - 1, 0)
        elif run.count > 0:
            return False
    return found and remaining >= 0
