import pytest

from constraints import BLANK, FormatError, Run, parse_constraint
from model import PuzzleModel, line_from_data, line_to_data


def test_line_from_data_accepts_strings_and_runs():
    assert line_from_data("1 2@") == parse_constraint("1 2@")
    assert line_from_data([{"char": "#", "count": 3}, {"char": " ", "count": 2, "multi": True}]) == [
        Run("#", 3),
        Run(BLANK, 2, True),
    ]


def test_line_from_data_rejects_other_types():
    with pytest.raises(FormatError):
        line_from_data(3)


def test_line_to_data_falls_back_to_runs():
    assert line_to_data(parse_constraint("1 2@")) == "1█ 2@"
    assert line_to_data([Run("#", 1), Run(BLANK, 2)]) == [
        {"char": "#", "count": 1},
        {"char": " ", "count": 2},
    ]


def test_from_dict_and_solve():
    model = PuzzleModel.from_dict(
        {
            "rows": ["2@1.", "1@1#1.", [{"char": " ", "count": 1, "multi": True}, {"char": "#", "count": 2}]],
            "cols": ["2@", "1@2#", "2.1#"],
            "styles": {"@": ["red"], "#": ["bgWhite", "black"]},
        }
    )
    assert model.shape == (3, 3)
    assert model.styles["#"] == ["bgWhite", "black"]
    result = model.solve()
    assert result.status == "solved"
    assert result.solution == [list("@@."), list("@#."), list(" ##")]


def test_from_dict_requires_rows_and_cols():
    with pytest.raises(FormatError):
        PuzzleModel.from_dict({"rows": ["1"]})


def test_to_dict_round_trip():
    data = {"rows": ["1█", "", "1█"], "cols": ["1█ 1█"], "styles": {"█": ["blue"]}}
    assert PuzzleModel.from_dict(data).to_dict() == data


def test_from_grid_solves_back_to_grid():
    grid = [list("#@ "), list(" @#")]
    model = PuzzleModel.from_grid(grid)
    assert model.shape == (2, 3)
    assert model.solve_grid() == grid
    assert model.to_dict()["rows"][0] == [
        {"char": "#", "count": 1},
        {"char": "@", "count": 1},
        {"char": " ", "count": 1},
    ]


def test_reset_clears_model():
    model = PuzzleModel()
    model.add_row("1")
    model.add_col("1")
    model.set_style("█", ["white"])
    model.reset()
    assert model.shape == (0, 0)
    assert model.to_dict() == {"rows": [], "cols": []}


def test_styles_pass_through_solving_untouched():
    data = {"rows": ["1@"], "cols": ["1@"], "styles": {"@": ["red", "bold"]}}
    model = PuzzleModel.from_dict(data)
    assert model.solve_grid() == [["@"]]
    assert model.to_dict() == data
