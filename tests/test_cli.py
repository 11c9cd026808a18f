import PIL.Image
import pytest

import graph

SMALL = ["-w", "24", "-H", "20", "--workers", "2"]


def test_func_is_default_verb(tmp_path):
    path = tmp_path / "out" / "plot.png"
    graph.main(["z^2", "-f", str(path)] + SMALL)

    with PIL.Image.open(path) as image:
        assert image.size == (4 * 10 + 100 + 2 * 24, 2 * 10 + 20)


def test_func_with_area_and_quality(tmp_path):
    path = tmp_path / "plot.png"
    graph.main(["func", "exp z", "-l", "0", "-r", "2", "-b", "-1", "-t", "3", "-q", "10",
                "--order", "magnitude", "-f", str(path)] + SMALL)
    assert path.exists()


def test_leading_minus_after_double_dash(tmp_path):
    path = tmp_path / "plot.png"
    graph.main(["-f", str(path)] + SMALL + ["--", "-ln z"])
    assert path.exists()


@pytest.mark.parametrize("description", ["z +", "(z", "2 2", "3i", "foo z"])
def test_invalid_expression_exits(tmp_path, description, capsys):
    with pytest.raises(SystemExit) as exc:
        graph.main(["func", description, "-f", str(tmp_path / "plot.png")] + SMALL)
    assert exc.value.code == 2
    assert "invalid expression" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv",
    [
        ["z", "-w", "0"],
        ["z", "-q", "-1"],
        ["z", "--workers", "0"],
        ["z", "-l", "1", "-r", "-1"],
    ],
)
def test_invalid_options_exit(tmp_path, argv):
    with pytest.raises(SystemExit) as exc:
        graph.main(argv + ["-f", str(tmp_path / "plot.png")])
    assert exc.value.code == 2


def test_pows_series_with_gif(tmp_path):
    directory = tmp_path / "pows"
    gif = tmp_path / "pows.gif"
    graph.main(["pows", "-c", "2", "-d", str(directory), "--gif", str(gif)] + SMALL)

    assert sorted(p.name for p in directory.iterdir()) == ["pow0.png", "pow1.png"]
    assert gif.exists()


def test_exps_series(tmp_path):
    directory = tmp_path / "exps"
    (directory / "stale").mkdir(parents=True)
    graph.main(["exps", "-c", "3", "-d", str(directory)] + SMALL)

    assert sorted(p.name for p in directory.iterdir()) == ["exp0.png", "exp1.png", "exp2.png"]


def test_exps_rejects_non_positive_size(tmp_path):
    with pytest.raises(SystemExit):
        graph.main(["exps", "-o", "0.2", "-s", "-0.2", "-c", "2", "-d", str(tmp_path / "exps")] + SMALL)


def test_examples(tmp_path):
    directory = tmp_path / "examples"
    graph.main(["examples", "-d", str(directory)] + SMALL)

    names = {name for name, _, _ in graph.EXAMPLE_FUNCTIONS}
    assert {p.stem for p in directory.iterdir()} == names


def test_nan_area_bound_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        graph.main(["z", "-l", "nan", "-f", str(tmp_path / "plot.png")] + SMALL)
    assert exc.value.code == 2


@pytest.mark.parametrize(
    "argv, position",
    [
        (["pows"], 0),
        (["-v", "pows"], 1),
        (["-w", "24", "-H", "20", "exps", "-c", "1"], 4),
        (["z^2", "-v"], None),
        (["-v", "z"], None),
        (["-f", "out.png", "--", "-ln z"], None),
        (["--", "pows"], None),
        ([], None),
    ],
)
def test_find_verb(argv, position):
    assert graph.find_verb(argv) == position


def test_options_before_verb(tmp_path):
    directory = tmp_path / "pows"
    graph.main(["-v", "-w", "16", "-H", "16", "pows", "-c", "1", "-d", str(directory)])
    assert [p.name for p in directory.iterdir()] == ["pow0.png"]
