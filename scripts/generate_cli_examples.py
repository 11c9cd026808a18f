from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "160", "--height", "160"]


@dataclass
class Expected:
    path: Path
    is_dir: bool = False


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, "graph.py", *self.args]


EXAMPLES: list[Example] = [
    Example(
        name="square",
        args=["func", "z^2", *BASE_ARGS, "--file-name", str(EXAMPLES_ROOT / "square" / "square.png")],
        expected=[Expected(EXAMPLES_ROOT / "square" / "square.png")],
        clean=[EXAMPLES_ROOT / "square"],
    ),
    Example(
        name="area",
        args=[
            "func", "exp z", *BASE_ARGS,
            "--left", "-3.2", "--right", "3.2", "--bottom", "-3.2", "--top", "3.2",
            "--file-name", str(EXAMPLES_ROOT / "area" / "exp-wide.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "area" / "exp-wide.png")],
        clean=[EXAMPLES_ROOT / "area"],
    ),
    Example(
        name="literals",
        args=[
            "func", "(sin z)^2i + cos(z * {3,0.1i} + z*z)", *BASE_ARGS,
            "--file-name", str(EXAMPLES_ROOT / "literals" / "literals.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "literals" / "literals.png")],
        clean=[EXAMPLES_ROOT / "literals"],
    ),
    Example(
        name="leading-minus",
        args=[*BASE_ARGS, "--file-name", str(EXAMPLES_ROOT / "leading-minus" / "minus-ln.png"), "--", "-ln z"],
        expected=[Expected(EXAMPLES_ROOT / "leading-minus" / "minus-ln.png")],
        clean=[EXAMPLES_ROOT / "leading-minus"],
    ),
    Example(
        name="quality",
        args=[
            "func", "1/z", *BASE_ARGS, "--quality", "480",
            "--file-name", str(EXAMPLES_ROOT / "quality" / "inverse-dense.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "quality" / "inverse-dense.png")],
        clean=[EXAMPLES_ROOT / "quality"],
    ),
    Example(
        name="order",
        args=[
            "func", "z^2", *BASE_ARGS, "--order", "magnitude",
            "--file-name", str(EXAMPLES_ROOT / "order" / "square-by-magnitude.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "order" / "square-by-magnitude.png")],
        clean=[EXAMPLES_ROOT / "order"],
    ),
    Example(
        name="tensor-backend",
        args=[
            "func", "z^3", *BASE_ARGS, "--backend", "tensor",
            "--file-name", str(EXAMPLES_ROOT / "tensor-backend" / "cube.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "tensor-backend" / "cube.png")],
        clean=[EXAMPLES_ROOT / "tensor-backend"],
    ),
    Example(
        name="pows",
        args=[
            "pows", *BASE_ARGS, "--count", "3",
            "--directory", str(EXAMPLES_ROOT / "pows" / "frames"),
            "--gif", str(EXAMPLES_ROOT / "pows" / "pows.gif"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "pows" / "frames", is_dir=True),
            Expected(EXAMPLES_ROOT / "pows" / "pows.gif"),
        ],
        clean=[EXAMPLES_ROOT / "pows"],
    ),
    Example(
        name="exps",
        args=["exps", *BASE_ARGS, "--count", "3", "--directory", str(EXAMPLES_ROOT / "exps")],
        expected=[Expected(EXAMPLES_ROOT / "exps", is_dir=True)],
        clean=[EXAMPLES_ROOT / "exps"],
    ),
    Example(
        name="examples",
        args=["examples", *BASE_ARGS, "--directory", str(EXAMPLES_ROOT / "gallery")],
        expected=[Expected(EXAMPLES_ROOT / "gallery" / "sqrt.png"), Expected(EXAMPLES_ROOT / "gallery" / "tan.png")],
        clean=[EXAMPLES_ROOT / "gallery"],
    ),
    Example(
        name="verbose",
        args=["func", "z", *BASE_ARGS, "--verbose", "--file-name", str(EXAMPLES_ROOT / "verbose" / "identity.png")],
        expected=[Expected(EXAMPLES_ROOT / "verbose" / "identity.png")],
        clean=[EXAMPLES_ROOT / "verbose"],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if expected.is_dir:
            if not expected.path.is_dir():
                raise RuntimeError(f"Expected directory {expected.path} was not created")
            if not any(expected.path.iterdir()):
                raise RuntimeError(f"Directory {expected.path} is empty")
        else:
            if not expected.path.is_file():
                raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
