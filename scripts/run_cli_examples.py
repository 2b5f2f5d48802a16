from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass

BASE_ARGS = ["--frames", "1", "--width", "160", "--height", "120"]


@dataclass
class Example:
    name: str
    args: list[str]
    expected_returncode: int = 0

    def full_args(self) -> list[str]:
        return [sys.executable, "explore.py", *self.args]


EXAMPLES: list[Example] = [
    Example(name="defaults", args=[*BASE_ARGS]),
    Example(name="scalar", args=[*BASE_ARGS, "--backend", "scalar"]),
    Example(name="tensor", args=[*BASE_ARGS, "--backend", "tensor", "--lanes", "0"]),
    Example(name="mandelbrot", args=[*BASE_ARGS, "--fractal", "mandelbrot", "--palette", "cyan"]),
    Example(name="newton", args=[*BASE_ARGS, "--fractal", "newton", "--palette", "rainbow"]),
    Example(name="nova", args=[*BASE_ARGS, "--fractal", "nova", "--seed-re", "0.1", "--seed-im", "0"]),
    Example(name="single-worker", args=[*BASE_ARGS, "--workers", "1"]),
    Example(name="processes", args=[*BASE_ARGS, "--workers", "2", "--processes"]),
    Example(
        name="navigation",
        args=[*BASE_ARGS, "--frames", "3", "--action", "zoom-in", "--action", "left", "--action", "seed-up"],
    ),
    Example(name="verbose", args=[*BASE_ARGS, "--verbose"]),
    Example(name="bad-workers", args=[*BASE_ARGS, "--workers", "0"], expected_returncode=2),
]


def main() -> None:
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        completed = subprocess.run(example.full_args())
        if completed.returncode != example.expected_returncode:
            raise RuntimeError(
                f"Example {example.name} exited with {completed.returncode}, expected {example.expected_returncode}"
            )
    print("\nAll CLI examples ran successfully.")


if __name__ == "__main__":
    main()
