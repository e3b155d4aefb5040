import sys
from typing import Callable, Optional, Sequence, TextIO, TypeVar

T = TypeVar("T")


def choose(
    prompt: str,
    options: Sequence[tuple[str, T]],
    input_fn: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> T:
    """Show a numbered menu and block until the user picks one entry.

    Args:
        prompt: Text shown when asking for the selection
        options: List of (label, value) tuples, in display order
        input_fn: Reads one line of user input (``input`` by default)
        out: Stream the menu is written to (stdout by default)

    Returns:
        The value associated with the chosen label.

    The answer may be the item number or its exact label. Invalid answers
    re-prompt. EOFError and KeyboardInterrupt propagate to the caller.
    """
    if not options:
        raise ValueError("Cannot choose from an empty list of options.")
    input_fn = input_fn or input
    out = out or sys.stdout

    for i, (label, _) in enumerate(options, 1):
        print(f"{i}. {label}", file=out)

    labels = [label for label, _ in options]
    while True:
        answer = input_fn(prompt).strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1][1]
        if answer in labels:
            return options[labels.index(answer)][1]
        print(
            f"You must choose one of [{', '.join(str(i) for i in range(1, len(options) + 1))}].",
            file=out,
        )
