"""
Interactive input primitives.

Every prompt understands ``..`` as "cancel" and raises AbortedError, which
unwinds the current action only. Multi-choice prompts also accept ``help``
and return the default on an empty line.
"""

import os
from typing import Callable, List, Optional, Sequence

from scui.keys import prompt_password
from scui.utils.colors import dim, error
from scui.utils.exceptions import AbortedError

ABORT_INPUT = ".."
HELP_INPUT = "help"
_YES_NO = {"yes": True, "no": False}


def input_text(prompt: str) -> str:
    """Read one line of raw text."""
    return input(prompt)


def input_multi_choice(prompt: str, default: str, choices: Sequence[str],
                       help_func: Optional[Callable[[List[str]], None]] = None) -> str:
    """
    Ask the operator to pick one of ``choices``.

    Args:
        prompt: Question, shown as ``<prompt> (<default>): ``
        default: Returned on an empty line
        choices: Accepted answers
        help_func: Called with the choices when the operator types ``help``

    Returns:
        The chosen text

    Raises:
        AbortedError: If the operator types ``..``
    """
    while True:
        answer = input(f"{prompt} ({default}): ").strip()
        if answer == "":
            return default
        if answer == ABORT_INPUT:
            raise AbortedError()
        if answer == HELP_INPUT:
            if help_func:
                help_func(list(choices))
            for choice in choices:
                print(f"  {choice}")
            continue
        if answer in choices:
            return answer
        print(f"{error('invalid choice:')} {answer}")


def input_yes_no(prompt: str, default: bool) -> bool:
    """Ask a yes/no question. Raises AbortedError on ``..``."""
    answer = input_multi_choice(
        prompt,
        "yes" if default else "no",
        ["no", "yes"],
        lambda _: print("choose yes or no"),
    )
    return _YES_NO[answer]


def input_int_with_default(prompt: str, default: int) -> int:
    """Read a base-10 integer, returning ``default`` on an empty line."""
    while True:
        answer = input(f"{prompt} ({default}): ").strip()
        if answer == "":
            return default
        if answer == ABORT_INPUT:
            raise AbortedError()
        try:
            return int(answer, 10)
        except ValueError:
            print(f"{answer!r} is not a number")


def input_filename(prompt: str, root: Optional[str] = None, must_exist: bool = True) -> str:
    """
    Read a path, relative paths being resolved against ``root``.

    Raises:
        AbortedError: On an empty line or ``..``
        FileNotFoundError: If ``must_exist`` and the path doesn't exist
        IsADirectoryError: If ``must_exist`` and the path is a directory
    """
    root = root or os.getcwd()
    answer = input(prompt).strip()
    if answer in ("", ABORT_INPUT):
        raise AbortedError()
    path = os.path.expanduser(answer)
    if not os.path.isabs(path):
        path = os.path.join(root, path)
    if must_exist:
        if not os.path.exists(path):
            raise FileNotFoundError(f"no such file: {path}")
        if os.path.isdir(path):
            raise IsADirectoryError(f"not a file: {path}")
    return path


def input_password(prompt: str = "password: ") -> str:
    """Read a password without echo."""
    return prompt_password(prompt)


def print_choices_hint(text: str) -> Callable[[List[str]], None]:
    """Build a help_func printing a one-line hint."""
    return lambda _: print(dim(text))
