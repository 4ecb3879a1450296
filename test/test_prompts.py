import pytest

from scui import prompts
from scui.utils.exceptions import AbortedError


def test_multi_choice_default_on_empty_line(scripted_input):
    scripted_input.feed("")
    assert prompts.input_multi_choice("color", "red", ["red", "blue"]) == "red"
    assert scripted_input.prompts == ["color (red): "]


def test_multi_choice_rejects_unknown_answers(scripted_input, capsys):
    scripted_input.feed("green", "blue")
    assert prompts.input_multi_choice("color", "red", ["red", "blue"]) == "blue"
    assert "invalid choice:" in capsys.readouterr().out


def test_multi_choice_help_lists_choices(scripted_input, capsys):
    hints = []
    scripted_input.feed("help", "red")
    prompts.input_multi_choice("color", "blue", ["red", "blue"], hints.append)
    assert hints == [["red", "blue"]]
    assert "  red" in capsys.readouterr().out


def test_multi_choice_abort(scripted_input):
    scripted_input.feed("..")
    with pytest.raises(AbortedError):
        prompts.input_multi_choice("color", "red", ["red"])


@pytest.mark.parametrize("answer,default,expected", [
    ("yes", False, True),
    ("no", True, False),
    ("", True, True),
    ("", False, False),
])
def test_yes_no(scripted_input, answer, default, expected):
    scripted_input.feed(answer)
    assert prompts.input_yes_no("continue?", default) is expected


def test_int_with_default(scripted_input, capsys):
    scripted_input.feed("abc", "12")
    assert prompts.input_int_with_default("start block", 0) == 12
    assert "'abc' is not a number" in capsys.readouterr().out
    scripted_input.feed("")
    assert prompts.input_int_with_default("end block", -1) == -1


def test_filename_resolves_relative_paths(scripted_input, tmp_path):
    (tmp_path / "key.hex").write_text("00")
    scripted_input.feed("key.hex")
    assert prompts.input_filename("key file: ", root=str(tmp_path)) == str(tmp_path / "key.hex")


def test_filename_errors(scripted_input, tmp_path):
    scripted_input.feed("missing")
    with pytest.raises(FileNotFoundError):
        prompts.input_filename("key file: ", root=str(tmp_path))
    scripted_input.feed(str(tmp_path))
    with pytest.raises(IsADirectoryError):
        prompts.input_filename("key file: ")
    scripted_input.feed("")
    with pytest.raises(AbortedError):
        prompts.input_filename("key file: ")
