# tests/test_wizard.py
from __future__ import annotations

import pytest
from conftest import output_of

from sipgateio_cli.errors import WizardAborted
from sipgateio_cli.template import parse_template
from sipgateio_cli.wizard import ConfirmationWizard, WizardState, flatten_answers, is_valid_filename

TEMPLATE = """
# Your sipgate token
TOKEN="default-token"
RECIPIENT=
"""

FILE_PROMPT = "Please choose a name for your file:"


@pytest.fixture
def questions():
    return parse_template(TEMPLATE)


def test_confirmed_run_writes_config_once(tmp_path, questions, make_prompter):
    prompter = make_prompter(answers=["", "+4915790000687", "mycfg"], confirms=[True])
    wizard = ConfirmationWizard(questions, prompter, directory=tmp_path)

    result = wizard.run()

    assert result == {"TOKEN": "default-token", "RECIPIENT": "+4915790000687"}
    assert wizard.written_path == tmp_path / "mycfg.cfg"
    assert (tmp_path / "mycfg.cfg").read_text(encoding="utf-8") == (
        "TOKEN=default-token\nRECIPIENT=+4915790000687\n"
    )
    assert wizard.state is WizardState.DONE
    assert prompter.asked == ["TOKEN =", "RECIPIENT =", FILE_PROMPT]


def test_declined_review_restarts_from_first_question_without_writing(tmp_path, questions, make_prompter):
    prompter = make_prompter(
        answers=["wrong", "wrong", "config", "right", "123", "config"],
        confirms=[False, True],
    )
    wizard = ConfirmationWizard(questions, prompter, directory=tmp_path)

    result = wizard.run()

    assert result == {"TOKEN": "right", "RECIPIENT": "123"}
    assert prompter.asked == ["TOKEN =", "RECIPIENT =", FILE_PROMPT] * 2
    assert wizard.attempts == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == ["config.cfg"]
    assert "wrong" not in (tmp_path / "config.cfg").read_text(encoding="utf-8")


def test_declined_overwrite_writes_nothing_and_warns(tmp_path, questions, make_prompter, theme):
    existing = tmp_path / "config.cfg"
    existing.write_text("TOKEN=keep-me\n", encoding="utf-8")
    prompter = make_prompter(answers=["new", "1", "config"], confirms=[True, False])
    wizard = ConfirmationWizard(questions, prompter, directory=tmp_path, max_attempts=1)

    with pytest.raises(WizardAborted):
        wizard.run()

    assert existing.read_text(encoding="utf-8") == "TOKEN=keep-me\n"
    assert prompter.confirmed[1] == "config already exists, are you sure you want to overwrite?"
    assert "[WARN] Aborting..." in output_of(theme)


def test_accepted_overwrite_replaces_existing_file(tmp_path, questions, make_prompter):
    existing = tmp_path / "config.cfg"
    existing.write_text("OLD=1\n", encoding="utf-8")
    prompter = make_prompter(answers=["new", "1", ""], confirms=[True, True])

    ConfirmationWizard(questions, prompter, directory=tmp_path).run()

    assert existing.read_text(encoding="utf-8") == "TOKEN=new\nRECIPIENT=1\n"


def test_declined_overwrite_then_new_name(tmp_path, questions, make_prompter):
    (tmp_path / "config.cfg").write_text("OLD=1\n", encoding="utf-8")
    prompter = make_prompter(
        answers=["a", "b", "config", "a", "b", "other"],
        confirms=[True, False, True],
    )

    ConfirmationWizard(questions, prompter, directory=tmp_path).run()

    assert (tmp_path / "config.cfg").read_text(encoding="utf-8") == "OLD=1\n"
    assert (tmp_path / "other.cfg").read_text(encoding="utf-8") == "TOKEN=a\nRECIPIENT=b\n"


def test_empty_answer_without_default_stays_empty(tmp_path, questions, make_prompter):
    prompter = make_prompter(answers=["", "", "config"], confirms=[True])

    result = ConfirmationWizard(questions, prompter, directory=tmp_path).run()

    assert result == {"TOKEN": "default-token", "RECIPIENT": ""}


def test_many_rejections_do_not_grow_the_stack(tmp_path, make_prompter):
    questions = parse_template("A=1\n")
    rejections = 2000
    prompter = make_prompter(
        answers=["", "config"] * (rejections + 1),
        confirms=[False] * rejections + [True],
    )

    ConfirmationWizard(questions, prompter, directory=tmp_path).run()

    assert (tmp_path / "config.cfg").exists()


def test_flatten_answers_takes_first_list_element():
    assert flatten_answers({"A": ["x", "y"], "B": "z", "C": []}) == {"A": "x", "B": "z", "C": ""}


@pytest.mark.parametrize("filename", ["sub/x", "../escape", "..\\up", ".", ".."])
def test_file_names_with_directories_are_rejected(filename):
    assert not is_valid_filename(filename)


def test_plain_file_names_are_accepted():
    assert is_valid_filename("config")
    assert is_valid_filename("my..config")


def test_directory_file_name_is_asked_again(tmp_path, questions, make_prompter, theme):
    prompter = make_prompter(answers=["t", "1", "sub/x", "../outside", "good"], confirms=[True])
    wizard = ConfirmationWizard(questions, prompter, directory=tmp_path)

    wizard.run()

    assert wizard.written_path == tmp_path / "good.cfg"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["good.cfg"]
    assert not (tmp_path.parent / "outside.cfg").exists()
    assert prompter.asked == ["TOKEN =", "RECIPIENT =", FILE_PROMPT, FILE_PROMPT, FILE_PROMPT]
    assert "Invalid file name 'sub/x'" in output_of(theme)
