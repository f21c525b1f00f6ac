"""
Interactive configuration wizard.

The wizard walks through a fixed set of states instead of calling
itself again when the user rejects the answers:

    PROMPTING -> REVIEWING -> COMMITTING -> (OVERWRITE_CHECK) -> DONE
                      |                          |
                      +-------> RETRYING <-------+

RETRYING always restarts at the first question with a fresh answer set.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from .config import CONFIG_SUFFIX, Config, config_exists, save_config
from .errors import WizardAborted
from .prompts import Prompter
from .template import Question

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "config"

Answers = dict[str, Union[str, list[str]]]


class WizardState(Enum):
    PROMPTING = "prompting"
    REVIEWING = "reviewing"
    COMMITTING = "committing"
    OVERWRITE_CHECK = "overwrite_check"
    RETRYING = "retrying"
    DONE = "done"


def is_valid_filename(filename: str) -> bool:
    """A bare file name: no directory separators and not a dot entry."""
    return not any(sep in filename for sep in ("/", "\\")) and filename not in (".", "..")


def flatten_answers(answers: Answers) -> Config:
    """Collapse list answers to their first element."""
    result: Config = {}
    for key, value in answers.items():
        if isinstance(value, list):
            result[key] = value[0] if value else ""
        else:
            result[key] = value
    return result


class ConfirmationWizard:
    """Ask every template question, confirm, and write ``<name>.cfg``.

    ``max_attempts`` bounds the number of full passes; None means the
    user may reject the answers as often as they like.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        prompter: Prompter,
        directory: Optional[Path] = None,
        max_attempts: Optional[int] = None,
    ):
        self.questions = list(questions)
        self.prompter = prompter
        self.directory = Path(directory) if directory is not None else Path.cwd()
        self.max_attempts = max_attempts
        self.state = WizardState.PROMPTING
        self.attempts = 0
        self.written_path: Optional[Path] = None

    def destination(self, filename: str) -> Path:
        return self.directory / f"{filename}{CONFIG_SUFFIX}"

    def _ask_question(self, question: Question) -> str:
        value = self.prompter.ask(
            question.prompt_text,
            default=question.default_value,
            help_text=question.help_text,
        )
        if value == "" and question.default_value is not None:
            return question.default_value
        return value

    def _prompt(self) -> tuple[Answers, str]:
        answers: Answers = {}
        for question in self.questions:
            answers[question.name] = self._ask_question(question)
        while True:
            filename = self.prompter.ask(
                "Please choose a name for your file:", default=DEFAULT_FILENAME
            ).strip() or DEFAULT_FILENAME
            if is_valid_filename(filename):
                return answers, filename
            self.prompter.theme.warn(f"Invalid file name {filename!r}, please choose a plain file name.")

    def run(self) -> Config:
        answers: Answers = {}
        filename = DEFAULT_FILENAME
        self.state = WizardState.PROMPTING

        while self.state is not WizardState.DONE:
            if self.state is WizardState.PROMPTING:
                if self.max_attempts is not None and self.attempts >= self.max_attempts:
                    raise WizardAborted(f"No configuration confirmed after {self.attempts} attempt(s)")
                self.attempts += 1
                answers, filename = self._prompt()
                self.state = WizardState.REVIEWING

            elif self.state is WizardState.REVIEWING:
                if self.prompter.confirm("Are you sure everything is correct?"):
                    self.state = WizardState.COMMITTING
                else:
                    self.state = WizardState.RETRYING

            elif self.state is WizardState.COMMITTING:
                path = self.destination(filename)
                if config_exists(path):
                    self.state = WizardState.OVERWRITE_CHECK
                    continue
                self.written_path = save_config(path, flatten_answers(answers))
                self.state = WizardState.DONE

            elif self.state is WizardState.OVERWRITE_CHECK:
                if self.prompter.confirm(
                    f"{filename} already exists, are you sure you want to overwrite?",
                    default=False,
                ):
                    self.written_path = save_config(self.destination(filename), flatten_answers(answers))
                    self.state = WizardState.DONE
                else:
                    self.prompter.theme.warn("Aborting...")
                    self.state = WizardState.RETRYING

            elif self.state is WizardState.RETRYING:
                logger.debug("Restarting wizard after attempt %d", self.attempts)
                answers = {}
                self.state = WizardState.PROMPTING

        logger.info("Configuration written to %s", self.written_path)
        return flatten_answers(answers)
