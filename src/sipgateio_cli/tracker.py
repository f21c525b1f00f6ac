from dataclasses import dataclass
from typing import Optional

from rich.tree import Tree

STATUS_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "running": "[cyan]○[/cyan]",
    "done": "[green]●[/green]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


@dataclass
class Step:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


class StepTracker:
    """Track deployment steps and render them as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: list[Step] = []

    def add(self, key: str, label: str):
        if self.get(key) is None:
            self.steps.append(Step(key, label))

    def get(self, key: str) -> Optional[Step]:
        return next((step for step in self.steps if step.key == key), None)

    def start(self, key: str, detail: str = ""):
        self._update(key, "running", detail)

    def complete(self, key: str, detail: str = ""):
        self._update(key, "done", detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, "error", detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, "skipped", detail)

    def _update(self, key: str, status: str, detail: str):
        step = self.get(key)
        if step is None:
            step = Step(key, key)
            self.steps.append(step)
        step.status = status
        if detail:
            step.detail = detail

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol = STATUS_SYMBOLS.get(step.status, " ")
            detail = f" ({step.detail.strip()})" if step.detail.strip() else ""
            if step.status == "pending":
                tree.add(f"{symbol} [bright_black]{step.label}{detail}[/bright_black]")
            else:
                tree.add(f"{symbol} [white]{step.label}[/white][bright_black]{detail}[/bright_black]")
        return tree
