"""Interactive prompts reading from standard input."""

from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.markup import escape


class PromptService:
    """Yes/no, single-choice and free-text questions.

    ``input_func`` receives the prompt text and returns the raw answer; it
    defaults to ``Console.input`` so prompts share the run's console.
    """

    AFFIRMATIVE = ("y", "Y")

    def __init__(self, console: Console, input_func: Optional[Callable[[str], str]] = None):
        self.console = console
        self.input_func = input_func or self._console_input

    def _console_input(self, prompt: str) -> str:
        return self.console.input(escape(prompt))

    def _read(self, prompt: str) -> Optional[str]:
        try:
            return self.input_func(prompt)
        except EOFError:
            return None

    def confirm(self, prompt: str) -> bool:
        answer = self._read(f"{prompt} [y/N]: ")
        if answer is None:
            return False
        return answer.strip() in self.AFFIRMATIVE

    def ask(self, prompt: str) -> str:
        answer = self._read(f"{prompt}: ")
        return (answer or "").strip()

    def choose(
        self,
        title: str,
        options: Sequence[str],
        skip_label: str = "Skip",
    ) -> Optional[int]:
        """Return the zero-based index of the chosen option, or ``None``.

        Empty input (or end of input) means no selection. Anything else that
        is not a listed number re-prompts, without a retry limit.
        """
        self.console.print("")
        self.console.print(escape(title))
        for number, label in enumerate(options, start=1):
            self.console.print(f"  {number}) {escape(label)}")
        self.console.print(f"  Enter) {escape(skip_label)}")
        self.console.print("")

        prompt = f"Select [1-{len(options)}] (or press Enter to skip): "
        while True:
            answer = self._read(prompt)
            if answer is None:
                return None

            answer = answer.strip()
            if not answer:
                return None

            # str.isdigit() also accepts characters such as "²" that int() rejects.
            if answer.isascii() and answer.isdigit() and 1 <= int(answer) <= len(options):
                return int(answer) - 1

            self.console.print(
                f"[yellow]Invalid choice '{escape(answer)}'. Enter a number from 1 to {len(options)}, "
                "or press Enter to skip.[/yellow]"
            )
