# Terminal prompts for the interactive client
import asyncio
import sys
import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Choice:
    name: str
    value: str
    description: Optional[str] = None


def _settle(answer: asyncio.Future, value: Optional[str], error: Optional[BaseException]) -> None:
    # The prompt may have been cancelled while the operator was typing
    if answer.done():
        return
    if error is not None:
        answer.set_exception(error)
    else:
        answer.set_result(value)


class Console:
    """Operator prompts on stdin/stdout.

    input() runs on a daemon thread so the MCP session keeps answering
    server requests (e.g. sampling) while the operator is typing, and a
    pending prompt never keeps the process alive after Ctrl+C.
    """

    async def _ask(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        answer = loop.create_future()

        def read() -> None:
            try:
                value, error = input(prompt), None
            except Exception as e:
                value, error = None, e
            if not loop.is_closed():
                loop.call_soon_threadsafe(_settle, answer, value, error)

        threading.Thread(target=read, name="console-input", daemon=True).start()
        return await answer

    async def select(self, message: str, choices: list[Choice]) -> str:
        if not choices:
            raise ValueError(f"Nothing to choose from for: {message}")

        print(message)
        for i, choice in enumerate(choices, 1):
            line = f"  {i}. {choice.name}"
            if choice.description:
                line += f" - {choice.description}"
            print(line)

        while True:
            answer = (await self._ask("> ")).strip()
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1].value
            print(f"Please enter a number between 1 and {len(choices)}")

    async def text(self, message: str) -> str:
        return await self._ask(f"{message} ")

    async def confirm(self, message: str, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = (await self._ask(f"{message} ({hint}) ")).strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            print("Please answer y or n")

    def print(self, text: str) -> None:
        print(text)

    def error(self, text: str) -> None:
        print(text, file=sys.stderr)
