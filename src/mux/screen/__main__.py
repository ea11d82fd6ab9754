"""Demo entry point: ``python -m mux.screen``.

Opens a help buffer and wires a handful of keys to the manager's prompts
and stack operations so the whole layer can be tried on a real terminal.
"""

from __future__ import annotations

import argparse
import logging
import os

from mux.screen.config import ScreenConfig
from mux.screen.manager import ScreenManager
from mux.screen.terminal import ProcessTerminal
from mux.screen.views import TextView

logger = logging.getLogger(__name__)

HELP = [
    "mux-screen demo",
    "",
    "  o   open files (tab completes, empty answer browses)",
    "  /   search prompt",
    "  m   add a status line, M removes the newest one",
    "  f   flash a message",
    "  n   next buffer, p previous buffer",
    "  x   kill the current buffer",
    "  !   run a shell command",
    "  q   quit",
    "",
    "ctrl-g cancels any prompt.",
]


class DemoControls:
    """Keys shared by every buffer the demo opens."""

    def __init__(self, manager: ScreenManager) -> None:
        self.manager = manager
        self.handles: list[int] = []
        self.quit = False

    def handle(self, key: str) -> bool:
        manager = self.manager
        if key == "o":
            for path in manager.ask_for_filenames("filename", "Open: "):
                view = DemoTextView(self, _read_lines(path), name="file")
                manager.spawn(os.path.basename(path), view)
        elif key == "/":
            answer = manager.ask("search", "Search: ")
            if answer:
                manager.flash(f"searched for {answer!r}")
        elif key == "m":
            self.handles.append(manager.say(f"status line {len(self.handles) + 1}"))
        elif key == "M" and self.handles:
            manager.clear(self.handles.pop())
        elif key == "f":
            manager.flash("this is a flash message")
        elif key == "n":
            manager.roll_buffers()
        elif key == "p":
            manager.roll_buffers_backwards()
        elif key == "x":
            buf = manager.focus_buf
            if buf is not None and not manager.kill_buffer_safely(buf):
                manager.flash("this buffer cannot be killed")
        elif key == "!":
            command = manager.ask("shell", "Command: ")
            if command:
                manager.shell_out(command)
        elif key == "q":
            self.quit = bool(manager.ask_yes_or_no("Quit? (y/n)"))
        else:
            return False
        return True


class DemoTextView(TextView):
    """A scrollable text buffer; keys it does not use go to the demo controls."""

    def __init__(self, controls: DemoControls, lines: list[str], name: str | None = None) -> None:
        super().__init__(lines, name=name)
        self.controls = controls

    def handle_input(self, key: str) -> bool | None:
        if super().handle_input(key):
            return True
        return self.controls.handle(key)


class HelpView(DemoTextView):
    """The home buffer; it stays until the demo exits."""

    name = "help"

    def killable(self) -> bool:
        return False


def _read_lines(path: str) -> list[str]:
    try:
        with open(path, errors="replace") as f:
            return f.read().splitlines()
    except OSError as exc:
        logger.debug("cannot read %s", path, exc_info=True)
        return [f"cannot read {path}: {exc.strerror}"]


def main() -> None:
    parser = argparse.ArgumentParser(description="mux-screen: buffer stack and prompt demo")
    parser.add_argument("--log-file", default=None, help="Write logs to this file")
    parser.add_argument(
        "--log-level", default="info", choices=["debug", "info", "warning", "error"]
    )
    args = parser.parse_args()

    # Logging must never reach the terminal the demo is drawing on
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level.upper()),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())

    config = ScreenConfig.from_env()
    terminal = ProcessTerminal(write_log=config.write_log)
    manager = ScreenManager(terminal, config=config, home_view_type=HelpView)

    controls = DemoControls(manager)
    manager.spawn("help", HelpView(controls, HELP))

    terminal.start()
    try:
        manager.completely_redraw_screen()
        manager.run(until=lambda: controls.quit)
    finally:
        terminal.stop()


if __name__ == "__main__":
    main()
