"""
Interactive Contract Console

Read loop over the command tree: each line is resolved against the
children of the current menu node, moving the cursor into subtrees and
handing leaves to the ActionDispatcher.
"""

import cmd
from typing import List

from scui.dispatcher import ActionDispatcher
from scui.menu import ActionKind, MenuNode, ResolutionKind, render_help, resolve
from scui.utils.colors import bold, cyan, error, info
from scui.utils.logging import get_logger

logger = get_logger('console')


class ContractConsole(cmd.Cmd):
    """Interactive console for one contract."""

    intro = f"""
{bold('Welcome to scui.')}
Type {info('help')} to list the commands of the current menu, {info('..')} to move up and {info('exit')} to quit.
"""

    def __init__(self, root: MenuNode, dispatcher: ActionDispatcher, **kwargs):
        super().__init__(**kwargs)
        self.root = root
        self.current = root
        self.dispatcher = dispatcher

    @property
    def prompt(self):
        return cyan(self.current.prompt(">"))

    def run(self) -> None:
        """Run the loop until ``exit`` or end of input; Ctrl-C only clears the line."""
        intro = self.intro
        while True:
            try:
                self.cmdloop(intro)
                return
            except KeyboardInterrupt:
                print("^C")
                intro = ""

    def onecmd(self, line: str) -> bool:
        line = line.strip()
        if line == "EOF":
            print()
            return True
        if not line:
            return self.emptyline()

        resolution = resolve(self.current, line)
        if resolution.kind == ResolutionKind.NOT_FOUND:
            print(f"{error('invalid command:')} {line}")
            return False
        node = resolution.node
        if resolution.kind == ResolutionKind.SUBTREE:
            self.current = node
            return False
        if node.action == ActionKind.HELP:
            print(render_help(self.current))
            return False
        if node.action == ActionKind.EXIT:
            return True

        logger.debug(f"Dispatching {node.name()}")
        self.dispatcher.dispatch(node)
        return False

    def emptyline(self):
        """Do nothing on an empty line (don't repeat the last command)."""
        return False

    def completenames(self, text: str, *ignored) -> List[str]:
        return [c.label for c in self.current.children if c.label.startswith(text)]

    def completedefault(self, *ignored) -> List[str]:
        return []
