"""
Command Tree

The console navigates a tree of MenuNodes built from the contract's methods
and events. Branches end with the synthetic ``..``, ``help`` and ``exit``
commands; leaves are bound to one action kind.
"""

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .core.schema import InterfaceSchema
from .utils.logging import get_logger

logger = get_logger('menu')

NAME_SEPARATOR = "/"

UP_LABEL = ".."
HELP_LABEL = "help"
EXIT_LABEL = "exit"


class ActionKind(str, Enum):
    """What selecting a leaf does."""
    CONSTANT_CALL = "constant_call"
    TRANSACT = "transact"
    LIST_EVENTS = "list_events"
    WATCH_EVENTS = "watch_events"
    COMMAND = "command"
    UP = "up"
    HELP = "help"
    EXIT = "exit"


SYNTHETIC_ACTIONS = (ActionKind.UP, ActionKind.HELP, ActionKind.EXIT)


class MenuNode:
    """
    A node of the command tree.

    The parent link is a weak reference used for navigation and path names
    only; children are owned by their parent.
    """

    def __init__(self, label: Optional[str] = None, description: str = "",
                 parent: Optional["MenuNode"] = None,
                 action: Optional[ActionKind] = None, target: Any = None):
        self.label = label
        self.description = description
        self.action = action
        self.target = target
        self.children: List["MenuNode"] = []
        self._parent = weakref.ref(parent) if parent is not None else None

    @classmethod
    def root(cls) -> "MenuNode":
        node = cls()
        node._append_synthetic()
        return node

    @classmethod
    def branch(cls, label: str, description: str = "", parent: Optional["MenuNode"] = None) -> "MenuNode":
        node = cls(label, description)
        node._append_synthetic()
        if parent is not None:
            parent.add_child(node)
        return node

    def _append_synthetic(self) -> None:
        if self.label is not None:
            self.children.append(MenuNode(UP_LABEL, "move to the parent menu", self, ActionKind.UP))
        self.children.append(MenuNode(HELP_LABEL, "show the help for the current menu", self, ActionKind.HELP))
        self.children.append(MenuNode(EXIT_LABEL, "exit the interactive console", self, ActionKind.EXIT))

    @property
    def parent(self) -> Optional["MenuNode"]:
        return self._parent() if self._parent is not None else None

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_synthetic(self) -> bool:
        return self.action in SYNTHETIC_ACTIONS

    def add_child(self, node: "MenuNode") -> "MenuNode":
        """
        Attach ``node`` before the synthetic commands.

        A node labeled like a synthetic command is accepted and, since it
        comes first, shadows that command in this menu.

        Raises:
            ValueError: If a non-synthetic sibling already uses the label
        """
        if self.is_leaf:
            raise ValueError(f"can't add children to leaf {self.name()}")
        existing = self.child(node.label)
        if existing is not None:
            if not existing.is_synthetic:
                raise ValueError(f"duplicate menu entry {node.label!r} in {self.name() or 'root'}")
            logger.warning(f"{node.label!r} in {self.name() or 'root'} shadows the builtin command")
        node._parent = weakref.ref(self)
        tail = sum(1 for c in self.children if c.is_synthetic)
        self.children.insert(len(self.children) - tail, node)
        return node

    def add_leaf(self, label: str, description: str, action: ActionKind, target: Any = None) -> "MenuNode":
        return self.add_child(MenuNode(label, description, action=action, target=target))

    def child(self, label: str) -> Optional["MenuNode"]:
        for node in self.children:
            if node.label == label:
                return node
        return None

    def name(self) -> str:
        """Root-to-node labels joined with NAME_SEPARATOR."""
        parts = []
        node = self
        while node is not None:
            if node.label is not None:
                parts.append(node.label)
            node = node.parent
        return NAME_SEPARATOR.join(reversed(parts))

    def prompt(self, suffix: str = ">") -> str:
        return f"{self.name()}{suffix} "

    def walk(self) -> Iterator["MenuNode"]:
        """Depth-first iteration over the subtree, this node included."""
        yield self
        for node in self.children:
            yield from node.walk()

    def leaves(self) -> Iterator["MenuNode"]:
        return (node for node in self.walk() if node.is_leaf and not node.is_synthetic)

    def __repr__(self) -> str:
        return f"MenuNode({self.name() or '<root>'!r})"


class ResolutionKind(str, Enum):
    LEAF = "leaf"
    SUBTREE = "subtree"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    node: Optional[MenuNode] = None


@dataclass(frozen=True)
class CommandMenu:
    """A branch of named side-effect commands, dispatched by full path."""
    label: str
    description: str
    entries: Sequence[Tuple[str, str]] = field(default_factory=tuple)


def resolve(node: MenuNode, text: str) -> Resolution:
    """
    Resolve input against the immediate children of ``node``.

    Only exact label matches count. ``..`` resolves to the parent subtree,
    or to ``node`` itself at the root.
    """
    child = node.child(text)
    if child is None:
        if text == UP_LABEL and node.is_root:
            return Resolution(ResolutionKind.SUBTREE, node)
        return Resolution(ResolutionKind.NOT_FOUND)
    if child.action == ActionKind.UP:
        return Resolution(ResolutionKind.SUBTREE, node.parent or node)
    if child.is_leaf:
        return Resolution(ResolutionKind.LEAF, child)
    return Resolution(ResolutionKind.SUBTREE, child)


def render_help(node: MenuNode) -> str:
    """List the children of a node with their descriptions, aligned."""
    width = max((len(c.label) for c in node.children), default=0) + 4
    return "\n".join(
        f"{c.label}{' ' * (width - len(c.label))}{c.description}".rstrip()
        for c in node.children
    )


def build_tree(schema: InterfaceSchema, command_menus: Sequence[CommandMenu] = ()) -> MenuNode:
    """
    Build the command tree of a contract.

    Methods are split into ``constant`` and ``transact`` by mutability,
    events appear under both ``events/list`` and ``events/watch``. Leaves are
    sorted by name and described by their rendered signature.
    """
    root = MenuNode.root()

    constant = MenuNode.branch("constant", "make a call to a constant method", root)
    transact = MenuNode.branch("transact", "make a transaction to a method", root)
    for name in sorted(schema.methods):
        method = schema.methods[name]
        if method.constant:
            constant.add_leaf(name, str(method), ActionKind.CONSTANT_CALL, method)
        else:
            transact.add_leaf(name, str(method), ActionKind.TRANSACT, method)

    events = MenuNode.branch("events", "filter/watch events", root)
    list_node = MenuNode.branch("list", "list event", events)
    watch_node = MenuNode.branch("watch", "watch event", events)
    for name in sorted(schema.events):
        event = schema.events[name]
        list_node.add_leaf(name, str(event), ActionKind.LIST_EVENTS, event)
        watch_node.add_leaf(name, str(event), ActionKind.WATCH_EVENTS, event)

    for menu in command_menus:
        branch = MenuNode.branch(menu.label, menu.description, root)
        for label, description in menu.entries:
            branch.add_leaf(label, description, ActionKind.COMMAND)

    return root
