import pytest

from scui.core.schema import InterfaceSchema
from scui.dispatcher import SIGNER_MENU
from scui.menu import (
    ActionKind,
    MenuNode,
    ResolutionKind,
    build_tree,
    render_help,
    resolve,
)

TAIL = ["..", "help", "exit"]


@pytest.fixture
def tree(token_schema):
    return build_tree(token_schema, [SIGNER_MENU])


def labels(node):
    return [c.label for c in node.children]


def test_top_level_layout(tree):
    assert labels(tree) == ["constant", "transact", "events", "signer", "help", "exit"]
    assert labels(tree.child("constant")) == ["balanceOf", "info"] + TAIL
    assert labels(tree.child("transact")) == ["deposit", "transfer"] + TAIL
    assert labels(tree.child("events")) == ["list", "watch"] + TAIL
    assert labels(tree.child("events").child("list")) == ["Transfer"] + TAIL
    assert labels(tree.child("signer")) == ["key", "ledger", "show"] + TAIL


def test_every_branch_ends_with_synthetic_commands(tree):
    for node in tree.walk():
        if node is tree or node.is_leaf:
            continue
        assert labels(node)[-3:] == TAIL
        assert labels(node).count("..") == 1


def test_leaf_paths_are_unique(tree):
    names = [leaf.name() for leaf in tree.leaves()]
    assert len(names) == len(set(names))
    assert "events/watch/Transfer" in names
    assert "signer/key" in names


def test_leaves_carry_actions_and_descriptions(tree, token_schema):
    balance = tree.child("constant").child("balanceOf")
    assert balance.action == ActionKind.CONSTANT_CALL
    assert balance.target is token_schema.methods["balanceOf"]
    assert balance.description == "function balanceOf(address owner) view returns (uint256)"
    assert tree.child("transact").child("transfer").action == ActionKind.TRANSACT
    assert tree.child("events").child("watch").child("Transfer").action == ActionKind.WATCH_EVENTS
    assert tree.child("signer").child("show").action == ActionKind.COMMAND


def test_name_and_prompt(tree):
    node = tree.child("events").child("list")
    assert node.name() == "events/list"
    assert node.prompt(">") == "events/list> "
    assert tree.name() == ""
    assert tree.prompt(">") == "> "


def test_resolve_exact_matches_only(tree):
    constant = tree.child("constant")
    assert resolve(tree, "constant").kind == ResolutionKind.SUBTREE
    assert resolve(tree, "constant").node is constant
    leaf = resolve(constant, "balanceOf")
    assert leaf.kind == ResolutionKind.LEAF and leaf.node is constant.child("balanceOf")
    assert resolve(constant, "balance").kind == ResolutionKind.NOT_FOUND
    assert resolve(constant, "transfer").kind == ResolutionKind.NOT_FOUND


def test_up_resolves_to_parent(tree):
    watch = tree.child("events").child("watch")
    result = resolve(watch, "..")
    assert result.kind == ResolutionKind.SUBTREE
    assert result.node is tree.child("events")


def test_up_at_root_is_a_no_op(tree):
    result = resolve(tree, "..")
    assert result.kind == ResolutionKind.SUBTREE
    assert result.node is tree


def test_help_and_exit_resolve_to_synthetic_leaves(tree):
    help_node = resolve(tree.child("transact"), "help").node
    exit_node = resolve(tree, "exit").node
    assert help_node.action == ActionKind.HELP
    assert exit_node.action == ActionKind.EXIT


def test_render_help_aligns_descriptions(tree):
    text = render_help(tree.child("constant"))
    lines = text.splitlines()
    assert lines[0].startswith("balanceOf    function balanceOf(")
    assert lines[-1].startswith("exit")
    assert len(lines) == 5


def test_duplicate_labels_are_rejected():
    root = MenuNode.root()
    MenuNode.branch("a", "", root)
    with pytest.raises(ValueError):
        MenuNode.branch("a", "", root)
    root.add_leaf("help", "", ActionKind.COMMAND)
    with pytest.raises(ValueError):
        root.add_leaf("help", "", ActionKind.COMMAND)


def test_contract_entry_named_like_builtin_shadows_it():
    stake = {"type": "function", "name": "stake", "stateMutability": "nonpayable",
             "inputs": [{"name": "amount", "type": "uint256"}], "outputs": []}
    leave = {"type": "function", "name": "exit", "stateMutability": "nonpayable",
             "inputs": [], "outputs": []}
    help_event = {"type": "event", "name": "help", "anonymous": False, "inputs": []}
    tree = build_tree(InterfaceSchema.from_abi([leave, stake, help_event]))

    transact = tree.child("transact")
    assert labels(transact) == ["exit", "stake"] + TAIL
    resolution = resolve(transact, "exit")
    assert resolution.kind == ResolutionKind.LEAF
    assert resolution.node.action == ActionKind.TRANSACT
    assert resolution.node.target.name == "exit"

    watch = tree.child("events").child("watch")
    assert resolve(watch, "help").node.action == ActionKind.WATCH_EVENTS
    assert resolve(watch, "exit").node.action == ActionKind.EXIT


def test_parent_link_does_not_keep_parent_alive():
    root = MenuNode.root()
    child = MenuNode.branch("child", "", root)
    del root
    assert child.parent is None
