from pathlib import Path

import pytest

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def testdata() -> Path:
    return TESTDATA


def top_level(tree, node_type):
    """Names of top-level declarations of ``node_type`` in a parsed Go tree."""
    names = []
    for node in tree.root_node.named_children:
        if node.type == node_type:
            names.append(node.child_by_field_name("name").text.decode())
    return names
