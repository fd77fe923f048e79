import pytest

from enmime.part import Part


def build_tree():
    #    root
    #    ├── a1
    #    │   ├── b1
    #    │   └── b2
    #    ├── a2
    #    └── a3
    root = Part(content_type="multipart/alternative", file_name="root")
    a1 = Part(content_type="multipart/related", parent=root, file_name="a1")
    a2 = Part(content_type="text/plain", parent=root, file_name="a2")
    a3 = Part(content_type="text/html", parent=root, file_name="a3")
    b1 = Part(content_type="text/plain", parent=a1, file_name="b1")
    b2 = Part(content_type="text/html", parent=a1, file_name="b2")
    root.first_child = a1
    a1.next_sibling = a2
    a2.next_sibling = a3
    a1.first_child = b1
    b1.next_sibling = b2
    return {"root": root, "a1": a1, "a2": a2, "a3": a3, "b1": b1, "b2": b2}


def is_type(ctype):
    return lambda part: part.content_type == ctype


def test_breadth_match_first():
    t = build_tree()
    assert t["root"].breadth_match_first(is_type("text/plain")) is t["a2"]
    assert t["root"].breadth_match_first(is_type("text/html")) is t["a3"]


def test_breadth_match_all():
    t = build_tree()
    assert t["root"].breadth_match_all(is_type("text/plain")) == [t["a2"], t["b1"]]
    assert t["root"].breadth_match_all(is_type("text/html")) == [t["a3"], t["b2"]]


def test_depth_match_first():
    t = build_tree()
    assert t["root"].depth_match_first(is_type("text/plain")) is t["b1"]
    assert t["root"].depth_match_first(is_type("text/html")) is t["b2"]


def test_depth_match_all():
    t = build_tree()
    assert t["root"].depth_match_all(is_type("text/plain")) == [t["b1"], t["a2"]]
    assert t["root"].depth_match_all(is_type("text/html")) == [t["b2"], t["a3"]]


def test_match_none_found():
    t = build_tree()
    assert t["root"].breadth_match_first(is_type("image/png")) is None
    assert t["root"].depth_match_first(is_type("image/png")) is None
    assert t["root"].breadth_match_all(is_type("image/png")) == []
    assert t["root"].depth_match_all(is_type("image/png")) == []


def test_traversal_orders_of_all_parts():
    t = build_tree()
    everything = lambda part: True  # noqa: E731
    breadth = [p.file_name for p in t["root"].breadth_match_all(everything)]
    depth = [p.file_name for p in t["root"].depth_match_all(everything)]
    assert breadth == ["root", "a1", "a2", "a3", "b1", "b2"]
    assert depth == ["root", "a1", "b1", "b2", "a2", "a3"]


def test_add_child_builds_chain():
    root = Part("multipart/mixed")
    first = Part("text/plain", file_name="first")
    second = Part("text/html", file_name="second")
    root.add_child(first)
    root.add_child(second)
    assert root.first_child is first
    assert first.next_sibling is second
    assert first.parent is root
    assert second.parent is root


def test_add_child_sets_parent_on_siblings():
    root = Part("multipart/mixed")
    first = Part("text/plain")
    second = Part("text/html")
    first.next_sibling = second
    root.add_child(first)
    assert second.parent is root
    assert [p.content_type for p in root.depth_match_all(lambda p: True)] == [
        "multipart/mixed",
        "text/plain",
        "text/html",
    ]


def test_add_child_infinite_loops():
    parent = Part(content_type="text/plain", charset="us-ascii", part_id="0")
    parent.add_child(parent)
    assert parent.first_child is None
    assert parent.parent is None

    child = Part(content_type="text/plain", charset="us-ascii", part_id="1")
    parent.first_child = child
    parent.add_child(child)
    assert child.next_sibling is None
    assert parent.first_child is child

    parent.first_child = None
    child.next_sibling = child
    parent.add_child(child)
    assert parent.first_child is child
    assert child.next_sibling is child


@pytest.mark.parametrize(
    "ctype, expected",
    [
        ("", True),
        ("text/plain", True),
        ("text/html", True),
        ("multipart/mixed", True),
        ("application/octet-stream", False),
        ("image/gif", False),
    ],
)
def test_text_content(ctype, expected):
    assert Part(ctype).text_content() is expected


def test_new_part_defaults():
    part = Part("text/plain")
    assert part.content_type == "text/plain"
    assert part.header == {}
    assert part.content_type_params == {}
    assert part.errors == []


def test_clone_copies_tree():
    t = build_tree()
    t["b1"].content = b"hello"
    t["root"].header = {"Subject": ["hi"]}
    clone = t["root"].clone(None)

    assert clone is not t["root"]
    assert clone.parent is None
    assert clone.header == {"Subject": ["hi"]}
    originals = t["root"].depth_match_all(lambda p: True)
    copies = clone.depth_match_all(lambda p: True)
    assert [p.file_name for p in copies] == [p.file_name for p in originals]
    assert [p.content_type for p in copies] == [p.content_type for p in originals]
    assert all(c is not o for c, o in zip(copies, originals))
    b1_copy = clone.depth_match_first(lambda p: p.file_name == "b1")
    assert b1_copy.content == b"hello"


def test_clone_sets_parents():
    t = build_tree()
    clone = t["root"].clone(None)
    a1 = clone.first_child
    assert a1.parent is clone
    assert a1.next_sibling.parent is clone
    assert a1.first_child.parent is a1
    assert a1.first_child.next_sibling.parent is a1


def test_clone_with_parent():
    t = build_tree()
    new_parent = Part("multipart/mixed")
    clone = t["a2"].clone(new_parent)
    assert clone.parent is new_parent
    assert clone.file_name == "a2"
    assert clone.next_sibling.file_name == "a3"
    assert clone.next_sibling.parent is new_parent