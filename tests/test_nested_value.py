from __future__ import annotations

from app.domain.nested_value import NestedObject, Scalar, set_at_path, to_plain


def test_creates_intermediate_objects() -> None:
    root = NestedObject()
    set_at_path(root, "contact.phone.mobile", "555")

    assert to_plain(root) == {"contact": {"phone": {"mobile": "555"}}}


def test_siblings_share_parent_object() -> None:
    root = NestedObject()
    set_at_path(root, "contact.phone", "555")
    set_at_path(root, "contact.email", "a@example.com")

    assert to_plain(root) == {"contact": {"phone": "555", "email": "a@example.com"}}


def test_scalar_is_replaced_by_object_on_deeper_path() -> None:
    root = NestedObject()
    set_at_path(root, "contact", "none")
    set_at_path(root, "contact.phone", "555")

    assert root.fields["contact"] == NestedObject({"phone": Scalar("555")})


def test_leaf_write_replaces_existing_object() -> None:
    root = NestedObject()
    set_at_path(root, "contact.phone", "555")
    set_at_path(root, "contact", "gone")

    assert to_plain(root) == {"contact": "gone"}


def test_single_segment_path_is_top_level_scalar() -> None:
    root = NestedObject()
    set_at_path(root, "gender", "f")

    assert root.fields == {"gender": Scalar("f")}
    assert not root.is_empty()
    assert NestedObject().is_empty()
