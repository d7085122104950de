"""Tests for audit message lists and their human rendering."""

from __future__ import annotations

from packages.api_call.envelope import Meta, MetaItems


def test_meta_items_render_comma_joined_in_order() -> None:
    """MetaItems should render every entry as '[code]: description'."""
    items = MetaItems(
        items=[
            Meta(code="x011", description="Testing"),
            Meta(code="x012", description="Testing 2"),
        ]
    )

    assert str(items) == "[x011]: Testing, [x012]: Testing 2"


def test_empty_meta_items_render_empty_string() -> None:
    """An empty list should render as an empty string and be falsy."""
    items = MetaItems()

    assert str(items) == ""
    assert len(items) == 0
    assert not items


def test_meta_items_accept_null_wire_list() -> None:
    """A JSON null list should decode as no items."""
    items = MetaItems.model_validate({"items": None})

    assert items.items == ()


def test_meta_items_append_returns_new_list() -> None:
    """append should leave the original list untouched."""
    original = MetaItems(items=[Meta(code="1", description="Timeout")])

    extended = original.append(Meta(code="2", description="Canceled"))

    assert [item.code for item in original.items] == ["1"]
    assert [item.code for item in extended.items] == ["1", "2"]
