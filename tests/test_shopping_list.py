"""Tests for ShoppingList operations."""

import pytest

from shopping_list import (
    EmptyNameError,
    ItemNotFoundError,
    ShoppingList,
    clamp_quantity,
)


@pytest.fixture
def items():
    return ShoppingList()


def test_add_then_query(items):
    """A single add shows up with its quantity and category."""
    items.add("Bananas", 2)
    result = items.query()

    assert len(result) == 1
    assert result[0].name == "Bananas"
    assert result[0].quantity == 2
    assert result[0].category == "produce"


def test_add_trims_name(items):
    item = items.add("  Oat Milk  ")
    assert item.name == "Oat Milk"
    assert item.quantity == 1


def test_add_blank_name_rejected(items):
    with pytest.raises(EmptyNameError):
        items.add("   ")
    assert len(items) == 0


@pytest.mark.parametrize("quantity,expected", [(-3, 1), (0, 1), ("abc", 1), (None, 1), ("4", 4)])
def test_add_clamps_quantity(items, quantity, expected):
    assert items.add("milk", quantity).quantity == expected


def test_ids_are_unique_across_clear(items):
    first = items.add("milk").id
    second = items.add("bread").id
    items.clear()
    third = items.add("eggs").id

    assert len({first, second, third}) == 3


def test_remove_by_id(items):
    milk = items.add("milk")
    bread = items.add("bread")

    removed = items.remove_by_id(milk.id)

    assert removed is milk
    assert items.query() == [bread]


def test_remove_by_id_missing(items):
    items.add("milk")
    with pytest.raises(ItemNotFoundError):
        items.remove_by_id(999)
    assert len(items) == 1


def test_remove_by_name_query_is_case_insensitive(items):
    items.add("Whole Milk")
    removed = items.remove_by_name_query("milk")
    assert removed.name == "Whole Milk"
    assert len(items) == 0


def test_remove_by_name_query_removes_first_match_only(items):
    """Known limitation: the first substring hit is removed, not the best match."""
    items.add("almond milk")
    items.add("milk")

    removed = items.remove_by_name_query("milk")

    assert removed.name == "almond milk"
    assert [i.name for i in items] == ["milk"]


def test_remove_by_name_query_not_found(items):
    items.add("bread")
    with pytest.raises(ItemNotFoundError) as exc:
        items.remove_by_name_query("milk")
    assert str(exc.value) == 'Couldn\'t find "milk"'
    assert [i.name for i in items] == ["bread"]


@pytest.mark.parametrize("quantity", [0, -5])
def test_set_quantity_clamps(items, quantity):
    item = items.add("milk", 3)
    items.set_quantity(item.id, quantity)
    assert items.get(item.id).quantity == 1


def test_set_quantity_missing(items):
    with pytest.raises(ItemNotFoundError):
        items.set_quantity(1, 3)


def test_increment_then_decrement_restores(items):
    item = items.add("milk", 2)
    items.increment(item.id)
    assert item.quantity == 3
    items.decrement(item.id)
    assert item.quantity == 2


def test_decrement_floors_at_one(items):
    item = items.add("milk")
    items.decrement(item.id)
    assert item.quantity == 1


def test_clear_returns_count(items):
    items.add("milk")
    items.add("bread")
    assert items.clear() == 2
    assert len(items) == 0


def test_query_filters_case_insensitively(items):
    items.add("Milk")
    items.add("bread")
    assert [i.name for i in items.query("MIL")] == ["Milk"]
    assert [i.name for i in items.query("")] == ["Milk", "bread"]


def test_grouped_keeps_first_seen_order(items):
    for name in ("milk", "apple", "cheese", "banana"):
        items.add(name)

    grouped = items.grouped()

    assert list(grouped) == ["dairy", "produce"]
    assert [i.name for i in grouped["dairy"]] == ["milk", "cheese"]
    assert [i.name for i in grouped["produce"]] == ["apple", "banana"]


def test_grouped_with_search_term(items):
    items.add("milk")
    items.add("apple")
    assert list(items.grouped("app")) == ["produce"]


def test_to_dict(items):
    data = items.add("soap", 2).to_dict()
    assert data["name"] == "soap"
    assert data["quantity"] == 2
    assert data["category"] == "household"
    assert "T" in data["added_at"]


def test_clamp_quantity():
    assert clamp_quantity(2.7) == 2
    assert clamp_quantity("x") == 1
