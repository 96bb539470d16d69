"""Tests for the pure cart reducer."""

from storefront.cart.reducer import (
    EMPTY_CART,
    AddItem,
    Clear,
    Close,
    LoadItems,
    Open,
    RemoveItem,
    ToggleOpen,
    UpdateQuantity,
    cart_reducer,
    project_totals,
)

from .conftest import make_item


def run(*actions, state=EMPTY_CART):
    for action in actions:
        state = cart_reducer(state, action)
    return state


def assert_totals_match(state):
    assert state.total_item_count == sum(item.quantity for item in state.items)
    assert state.subtotal_minor_units == sum(
        item.quantity * item.unit_price_minor_units for item in state.items
    )


class TestAddItem:
    def test_add_to_empty_cart(self, tee):
        state = run(AddItem(tee))
        assert state.items == (tee,)
        assert state.total_item_count == 1
        assert state.subtotal_minor_units == 2500

    def test_same_pair_merges_quantity(self):
        state = run(
            AddItem(make_item(quantity=1)),
            AddItem(make_item(quantity=2)),
            AddItem(make_item(quantity=4)),
        )
        assert len(state.items) == 1
        assert state.items[0].quantity == 7
        assert_totals_match(state)

    def test_merge_keeps_first_snapshot(self):
        first = make_item(price=2500, name="Tee", image="/t.jpg")
        later = make_item(quantity=3, price=9999, name="Renamed Tee", image="/new.jpg")
        state = run(AddItem(first), AddItem(later))

        line = state.items[0]
        assert line.quantity == 4
        assert line.unit_price_minor_units == 2500
        assert line.name == "Tee"
        assert line.image_url == "/t.jpg"
        assert state.subtotal_minor_units == 4 * 2500

    def test_other_variant_gets_own_line(self):
        state = run(AddItem(make_item(variant_id="tshirt-m")), AddItem(make_item(variant_id="tshirt-l")))
        assert [item.variant_id for item in state.items] == ["tshirt-m", "tshirt-l"]

    def test_same_variant_other_product_gets_own_line(self):
        state = run(AddItem(make_item(product_id=1)), AddItem(make_item(product_id=2)))
        assert len(state.items) == 2

    def test_insertion_order_preserved(self, tee, mug):
        state = run(AddItem(mug), AddItem(tee), AddItem(make_item(product_id=2, variant_id="mug-white")))
        assert [item.product_id for item in state.items] == [2, 1]

    def test_non_positive_quantity_is_ignored(self, tee):
        bogus = tee.model_copy(update={"quantity": 0})
        state = run(AddItem(tee), AddItem(bogus))
        assert state.items[0].quantity == 1


class TestRemoveItem:
    def test_remove_existing(self, tee, mug):
        state = run(AddItem(tee), AddItem(mug), RemoveItem(1, "tshirt-m"))
        assert state.items == (mug,)
        assert state.subtotal_minor_units == 1500

    def test_remove_twice_is_same_as_once(self, tee, mug):
        once = run(AddItem(tee), AddItem(mug), RemoveItem(1, "tshirt-m"))
        twice = cart_reducer(once, RemoveItem(1, "tshirt-m"))
        assert twice == once

    def test_remove_unknown_pair_is_noop(self, tee):
        state = run(AddItem(tee))
        assert cart_reducer(state, RemoveItem(42, "nope")) == state
        assert cart_reducer(state, RemoveItem(1, "tshirt-xl")) == state


class TestUpdateQuantity:
    def test_sets_absolute_quantity(self, tee):
        state = run(AddItem(make_item(quantity=5)), UpdateQuantity(1, "tshirt-m", 2))
        assert state.items[0].quantity == 2
        assert state.subtotal_minor_units == 5000

    def test_zero_removes_line(self, tee):
        removed = run(AddItem(tee), RemoveItem(1, "tshirt-m"))
        updated = run(AddItem(tee), UpdateQuantity(1, "tshirt-m", 0))
        assert updated == removed
        assert updated.items == ()

    def test_negative_removes_line(self, tee, mug):
        state = run(AddItem(tee), AddItem(mug), UpdateQuantity(1, "tshirt-m", -3))
        assert state.find(1, "tshirt-m") is None
        assert all(item.quantity >= 1 for item in state.items)

    def test_unknown_pair_is_noop(self, tee):
        state = run(AddItem(tee))
        assert cart_reducer(state, UpdateQuantity(9, "x", 4)).items == state.items


class TestOpenClose:
    def test_toggle(self):
        state = run(ToggleOpen())
        assert state.is_open is True
        assert cart_reducer(state, ToggleOpen()).is_open is False

    def test_open_and_close(self, tee):
        state = run(AddItem(tee), Open())
        assert state.is_open is True
        assert state.items == (tee,)
        assert run(Close(), state=state).is_open is False


class TestClearAndLoad:
    def test_clear_zeroes_totals(self, tee, mug):
        state = run(AddItem(tee), AddItem(mug), Open(), Clear())
        assert state.items == ()
        assert state.total_item_count == 0
        assert state.subtotal_minor_units == 0
        assert state.is_open is True

    def test_load_replaces_items(self, tee, mug):
        state = run(AddItem(tee), LoadItems((mug,)))
        assert state.items == (mug,)
        assert state.subtotal_minor_units == 1500

    def test_load_collapses_duplicate_pairs(self):
        state = run(LoadItems((make_item(quantity=1), make_item(quantity=2, price=1))))
        assert len(state.items) == 1
        assert state.items[0].quantity == 3
        assert state.items[0].unit_price_minor_units == 2500


class TestScenario:
    def test_add_merge_then_zero_quantity(self, tee):
        state = run(AddItem(tee))
        assert len(state.items) == 1
        assert (state.total_item_count, state.subtotal_minor_units) == (1, 2500)

        state = cart_reducer(state, AddItem(make_item(quantity=2)))
        assert len(state.items) == 1
        assert state.items[0].quantity == 3
        assert state.subtotal_minor_units == 7500

        state = cart_reducer(state, UpdateQuantity(1, "tshirt-m", 0))
        assert state.items == ()
        assert (state.total_item_count, state.subtotal_minor_units) == (0, 0)

    def test_totals_track_items_through_mixed_sequence(self, tee, mug):
        actions = [
            AddItem(tee),
            AddItem(mug),
            AddItem(make_item(quantity=3)),
            UpdateQuantity(2, "mug-white", 4),
            ToggleOpen(),
            RemoveItem(1, "tshirt-m"),
            AddItem(make_item(product_id=3, variant_id="tote", price=1999, quantity=2)),
            UpdateQuantity(3, "tote", -1),
        ]
        state = EMPTY_CART
        for action in actions:
            state = cart_reducer(state, action)
            assert_totals_match(state)
            assert len({item.key for item in state.items}) == len(state.items)


class TestProjectTotals:
    def test_empty(self):
        totals = project_totals([])
        assert totals.total_item_count == 0
        assert totals.subtotal_minor_units == 0

    def test_integer_arithmetic(self):
        totals = project_totals([make_item(quantity=3, price=333), make_item(variant_id="b", quantity=1, price=1)])
        assert totals.total_item_count == 4
        assert totals.subtotal_minor_units == 1000
