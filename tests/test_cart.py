import itertools

from storefront.store import Store


def test_add_to_cart_increments_existing_entry(store, lamp, desk):
    store.add_to_cart(lamp)
    store.add_to_cart(desk)
    store.add_to_cart(lamp)

    assert [(it.product_id, it.quantity) for it in store.cart] == [("1", 2), ("2", 1)]
    assert store.cart_total == 25.0


def test_remove_from_cart_is_noop_for_unknown_product(store, lamp):
    store.add_to_cart(lamp)
    store.remove_from_cart("missing")
    assert len(store.cart) == 1

    store.remove_from_cart(lamp.id)
    assert store.cart == ()


def test_update_cart_quantity_drops_entry_at_zero(store, lamp, desk):
    store.add_to_cart(lamp)
    store.add_to_cart(desk)

    store.update_cart_quantity(lamp.id, 4)
    store.update_cart_quantity(desk.id, 0)
    store.update_cart_quantity("missing", 3)

    assert [(it.product_id, it.quantity) for it in store.cart] == [("1", 4)]


def test_clear_cart(store, lamp, desk):
    store.add_to_cart(lamp)
    store.add_to_cart(desk)
    store.clear_cart()
    assert store.cart == ()


def test_cart_snapshot_is_not_affected_by_later_changes(store, lamp):
    store.add_to_cart(lamp)
    snapshot = store.cart
    store.add_to_cart(lamp)

    assert snapshot[0].quantity == 1
    assert store.cart[0].quantity == 2


def test_cart_operations_keep_quantities_positive_and_unique(gateway, lamp, desk):
    ops = [
        ("add", lamp),
        ("add", desk),
        ("remove", lamp.id),
        ("remove", desk.id),
        ("set", (lamp.id, 0)),
        ("set", (desk.id, -1)),
        ("set", (lamp.id, 3)),
    ]
    for sequence in itertools.product(ops, repeat=4):
        store = Store(gateway)
        for op, arg in sequence:
            if op == "add":
                store.add_to_cart(arg)
            elif op == "remove":
                store.remove_from_cart(arg)
            else:
                store.update_cart_quantity(*arg)

        ids = [it.product_id for it in store.cart]
        assert len(ids) == len(set(ids))
        assert all(it.quantity >= 1 for it in store.cart)

    # Cart operations never reach the authority
    assert gateway.calls == []
