import pytest

from thriftmarket.services import cart_service, wishlist_service
from thriftmarket.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError


def test_add_and_list_newest_first(buyer, seller, make_product):
    older = make_product(seller, title="Older")
    newer = make_product(seller, title="Newer")
    wishlist_service.add_item(buyer, older.id)
    wishlist_service.add_item(buyer, newer.id)

    titles = [i.product.title for i in wishlist_service.list_items(buyer.id)]
    assert titles == ["Newer", "Older"]


def test_duplicate_is_a_conflict(buyer, product):
    wishlist_service.add_item(buyer, product.id)
    with pytest.raises(ConflictError) as exc:
        wishlist_service.add_item(buyer, product.id)
    assert exc.value.code == "ALREADY_IN_WISHLIST"
    assert len(wishlist_service.list_items(buyer.id)) == 1


def test_lists_are_per_user(buyer, make_user, product):
    other = make_user("buyer")
    wishlist_service.add_item(buyer, product.id)
    wishlist_service.add_item(other, product.id)
    assert len(wishlist_service.list_items(buyer.id)) == 1
    assert len(wishlist_service.list_items(other.id)) == 1


def test_sellers_have_no_wishlist(seller, product):
    with pytest.raises(ForbiddenError):
        wishlist_service.add_item(seller, product.id)


def test_unknown_product(buyer):
    with pytest.raises(NotFoundError):
        wishlist_service.add_item(buyer, "prd-missing")


def test_sold_items_can_still_be_saved(buyer, product):
    product.is_available = False
    wishlist_service.add_item(buyer, product.id)
    assert wishlist_service.contains(buyer.id, product.id)


def test_remove(buyer, product):
    wishlist_service.add_item(buyer, product.id)
    assert wishlist_service.remove_item(buyer.id, product.id) == 1
    assert wishlist_service.remove_item(buyer.id, product.id) == 0
    assert wishlist_service.list_items(buyer.id) == []


def test_toggle(buyer, product):
    assert wishlist_service.toggle(buyer, product.id) is True
    assert wishlist_service.toggle(buyer, product.id) is False
    assert not wishlist_service.contains(buyer.id, product.id)


def test_move_to_cart_keeps_the_saved_item(buyer, product):
    wishlist_service.add_item(buyer, product.id)
    wishlist_service.move_to_cart(buyer, product.id)
    assert [i.product_id for i in cart_service.list_items(buyer.id)] == [product.id]
    assert wishlist_service.contains(buyer.id, product.id)


def test_move_sold_item_to_cart(buyer, product):
    wishlist_service.add_item(buyer, product.id)
    product.is_available = False
    with pytest.raises(ValidationError) as exc:
        wishlist_service.move_to_cart(buyer, product.id)
    assert exc.value.message == "This item is sold out"
    assert cart_service.list_items(buyer.id) == []


def test_move_twice_reports_cart_duplicate(buyer, product):
    wishlist_service.add_item(buyer, product.id)
    wishlist_service.move_to_cart(buyer, product.id)
    with pytest.raises(ConflictError) as exc:
        wishlist_service.move_to_cart(buyer, product.id)
    assert exc.value.message == "Item already in cart"


def test_move_requires_saved_item(buyer, product):
    with pytest.raises(NotFoundError):
        wishlist_service.move_to_cart(buyer, product.id)
