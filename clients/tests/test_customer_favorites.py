import pytest

from clients.shared.config import CUSTOMER_STORAGE_KEY, FAVORITES_STORAGE_KEY
from clients.storefront.customer_store import CustomerStore
from clients.storefront.favorites_store import FavoritesStore
from clients.storefront.models import ProductSnapshot

RICE = ProductSnapshot(id="rice-1", name="ข้าวหมูแดง", price=50)
NOODLES = ProductSnapshot(id="noodle-1", name="ก๋วยเตี๋ยว", price=45)


def test_customer_partial_update_persists(storage):
    customer = CustomerStore(storage)
    customer.update_info(name="สมหญิง", phone="0899999999")
    customer.update_info(address="บ้านเลขที่ 7")

    restored = CustomerStore(storage)
    assert restored.info.name == "สมหญิง"
    assert restored.info.address == "บ้านเลขที่ 7"
    assert restored.info.landmark == ""
    assert storage.get(CUSTOMER_STORAGE_KEY)["phone"] == "0899999999"


def test_customer_rejects_unknown_fields_and_clears(storage):
    customer = CustomerStore(storage)
    with pytest.raises(ValueError, match="email"):
        customer.update_info(email="a@b.c")

    customer.update_info(name="x")
    customer.clear()
    assert CustomerStore(storage).info.name == ""


def test_favorites_toggle_and_dedupe(storage):
    favorites = FavoritesStore(storage)

    assert favorites.toggle(RICE) is True
    favorites.add(RICE)
    favorites.add(NOODLES)
    assert [p.id for p in favorites.favorites] == ["rice-1", "noodle-1"]

    assert favorites.toggle(RICE) is False
    assert not favorites.is_favorite("rice-1")
    assert [p["id"] for p in storage.get(FAVORITES_STORAGE_KEY)] == ["noodle-1"]

    assert FavoritesStore(storage).is_favorite("noodle-1")
    favorites.clear()
    assert FavoritesStore(storage).favorites == []


def test_unreadable_saved_profile_falls_back_to_blank(storage):
    storage.set(CUSTOMER_STORAGE_KEY, {"name": None, "phone": 812345678})

    customer = CustomerStore(storage)

    assert customer.info.name == ""
    assert customer.info.phone == ""


def test_unreadable_saved_favorites_are_dropped_individually(storage):
    storage.set(
        FAVORITES_STORAGE_KEY,
        [{"id": "p1", "name": "x", "price": -1}, RICE.model_dump(mode="json"), "junk"],
    )

    favorites = FavoritesStore(storage)

    assert [product.id for product in favorites.favorites] == ["rice-1"]
