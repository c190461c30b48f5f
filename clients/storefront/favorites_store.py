import logging

from pydantic import ValidationError

from clients.shared.config import FAVORITES_STORAGE_KEY
from clients.shared.storage import SafeStorage
from clients.storefront.models import ProductSnapshot

logger = logging.getLogger(__name__)


class FavoritesStore:
    def __init__(self, storage: SafeStorage) -> None:
        self.storage = storage
        saved = storage.get(FAVORITES_STORAGE_KEY)
        self._favorites: list[ProductSnapshot] = []
        if isinstance(saved, list):
            for raw in saved:
                try:
                    self._favorites.append(ProductSnapshot.model_validate(raw))
                except ValidationError as exc:
                    logger.warning("dropping unreadable saved favorite: %s", exc)

    @property
    def favorites(self) -> list[ProductSnapshot]:
        return list(self._favorites)

    def is_favorite(self, product_id: str) -> bool:
        return any(product.id == product_id for product in self._favorites)

    def add(self, product: ProductSnapshot) -> None:
        if self.is_favorite(product.id):
            return
        self._favorites.append(product)
        self._persist()

    def remove(self, product_id: str) -> None:
        self._favorites = [product for product in self._favorites if product.id != product_id]
        self._persist()

    def toggle(self, product: ProductSnapshot) -> bool:
        """Flip the favorite flag and return the new state."""
        if self.is_favorite(product.id):
            self.remove(product.id)
            return False
        self.add(product)
        return True

    def clear(self) -> None:
        self._favorites = []
        self._persist()

    def _persist(self) -> None:
        self.storage.set(
            FAVORITES_STORAGE_KEY,
            [product.model_dump(mode="json") for product in self._favorites],
        )
