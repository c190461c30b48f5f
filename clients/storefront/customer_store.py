import logging

from pydantic import ValidationError

from clients.shared.config import CUSTOMER_STORAGE_KEY
from clients.shared.storage import SafeStorage
from clients.storefront.models import CustomerInfo

logger = logging.getLogger(__name__)


class CustomerStore:
    """Remembers the customer's contact details between orders."""

    def __init__(self, storage: SafeStorage) -> None:
        self.storage = storage
        self.info = CustomerInfo()
        saved = storage.get(CUSTOMER_STORAGE_KEY)
        if isinstance(saved, dict):
            try:
                self.info = CustomerInfo.model_validate(saved)
            except ValidationError as exc:
                logger.warning("discarding unreadable saved profile: %s", exc)

    def update_info(self, **changes: str) -> CustomerInfo:
        unknown = set(changes) - set(CustomerInfo.model_fields)
        if unknown:
            raise ValueError(f"Unknown customer fields: {', '.join(sorted(unknown))}")
        self.info = self.info.model_copy(update=changes)
        self.storage.set(CUSTOMER_STORAGE_KEY, self.info.model_dump())
        return self.info

    def clear(self) -> None:
        self.info = CustomerInfo()
        self.storage.set(CUSTOMER_STORAGE_KEY, self.info.model_dump())
