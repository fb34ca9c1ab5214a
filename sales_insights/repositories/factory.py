from sales_insights.core.config import Settings
from sales_insights.core.logging import get_logger
from sales_insights.repositories.base import TransactionStore

logger = get_logger("sales_insights.repositories.factory")


def create_store(settings: Settings) -> TransactionStore:
    """Build the transaction store selected by STORE_BACKEND."""
    if settings.store_backend == "local":
        from sales_insights.repositories.local_repo import LocalRepository

        logger.info(f"Using local transaction store in {settings.data_dir}")
        return LocalRepository(settings.data_dir)

    if settings.store_backend == "firestore":
        # Imported lazily so local runs do not need Google credentials
        from sales_insights.repositories.firestore_repo import FirestoreRepository

        logger.info(f"Using Firestore collection '{settings.firestore_collection}'")
        return FirestoreRepository(collection=settings.firestore_collection)

    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend!r}. Use 'local' or 'firestore'.")
