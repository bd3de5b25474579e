"""Default intent to handler wiring."""

from twin.config import Settings
from twin.handlers.base import Handler
from twin.handlers.generic import GenericConversationHandler
from twin.handlers.search import CollectionSearchHandler
from twin.intent.taxonomy import Intent
from twin.llm.base import LLMProvider
from twin.vectorstore import VectorDatabase

INVOICES_COLLECTION = "invoices"
DOCUMENTS_COLLECTION = "documents"
PROFILES_COLLECTION = "profiles"
CONTACTS_COLLECTION = "contacts"
PHOTOS_COLLECTION = "photos"


def build_default_handlers(
    llm_provider: LLMProvider,
    vector_db: VectorDatabase,
    settings: Settings,
    embedding_provider: LLMProvider | None = None,
) -> dict[Intent, Handler]:
    """Build one handler per intent.

    Args:
        llm_provider: Provider used to write answers
        vector_db: Vector database holding the twin's collections
        settings: Application settings
        embedding_provider: Provider for query embeddings (defaults to llm_provider)

    Returns:
        Handler for every member of Intent
    """
    common = {
        "llm_provider": llm_provider,
        "vector_db": vector_db,
        "embedding_provider": embedding_provider,
    }

    return {
        Intent.GENERIC: GenericConversationHandler(
            llm_provider,
            timezone_name=settings.twin_timezone,
            location=settings.twin_location,
            temperature=settings.answer_temperature,
        ),
        Intent.INVOICE_SEARCH: CollectionSearchHandler(
            name="invoice search",
            subject="invoices",
            collection_name=INVOICES_COLLECTION,
            filter_fields=("vendor", "year"),
            **common,
        ),
        Intent.DOCUMENT_SEARCH: CollectionSearchHandler(
            name="document search",
            subject="documents",
            collection_name=DOCUMENTS_COLLECTION,
            filter_by_sub_type=True,
            **common,
        ),
        Intent.PROFILE_SEARCH: CollectionSearchHandler(
            name="profile search",
            subject="profile details",
            collection_name=PROFILES_COLLECTION,
            search_limit=3,
            **common,
        ),
        Intent.CONTACT_SEARCH: CollectionSearchHandler(
            name="contact search",
            subject="contacts",
            collection_name=CONTACTS_COLLECTION,
            **common,
        ),
        Intent.PHOTO_SEARCH: CollectionSearchHandler(
            name="photo search",
            subject="photos",
            collection_name=PHOTOS_COLLECTION,
            search_limit=10,
            **common,
        ),
    }
