from .orchestrator import FetchResult, fetch_all
from .retrievers import FileRetriever, HttpRetriever, Retriever, retriever_from_settings

__all__ = [
    "FetchResult",
    "FileRetriever",
    "HttpRetriever",
    "Retriever",
    "fetch_all",
    "retriever_from_settings",
]
