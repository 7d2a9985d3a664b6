# hfget/core/catalog.py
"""
Search and listing against the Hub, through huggingface_hub.HfApi.

Everything the wizard needs from the remote service goes through
CatalogClient so tests can swap the api object for a mock.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from huggingface_hub import HfApi
from huggingface_hub.errors import RepositoryNotFoundError

from .errors import NotFoundError, TransportError
from .models import FileEntry, RepositorySummary

logger = logging.getLogger(__name__)


class CatalogClient:
    def __init__(self, token: Optional[str] = None, api: Optional[HfApi] = None):
        self.token = token
        self.api = api if api is not None else HfApi(token=token)

    def search(self, query: str, limit: int) -> List[RepositorySummary]:
        logger.debug("Searching models: %r (limit=%d)", query, limit)
        try:
            return [
                RepositorySummary(name=m.id, likes=getattr(m, "likes", None) or 0)
                for m in self.api.list_models(search=query, limit=limit)
            ]
        except Exception as e:
            raise TransportError("Search failed", e) from e

    def fetch_metadata(self, repo: str) -> None:
        """Existence / auth check before listing."""
        logger.debug("Fetching model info for %s", repo)
        try:
            self.api.model_info(repo, token=self.token)
        except RepositoryNotFoundError as e:
            raise NotFoundError(f"Repository not found: {repo}", e) from e
        except Exception as e:
            raise TransportError(f"Failed to fetch model info for {repo}", e) from e

    def list_files(self, repo: str) -> List[FileEntry]:
        logger.debug("Listing files for %s", repo)
        try:
            entries = list(self.api.list_repo_tree(repo, recursive=True, token=self.token))
        except RepositoryNotFoundError as e:
            raise NotFoundError(f"Repository not found: {repo}", e) from e
        except Exception as e:
            raise TransportError(f"Failed to list files for {repo}", e) from e
        # folders carry no size attribute
        return [
            FileEntry(path=e.path, size=getattr(e, "size", None))
            for e in entries
            if hasattr(e, "size")
        ]
