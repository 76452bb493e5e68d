"""
Search index service: bulk document writes over HTTP
"""
import logging
from typing import List, Optional

import requests

from ..config import SyncSettings
from ..exceptions import SearchIndexException
from ..models.schemas import IndexDocument


logger = logging.getLogger(__name__)


class SearchIndexService:
    """Pushes index documents to the bulk ``docs/index`` endpoint"""

    def __init__(self, settings: SyncSettings, session: Optional[requests.Session] = None):
        if not settings.search_endpoint:
            raise SearchIndexException("Search endpoint is not configured")

        self.endpoint = settings.search_endpoint.rstrip('/')
        self.api_key = settings.search_api_key
        self.api_version = settings.search_api_version
        self.batch_size = settings.search_batch_size
        self.timeout = settings.http_timeout
        self.session = session or requests.Session()
        logger.info(f" SearchIndexService initialized: {self.endpoint}")

    def push(self, documents: List[IndexDocument], index_name: str) -> int:
        """
        Write documents with their own action verbs

        Documents go out in requests of at most ``batch_size``. Any failed
        request or document fails the whole push.

        Args:
            documents: Documents of one source
            index_name: Destination index

        Returns:
            int: Number of documents written

        Raises:
            SearchIndexException: If any document was not written
        """
        if not documents:
            return 0

        for start in range(0, len(documents), self.batch_size):
            batch = documents[start:start + self.batch_size]
            self._post_batch(batch, index_name)

        logger.info(f"Pushed {len(documents)} documents to {index_name}")
        return len(documents)

    def _post_batch(self, batch: List[IndexDocument], index_name: str):
        url = f"{self.endpoint}/indexes/{index_name}/docs/index"
        try:
            resp = self.session.post(
                url,
                params={"api-version": self.api_version},
                json={"value": [doc.to_payload() for doc in batch]},
                headers={
                    "Content-Type": "application/json",
                    "api-key": self.api_key or ""
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise SearchIndexException(f"Push to {index_name} failed", original_error=e)

        if resp.status_code == 200:
            return

        if resp.status_code == 207:
            results = resp.json().get('value', [])
            failed = [r.get('key') for r in results if not r.get('status')]
            raise SearchIndexException(
                f"Push to {index_name} partially failed: {len(failed)}/{len(batch)} documents "
                f"rejected ({', '.join(str(k) for k in failed[:10])})"
            )

        raise SearchIndexException(
            f"Push to {index_name} failed: status={resp.status_code} body={resp.text}"
        )
