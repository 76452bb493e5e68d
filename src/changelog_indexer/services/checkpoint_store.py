"""
Checkpoint store backed by Elasticsearch

Source configurations live in per-tenant indices sharing a name prefix;
the checkpoint is the ``updatedAt`` field of the same document.
"""
import logging
from typing import List, Optional

import requests
from pydantic import ValidationError
from requests.auth import HTTPBasicAuth

from ..config import SyncSettings
from ..exceptions import CheckpointException
from ..models.schemas import SourceConfig
from ..utils.timestamps import parse_checkpoint


logger = logging.getLogger(__name__)


class CheckpointStore:
    """Reads source configurations and advances their checkpoints over HTTP"""

    def __init__(self, settings: SyncSettings, session: Optional[requests.Session] = None):
        self.base_url = settings.elasticsearch_url
        self.username = settings.elasticsearch_username
        self.password = settings.elasticsearch_password
        self.fetch_size = settings.config_fetch_size
        self.tenant_index_prefix = settings.tenant_index_prefix
        self.timeout = settings.http_timeout
        self.session = session or requests.Session()
        logger.info(f" CheckpointStore initialized: {self.base_url}")

    def check_connection(self) -> bool:
        """Simple reachability check"""
        try:
            resp = self.session.get(self.base_url, timeout=3, auth=self._auth())
        except requests.RequestException as e:
            raise CheckpointException("Failed to connect to Elasticsearch", original_error=e)
        if resp.status_code >= 500:
            raise CheckpointException(f"Cannot connect to Elasticsearch: status={resp.status_code}")
        return True

    def list_config_indices(self, prefix: str) -> List[str]:
        """
        List configuration indices by name prefix

        Args:
            prefix: Index name prefix

        Returns:
            list: Matching index names, sorted

        Raises:
            CheckpointException: If the index listing fails
        """
        try:
            resp = self.session.get(
                f"{self.base_url}/_cat/indices",
                params={"format": "json", "h": "index"},
                timeout=self.timeout,
                auth=self._auth()
            )
        except requests.RequestException as e:
            raise CheckpointException("Failed to fetch indices from Elasticsearch", original_error=e)

        if resp.status_code != 200:
            raise CheckpointException(
                f"Failed to fetch indices: status={resp.status_code} body={resp.text}"
            )

        indices = [row.get('index') for row in resp.json() if row.get('index', '').startswith(prefix)]
        return sorted(indices)

    def fetch_source_configs(self, index_name: str) -> List[SourceConfig]:
        """
        Read every source configuration stored in one index

        Args:
            index_name: Configuration index

        Returns:
            list: Parsed configurations; invalid documents are logged and skipped

        Raises:
            CheckpointException: If the search fails
        """
        query = {
            "query": {"match_all": {}},
            "size": self.fetch_size,
            "seq_no_primary_term": True
        }
        try:
            resp = self.session.post(
                f"{self.base_url}/{index_name}/_search",
                json=query,
                timeout=self.timeout,
                auth=self._auth()
            )
        except requests.RequestException as e:
            raise CheckpointException(
                f"Failed to fetch details from index {index_name}",
                original_error=e
            )

        if resp.status_code != 200:
            raise CheckpointException(
                f"Search on {index_name} failed: status={resp.status_code} body={resp.text}"
            )

        configs = []
        for hit in resp.json().get('hits', {}).get('hits', []):
            try:
                configs.append(SourceConfig.from_hit(index_name, hit, self.tenant_index_prefix))
            except ValidationError as e:
                logger.warning(f"Skipping invalid source configuration {hit.get('_id')} in {index_name}: {e}")
        return configs

    def advance_checkpoint(self, source: SourceConfig, new_checkpoint: Optional[str]) -> bool:
        """
        Move a source checkpoint forward

        Nothing is written unless ``new_checkpoint`` is strictly newer than
        the checkpoint read with the configuration. The write is conditioned
        on the document version of that read when it is known.

        Args:
            source: Configuration as read at the start of the run
            new_checkpoint: Candidate ISO-8601 checkpoint

        Returns:
            bool: True if the checkpoint was written

        Raises:
            CheckpointException: If the update fails or the document changed since the read
        """
        candidate = parse_checkpoint(new_checkpoint)
        if candidate is None:
            return False
        current = parse_checkpoint(source.last_checkpoint)
        if current is not None and candidate <= current:
            logger.debug(f"Checkpoint for {source.source_key} already at {source.last_checkpoint}")
            return False

        params = {}
        if source.seq_no is not None and source.primary_term is not None:
            params = {"if_seq_no": source.seq_no, "if_primary_term": source.primary_term}

        try:
            resp = self.session.post(
                f"{self.base_url}/{source.index_name}/_update/{source.id}",
                params=params,
                json={"doc": {"updatedAt": new_checkpoint}},
                timeout=self.timeout,
                auth=self._auth()
            )
        except requests.RequestException as e:
            raise CheckpointException(
                f"Failed to update updatedAt for {source.source_key}",
                original_error=e
            )

        if resp.status_code == 409:
            raise CheckpointException(
                f"Checkpoint for {source.source_key} was modified concurrently"
            )
        if resp.status_code not in (200, 201):
            raise CheckpointException(
                f"Failed to update updatedAt for {source.source_key}: "
                f"status={resp.status_code} body={resp.text}"
            )

        logger.info(f"Updated updatedAt for {source.source_key} to {new_checkpoint}")
        return True

    def _auth(self):
        if self.username and self.password:
            return HTTPBasicAuth(self.username, self.password)
        return None
