"""
Changelog service: reads new rows of ``<table>_changelog`` since a checkpoint
"""
import logging
from typing import Any, Callable, Dict, List

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from pydantic import ValidationError

from ..config import SyncSettings
from ..exceptions import ChangelogQueryException
from ..models.schemas import ChangeBatch, ChangeRow, SourceConfig
from ..utils.timestamps import checkpoint_lower_bound, ensure_utc, to_iso_utc


logger = logging.getLogger(__name__)

# Checkpoints are UTC; naive change_time values compare in the session time zone
SESSION_OPTIONS = "-c TimeZone=UTC"

CHANGELOG_QUERY = sql.SQL("""
    SELECT row_id, change_time, new_value AS {field}, action_type,
           octet_length(new_value) AS file_size,
           now() AS uploaded_at
    FROM {table}
    WHERE change_time > %(since)s
    ORDER BY change_time ASC
""")


def changelog_table(table_name: str) -> sql.Identifier:
    """Quoted changelog table name; a schema-qualified table keeps its schema"""
    schema, _, table = table_name.rpartition('.')
    if schema:
        return sql.Identifier(schema, f"{table}_changelog")
    return sql.Identifier(f"{table}_changelog")


class ChangelogService:
    """Polls changelog tables, one short-lived connection per query"""

    def __init__(
        self,
        settings: SyncSettings,
        connect: Callable[..., Any] = psycopg.connect
    ):
        """
        Initialize changelog service

        Args:
            settings: Sync settings (SSL mode, connect timeout)
            connect: Connection factory with the psycopg.connect signature
        """
        self.sslmode = settings.db_sslmode
        self.connect_timeout = settings.db_connect_timeout
        self._connect = connect

    def fetch_changes(self, source: SourceConfig) -> ChangeBatch:
        """
        Fetch rows changed since the source checkpoint, oldest first

        The returned ``new_checkpoint`` is the change time of the last row
        read, or the unchanged checkpoint when nothing changed. It is not
        committed here.

        Args:
            source: Source configuration

        Returns:
            ChangeBatch: Ordered rows and the candidate checkpoint

        Raises:
            ChangelogQueryException: If the query fails
        """
        since = checkpoint_lower_bound(source.last_checkpoint)
        logger.info(f"Current checkpoint for {source.source_key}: {source.last_checkpoint or '(none)'}")

        records = self._query(source, {"since": since})

        try:
            rows = [ChangeRow.from_record(record, source.field_name) for record in records]
        except (KeyError, ValidationError) as e:
            raise ChangelogQueryException(
                f"Unexpected changelog row shape in {source.table_name}_changelog",
                original_error=e
            )

        new_checkpoint = source.last_checkpoint
        if rows and ensure_utc(rows[-1].change_time) > since:
            new_checkpoint = to_iso_utc(rows[-1].change_time)

        logger.info(
            f"Fetched {len(rows)} changed rows from {source.table_name}_changelog "
            f"(field={source.field_name})"
        )
        return ChangeBatch(rows=rows, since=to_iso_utc(since), new_checkpoint=new_checkpoint)

    def _query(self, source: SourceConfig, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = CHANGELOG_QUERY.format(
            field=sql.Identifier(source.field_name),
            table=changelog_table(source.table_name)
        )
        try:
            with self._connect(
                host=source.host,
                port=source.port,
                user=source.user,
                password=source.password,
                dbname=source.database,
                sslmode=self.sslmode,
                connect_timeout=self.connect_timeout,
                options=SESSION_OPTIONS,
                row_factory=dict_row
            ) as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    return cur.fetchall()
        except psycopg.Error as e:
            raise ChangelogQueryException(
                f"Error fetching updated rows from {source.database}.{source.table_name}_changelog",
                original_error=e
            )
