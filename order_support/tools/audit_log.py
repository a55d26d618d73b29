"""
Conversation audit logging.

Every message of an experiment session is appended to a per-user text
transcript. Production sessions write to a Google Cloud Storage bucket;
local development can write to plain files or keep records in memory.
"""

import asyncio
import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from google.cloud import storage
from google.oauth2 import service_account

from order_support.config import AuditConfig

logger = logging.getLogger(__name__)

BANNER = "------------------------------"


class ConfigurationMissingError(Exception):
    """Raised when a required external credential is absent."""


class AuditLogger(Protocol):
    async def append(
        self,
        user_id: str,
        role: str,
        text: str,
        group: str,
        session_start: bool = False,
        session_end: bool = False,
    ) -> None:
        ...


def format_entry(
    user_id: str,
    role: str,
    text: str,
    group: str,
    session_start: bool = False,
    session_end: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """Render one transcript entry, with start/end banners when flagged."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    parts: list[str] = []
    if session_start:
        parts.append(f"\n{BANNER}\nSession Start: {user_id} (Group: {group}) - {stamp}\n{BANNER}\n")
    parts.append(f"{stamp} - {user_id} - {group} - {role}: {text}\n")
    if session_end:
        parts.append(f"\n{BANNER}\nSession End: {user_id} - {stamp}\n{BANNER}\n")
    return "".join(parts)


def transcript_name(user_id: str) -> str:
    """File name of a user's transcript, safe for object stores and disks."""
    safe = re.sub(r"[^\w.-]", "_", user_id)
    return f"{safe}_conversation.txt"


class CloudStorageAuditLogger:
    """Appends transcript entries to one GCS object per user."""

    def __init__(self, client: storage.Client, bucket_name: str, prefix: str) -> None:
        self._bucket = client.bucket(bucket_name)
        self._prefix = prefix.strip("/")

    @classmethod
    def from_config(cls, config: AuditConfig) -> "CloudStorageAuditLogger":
        if not config.key_base64:
            raise ConfigurationMissingError("GCLOUD_KEY_BASE64 not found in environment variables")
        try:
            info = json.loads(base64.b64decode(config.key_base64))
        except (binascii.Error, ValueError) as exc:
            raise ConfigurationMissingError(f"GCLOUD_KEY_BASE64 is not valid base64 JSON: {exc}") from exc
        credentials = service_account.Credentials.from_service_account_info(info)
        client = storage.Client(credentials=credentials, project=info.get("project_id"))
        return cls(client, config.bucket, config.prefix)

    def object_name(self, user_id: str) -> str:
        return f"{self._prefix}/{transcript_name(user_id)}"

    def _append_sync(self, user_id: str, entry: str) -> None:
        blob = self._bucket.blob(self.object_name(user_id))
        content = blob.download_as_text() if blob.exists() else ""
        blob.upload_from_string(content + entry, content_type="text/plain")

    async def append(
        self,
        user_id: str,
        role: str,
        text: str,
        group: str,
        session_start: bool = False,
        session_end: bool = False,
    ) -> None:
        entry = format_entry(user_id, role, text, group, session_start, session_end)
        await asyncio.to_thread(self._append_sync, user_id, entry)
        logger.debug("Transcript updated in bucket for %s", user_id)


class LocalFileAuditLogger:
    """Appends transcript entries to one text file per user."""

    def __init__(self, directory: str) -> None:
        self._dir = Path(directory)

    def path_for(self, user_id: str) -> Path:
        return self._dir / transcript_name(user_id)

    def _append_sync(self, user_id: str, entry: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        with self.path_for(user_id).open("a", encoding="utf-8") as fh:
            fh.write(entry)

    async def append(
        self,
        user_id: str,
        role: str,
        text: str,
        group: str,
        session_start: bool = False,
        session_end: bool = False,
    ) -> None:
        entry = format_entry(user_id, role, text, group, session_start, session_end)
        await asyncio.to_thread(self._append_sync, user_id, entry)


@dataclass
class AuditRecord:
    user_id: str
    role: str
    text: str
    group: str
    session_start: bool = False
    session_end: bool = False


@dataclass
class MemoryAuditLogger:
    """Keeps audit records in process memory."""

    records: list[AuditRecord] = field(default_factory=list)

    async def append(
        self,
        user_id: str,
        role: str,
        text: str,
        group: str,
        session_start: bool = False,
        session_end: bool = False,
    ) -> None:
        self.records.append(AuditRecord(user_id, role, text, group, session_start, session_end))

    def for_user(self, user_id: str) -> list[AuditRecord]:
        return [r for r in self.records if r.user_id == user_id]


def build_audit_logger(config: AuditConfig) -> AuditLogger:
    """Create the audit backend named by ``AUDIT_BACKEND``.

    A GCS backend without credentials falls back to local files so the
    conversation itself keeps working.
    """
    if config.backend == "memory":
        return MemoryAuditLogger()
    if config.backend == "gcs":
        try:
            return CloudStorageAuditLogger.from_config(config)
        except ConfigurationMissingError as exc:
            logger.error("%s; writing transcripts to %s instead", exc, config.local_dir)
    return LocalFileAuditLogger(config.local_dir)
