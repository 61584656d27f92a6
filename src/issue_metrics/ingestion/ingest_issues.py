"""Bring raw issue exports into the Raw layer."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen
import xml.etree.ElementTree as ET

from issue_metrics.utils.config import (
    AZURE_ACCOUNT_URL,
    AZURE_BLOB_PREFIX,
    AZURE_CLIENT_ID,
    AZURE_CLIENT_SECRET,
    AZURE_CONTAINER_NAME,
    AZURE_TENANT_ID,
    RAW_DIR,
    RAW_INPUT_PATH,
)

logger = logging.getLogger(__name__)

STORAGE_SCOPE = "https://storage.azure.com/.default"
STORAGE_API_VERSION = "2020-10-02"


def copy_local_raw_file(source_path: Path, destination_dir: Path) -> Path:
    """Copy a local issue export into the Raw layer."""
    destination_dir.mkdir(parents=True, exist_ok=True)
    destination_path = destination_dir / source_path.name
    shutil.copy2(source_path, destination_path)
    logger.info("Copied raw export %s -> %s", source_path, destination_path)
    return destination_path


def _storage_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}", "x-ms-version": STORAGE_API_VERSION}


def list_blob_names(account_url: str, container: str, token: str, prefix: str = "") -> List[str]:
    """List blob names in a container through the Blob REST API."""
    query = {"restype": "container", "comp": "list"}
    if prefix:
        query["prefix"] = prefix
    list_url = f"{account_url}/{container}?{urlencode(query)}"
    with urlopen(Request(list_url, headers=_storage_headers(token)), timeout=60) as response:
        xml_payload = response.read()

    root = ET.fromstring(xml_payload)
    return [
        name
        for name in (blob.findtext("{*}Name") for blob in root.findall(".//{*}Blob"))
        if name
    ]


def download_from_azure_blob(destination_dir: Path) -> List[Path]:
    """
    Download issue exports from Azure Blob Storage into the Raw layer.

    Downloads every blob in the container, or only those under AZURE_BLOB_PREFIX.
    """
    has_service_principal = all(
        [AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, AZURE_ACCOUNT_URL]
    )
    if not has_service_principal:
        raise ValueError("Azure credentials are not configured in environment variables.")
    if not AZURE_CONTAINER_NAME:
        raise ValueError("Azure container name is not configured.")

    from azure.identity import ClientSecretCredential

    credential = ClientSecretCredential(AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET)
    token = credential.get_token(STORAGE_SCOPE).token

    account_url = AZURE_ACCOUNT_URL.rstrip("/")
    destination_dir.mkdir(parents=True, exist_ok=True)

    blob_names = list_blob_names(account_url, AZURE_CONTAINER_NAME, token, AZURE_BLOB_PREFIX)
    if not blob_names:
        raise FileNotFoundError("No blobs found for the provided container/prefix.")

    downloaded_paths: List[Path] = []
    for blob_name in blob_names:
        blob_url = f"{account_url}/{AZURE_CONTAINER_NAME}/{quote(blob_name)}"
        destination_path = destination_dir / Path(blob_name).name
        with urlopen(Request(blob_url, headers=_storage_headers(token)), timeout=300) as response:
            destination_path.write_bytes(response.read())
        downloaded_paths.append(destination_path)

    logger.info("Downloaded %d blob(s) into %s", len(downloaded_paths), destination_dir)
    return downloaded_paths


def ingest_raw_data(source_path: Path | None = None) -> Path | List[Path]:
    """
    Ingest raw issue exports into the Raw layer.

    A local export (``source_path`` or RAW_INPUT_PATH) wins; Azure Blob is the fallback.
    """
    local_path = source_path or RAW_INPUT_PATH
    if local_path.exists():
        return copy_local_raw_file(local_path, RAW_DIR)

    logger.info("No local export at %s, falling back to Azure Blob", local_path)
    return download_from_azure_blob(RAW_DIR)
