"""
Disk storage for files attached to proposals.
"""

import os
import random
import shutil
import time
from pathlib import Path

from fastapi import UploadFile

UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", Path(__file__).resolve().parent / "uploads"))
UPLOAD_URL_PREFIX = "uploads"


def ensure_upload_dir() -> Path:
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    return UPLOAD_DIR


def upload_filename(field_name: str, original_name: str) -> str:
    """<field>-<epoch ms>-<random>-<original name>"""
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field_name}-{unique_suffix}-{os.path.basename(original_name or '')}"


def save_upload(file: UploadFile, field_name: str = "file") -> str:
    """Write the upload into UPLOAD_DIR and return its path relative to the site root."""
    filename = upload_filename(field_name, file.filename)
    destination = ensure_upload_dir() / filename
    with destination.open("wb") as out:
        shutil.copyfileobj(file.file, out)
    return f"{UPLOAD_URL_PREFIX}/{filename}"
