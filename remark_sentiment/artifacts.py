"""
Fetching of pretrained artifacts.

An artifact source is either an http(s) URL, downloaded once into a local
cache directory, or a path on the local filesystem.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from .errors import LoadError, LoadTimeoutError

logger = logging.getLogger("remark_sentiment")

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "remark_sentiment"
DEFAULT_TIMEOUT = 30.0


def is_remote(source: str | Path) -> bool:
    """Check whether a source string is an http(s) URL."""
    return urlparse(str(source)).scheme in ("http", "https")


def cache_path_for(url: str, cache_dir: str | Path) -> Path:
    """
    Get the cache location for a URL.
    
    The file name keeps the URL's basename, prefixed with a short digest
    of the full URL so that same-named files from different hosts or
    directories do not collide.
    """
    name = Path(urlparse(url).path).name or "artifact"
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]
    return Path(cache_dir) / f"{digest}-{name}"


def download_file(url: str, dest_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
    """
    Download file with progress bar.
    
    The body is streamed into a temporary sibling file which is renamed
    into place only once the download completes.
    
    Args:
        url: URL to download from
        dest_path: Destination file path
        timeout: Connect/read timeout in seconds
    """
    tmp_path = dest_path.with_name(dest_path.name + ".part")
    
    response = requests.get(url, stream=True, timeout=timeout)
    response.raise_for_status()
    
    total_size = int(response.headers.get("content-length", 0))
    
    try:
        with open(tmp_path, "wb") as f:
            with tqdm(
                total=total_size,
                unit="B",
                unit_scale=True,
                desc=f"Downloading {dest_path.name}",
                disable=total_size == 0,
            ) as pbar:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
                    pbar.update(len(chunk))
        tmp_path.replace(dest_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def resolve_artifact(
    source: str | Path,
    cache_dir: str | Path = DEFAULT_CACHE_DIR,
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """
    Resolve an artifact source to a local file.
    
    Args:
        source: URL or local path
        cache_dir: Directory holding downloaded artifacts
        timeout: HTTP timeout in seconds
        
    Returns:
        Path to the local copy of the artifact
        
    Raises:
        LoadTimeoutError: If the download timed out
        LoadError: If the artifact cannot be found or downloaded
    """
    if not is_remote(source):
        path = Path(source).expanduser()
        if not path.is_file():
            raise LoadError(f"Artifact not found: {path}")
        return path
    
    dest_path = cache_path_for(str(source), cache_dir)
    if dest_path.is_file():
        logger.debug(f"Using cached artifact {dest_path}")
        return dest_path
    
    logger.info(f"Downloading {source}...")
    try:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        download_file(str(source), dest_path, timeout=timeout)
    except requests.Timeout as exc:
        raise LoadTimeoutError(f"Timed out downloading {source}") from exc
    except requests.RequestException as exc:
        raise LoadError(f"Failed to download {source}: {exc}") from exc
    except OSError as exc:
        raise LoadError(f"Failed to store {source} in {dest_path.parent}: {exc}") from exc
    
    logger.info(f"Saved {source} to {dest_path}")
    return dest_path


def read_json_artifact(
    source: str | Path,
    cache_dir: str | Path = DEFAULT_CACHE_DIR,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """
    Fetch and decode a JSON object artifact.
    
    Raises:
        LoadError: If the artifact cannot be fetched or is not a JSON object
    """
    path = resolve_artifact(source, cache_dir, timeout)
    
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise LoadError(f"Malformed JSON in {source}: {exc}") from exc
    except OSError as exc:
        raise LoadError(f"Could not read {path}: {exc}") from exc
    
    if not isinstance(data, dict):
        raise LoadError(
            f"Expected a JSON object in {source}, got {type(data).__name__}"
        )
    
    return data
