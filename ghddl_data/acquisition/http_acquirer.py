# ghddl_data/acquisition/http_acquirer.py

"""
Fetches acquisition targets over HTTP(S) and unpacks standard archives (zip, tar).
Every step is idempotent: existing files and directories are never fetched or
unpacked a second time.
"""
import shutil
import tarfile
import zipfile
import zlib
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from tqdm import tqdm
from urllib3.exceptions import HTTPError as TransportError

from ghddl_data.acquisition.target import AcquisitionTarget
from ghddl_data.config import SETTINGS
from ghddl_data.exceptions import ExtractionFailure, IOFailure, NetworkFailure
from ghddl_data.utils.file_utils import create_dir_if_not_exists, is_within_directory, remove_if_exists

PARTIAL_SUFFIX = ".part"

# Errors the archive modules raise on truncated or garbled input.
_ARCHIVE_ERRORS = (tarfile.TarError, zipfile.BadZipFile, EOFError, zlib.error, OSError)


class HttpFetcher:
    """Guarantees that each target's archive (and extracted tree, if any) exists on disk."""

    def __init__(self,
                 timeout: Optional[float] = SETTINGS.DEFAULT_TIMEOUT,
                 chunk_size: int = SETTINGS.DEFAULT_CHUNK_SIZE,
                 show_progress: bool = True):
        """
        Args:
            timeout: Seconds to wait for the server to connect or send data.
                     None waits forever.
            chunk_size: Size of the blocks streamed to disk.
            show_progress: Whether to draw tqdm progress bars.
        """
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.show_progress = show_progress

    def ensure_directory(self, path: Path) -> None:
        create_dir_if_not_exists(path)

    def ensure_downloaded(self, target: AcquisitionTarget) -> bool:
        """
        Downloads the target's archive unless a file with that name already exists.

        Data is streamed into `<archive>.part` and renamed only once the whole
        body has arrived, so a file under the archive name is always complete.
        The `.part` file is removed if anything goes wrong.

        Returns:
            True if a download happened, False if the archive was already present.

        Raises:
            NetworkFailure: On connection errors, timeouts, non-2xx responses
                            or a body shorter than the announced content-length.
            IOFailure: If the local file cannot be written.
        """
        dest_path = target.archive_path
        if dest_path.exists():
            # Presence only: a corrupt archive from an earlier run is not detected here.
            print(f"File '{dest_path.name}' already exists at '{dest_path}'. Skipping download.")
            return False

        self.ensure_directory(dest_path.parent)
        part_path = dest_path.with_name(dest_path.name + PARTIAL_SUFFIX)

        size = f" ({target.size_hint})" if target.size_hint else ""
        print(f"Downloading {target.description or target.name}{size} from {target.remote_url} to {dest_path}...")

        completed = False
        try:
            with requests.get(target.remote_url, stream=True, timeout=self.timeout) as r:
                r.raise_for_status()
                total_size = int(r.headers.get('content-length', 0))
                written = self._write_stream(r, part_path, total_size)

            if total_size and written != total_size:
                raise NetworkFailure(f"Download of {target.remote_url} was truncated: "
                                     f"got {written} of {total_size} bytes.")

            part_path.replace(dest_path)
            completed = True
        except (requests.RequestException, TransportError) as e:
            raise NetworkFailure(f"Failed to download file from {target.remote_url}. Error: {e}") from e
        except OSError as e:
            raise IOFailure(f"Failed to write '{part_path}'. Error: {e}") from e
        finally:
            if not completed:
                remove_if_exists(part_path)

        print(f"Downloaded '{dest_path.name}' to '{dest_path}'.")
        return True

    def ensure_extracted(self, target: AcquisitionTarget) -> bool:
        """
        Unpacks the target's archive into its base directory unless already done.

        Only the existence of the extracted path is checked: a newer or
        different archive does not trigger a second extraction.

        Returns:
            True if the archive was unpacked, False if there was nothing to do.

        Raises:
            ExtractionFailure: If the archive is missing, corrupt, in an
                               unsupported format, or cannot be written out.
        """
        if target.extracted_path is None:
            return False
        if target.extracted_path.exists():
            print(f"Data already extracted at '{target.extracted_path}'. Skipping extraction.")
            return False

        archive_path = target.archive_path
        if not archive_path.is_file():
            raise ExtractionFailure(f"Archive '{archive_path}' does not exist, nothing to extract.")

        print(f"Extracting '{archive_path.name}' to '{target.base_dir}'...")
        try:
            self._unpack(archive_path, target.base_dir)
        except BaseException:
            # Includes Ctrl-C: a leftover tree would make the next run skip extraction.
            self._discard_partial_tree(target.extracted_path)
            raise

        if not target.extracted_path.exists():
            raise ExtractionFailure(f"Archive '{archive_path.name}' did not contain "
                                    f"'{target.extracted_path.name}'.")

        print("Extraction complete.")
        return True

    def acquire(self, target: AcquisitionTarget) -> Dict[str, Any]:
        """
        Brings a single target to the satisfied state.

        Order matters: the directory is created before any download, and
        extraction is only attempted once the archive exists.
        """
        result = {"name": target.name, "downloaded": False, "extracted": False}
        if target.is_satisfied():
            print(f"Target '{target.name}' is already in place. Skipping acquisition.")
            return result

        self.ensure_directory(target.base_dir)
        result["downloaded"] = self.ensure_downloaded(target)
        result["extracted"] = self.ensure_extracted(target)
        return result

    def run(self, targets: List[AcquisitionTarget]) -> List[Dict[str, Any]]:
        """Acquires every target in order. The first failure aborts the run."""
        return [self.acquire(target) for target in targets]

    def _write_stream(self, response: requests.Response, path: Path, total_size: int) -> int:
        """
        Writes the response body to `path` with a progress bar and returns the byte count.

        The raw stream is read without content decoding, so the bytes on disk
        (and the count compared with content-length) are exactly what the server sent.
        """
        written = 0
        with open(path, "wb") as f, tqdm(
            total=total_size or None, unit='B', unit_scale=True, desc=path.name,
            disable=not self.show_progress
        ) as pbar:
            for chunk in response.raw.stream(self.chunk_size, decode_content=False):
                if not chunk:
                    continue
                f.write(chunk)
                written += len(chunk)
                pbar.update(len(chunk))
        return written

    def _unpack(self, archive_path: Path, extract_to: Path) -> None:
        """Unpacks a zip or tar archive."""
        try:
            if zipfile.is_zipfile(archive_path):
                with zipfile.ZipFile(archive_path, 'r') as zf:
                    self._check_members(extract_to, zf.namelist())
                    zf.extractall(extract_to)
            elif tarfile.is_tarfile(archive_path):
                with tarfile.open(archive_path, 'r:*') as tf:
                    members = tf.getmembers()
                    self._check_members(extract_to, [m.name for m in members])
                    self._check_links(extract_to, members)
                    if hasattr(tarfile, "data_filter"):
                        tf.extractall(extract_to, members=members, filter="data")
                    else:
                        tf.extractall(extract_to, members=members)
            else:
                raise ExtractionFailure(f"Unsupported or corrupt archive: '{archive_path.name}'. "
                                        "Only .zip and .tar.* are supported.")
        except _ARCHIVE_ERRORS as e:
            raise ExtractionFailure(f"Failed to extract '{archive_path}'. Error: {e}") from e

    @staticmethod
    def _check_members(extract_to: Path, names: List[str]) -> None:
        for name in names:
            if not is_within_directory(extract_to, extract_to / name):
                raise ExtractionFailure(f"Archive member '{name}' would be written outside '{extract_to}'.")

    @staticmethod
    def _check_links(extract_to: Path, members: List[tarfile.TarInfo]) -> None:
        for member in members:
            if member.issym():
                # Symlink targets are relative to the directory holding the link.
                link_target = extract_to / Path(member.name).parent / member.linkname
            elif member.islnk():
                link_target = extract_to / member.linkname
            else:
                continue
            if not is_within_directory(extract_to, link_target):
                raise ExtractionFailure(f"Archive link '{member.name}' -> '{member.linkname}' "
                                        f"points outside '{extract_to}'.")

    @staticmethod
    def _discard_partial_tree(path: Path) -> None:
        if not path.exists():
            return
        print(f"[WARNING] Removing partially extracted data at '{path}'.")
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            print(f"[WARNING] Could not remove '{path}': {e}")
