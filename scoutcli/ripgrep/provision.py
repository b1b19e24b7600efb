# ripgrep/provision.py
"""
Locate or install the ripgrep binary.

Resolution order: PATH, then the per-user cache directory, then a download of
the pinned release for the current OS/CPU pair. The result is cached on the
provisioner instance, so callers share one instance and call ``resolve()``
whenever they need the path.
"""
from __future__ import annotations

import os
import platform
import shutil
import sys
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Optional

import requests
from loguru import logger

RIPGREP_VERSION = "14.1.0"
RELEASE_URL = "https://github.com/BurntSushi/ripgrep/releases/download/{version}/{filename}"


@dataclass(frozen=True)
class PlatformTarget:
    platform: str
    extension: str  # "tar.gz" | "zip"


PLATFORMS: Dict[str, PlatformTarget] = {
    "arm64-darwin": PlatformTarget("aarch64-apple-darwin", "tar.gz"),
    "arm64-linux": PlatformTarget("aarch64-unknown-linux-gnu", "tar.gz"),
    "x64-darwin": PlatformTarget("x86_64-apple-darwin", "tar.gz"),
    "x64-linux": PlatformTarget("x86_64-unknown-linux-musl", "tar.gz"),
    "x64-win32": PlatformTarget("x86_64-pc-windows-msvc", "zip"),
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


class ProvisioningError(RuntimeError):
    pass


class UnsupportedPlatformError(ProvisioningError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unsupported platform: {key}")


def current_platform_key() -> str:
    """Return '<arch>-<os>' in the naming used by the PLATFORMS table."""
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    os_name = "win32" if sys.platform.startswith("win") else sys.platform
    return f"{arch}-{os_name}"


def _binary_name(key: str) -> str:
    return "rg.exe" if key.endswith("win32") else "rg"


def _strip_first_component(name: str) -> Optional[str]:
    parts = PurePosixPath(name).parts
    if len(parts) < 2:
        return None
    return str(PurePosixPath(*parts[1:]))


def _extract_tar(archive: Path, dest: Path) -> None:
    """Extract a .tar.gz into dest, dropping the archive's top-level directory."""
    with tarfile.open(archive, "r:gz") as tf:
        members = []
        for member in tf.getmembers():
            stripped = _strip_first_component(member.name)
            if not stripped:
                continue
            if member.issym() or member.islnk():
                continue
            member.name = stripped
            members.append(member)
        # filter="data" rejects absolute paths and traversal outside dest
        if hasattr(tarfile, "data_filter"):
            tf.extractall(dest, members=members, filter="data")
        else:  # pragma: no cover - interpreters without extraction filters
            tf.extractall(dest, members=members)


def _extract_zip_exe(archive: Path, binary_name: str, target: Path) -> bool:
    """Write the single entry named exactly `binary_name` to target."""
    found = False
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            if info.is_dir():
                continue
            if PurePosixPath(info.filename).name == binary_name:
                target.write_bytes(zf.read(info))
                found = True
    return found


class RipgrepProvisioner:
    """
    Idempotent provider of an executable ripgrep path.

    - resolve() -> str   (PATH → cache dir → download; cached once found)
    """

    def __init__(
        self,
        bin_dir,
        *,
        version: str = RIPGREP_VERSION,
        platform_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        use_system_path: bool = True,
    ):
        self.bin_dir = Path(bin_dir)
        self.version = version
        self.platform_key = platform_key or current_platform_key()
        self.session = session
        self.use_system_path = use_system_path
        self._resolved: Optional[str] = None

    @property
    def cached_binary(self) -> Path:
        return self.bin_dir / _binary_name(self.platform_key)

    def resolve(self) -> str:
        if self._resolved:
            return self._resolved

        if self.use_system_path:
            found = shutil.which("rg")
            if found:
                logger.debug("ripgrep: using system binary '{}'", found)
                self._resolved = found
                return found

        target = self.cached_binary
        if target.is_file():
            logger.debug("ripgrep: using cached binary '{}'", target)
            self._resolved = str(target)
            return self._resolved

        self._download(target)
        self._resolved = str(target)
        return self._resolved

    # ---------------- download & extract ----------------

    def _fetch(self, url: str) -> bytes:
        getter = self.session.get if self.session is not None else requests.get
        logger.info("ripgrep: downloading {}", url)
        resp = getter(url, timeout=300)
        resp.raise_for_status()
        return resp.content

    def _download(self, target: Path) -> None:
        key = self.platform_key
        config = PLATFORMS.get(key)
        if config is None:
            logger.error("ripgrep: unsupported platform '{}'", key)
            raise UnsupportedPlatformError(key)

        filename = f"ripgrep-{self.version}-{config.platform}.{config.extension}"
        url = RELEASE_URL.format(version=self.version, filename=filename)
        self.bin_dir.mkdir(parents=True, exist_ok=True)

        # Everything lands in a private staging dir; only os.replace touches `target`.
        staging = Path(tempfile.mkdtemp(prefix=".rg-", dir=self.bin_dir))
        archive = staging / filename
        try:
            archive.write_bytes(self._fetch(url))
            staged_bin = staging / f"{target.name}.partial"
            if config.extension == "tar.gz":
                out_dir = staging / "out"
                out_dir.mkdir()
                _extract_tar(archive, out_dir)
                extracted = out_dir / target.name
                if not extracted.is_file():
                    raise ProvisioningError(f"{filename} did not contain '{target.name}'")
                os.replace(extracted, staged_bin)
            elif config.extension == "zip":
                if not _extract_zip_exe(archive, target.name, staged_bin):
                    raise ProvisioningError(f"{filename} did not contain '{target.name}'")
            else:
                raise ProvisioningError(f"Unknown archive type: {config.extension}")

            if not key.endswith("win32"):
                os.chmod(staged_bin, 0o755)
            os.replace(staged_bin, target)
            logger.info("ripgrep: installed {} → '{}'", self.version, target)
        finally:
            try:
                archive.unlink()
            except FileNotFoundError:
                pass
            shutil.rmtree(staging, ignore_errors=True)
