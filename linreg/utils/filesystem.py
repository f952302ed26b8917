#!filepath: linreg/utils/filesystem.py
from pathlib import Path

from linreg.utils.logger import logs
from linreg.utils.errors import FileIOError, FormatError


class FileSystem:
    """
    File system helpers
    - create directories on demand
    - atomic writes (tmp file -> rename)
    - read with taxonomy errors
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] created dir: {p}")
        return p

    @staticmethod
    def safe_write(path: str | Path, data: bytes) -> None:
        """
        Atomic write (no half-written file on failure):
            1) write <path>.tmp
            2) rename -> path
        """
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")

        try:
            FileSystem.ensure_dir(path.parent)
            with open(tmp_path, "wb") as f:
                f.write(data)
            tmp_path.replace(path)
        except OSError as e:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise FileIOError(f"cannot write {path}: {e}") from e

        logs.debug(f"[FS] atomic write done: {path}")

    @staticmethod
    def read_bytes(path: str | Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise FileIOError(f"cannot read {path}: {e}") from e

    @staticmethod
    def read_text(path: str | Path) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise FileIOError(f"cannot read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise FormatError(f"cannot decode {path}: {e}") from e
