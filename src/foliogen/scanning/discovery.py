"""Directory listing helpers shared by every portfolio shape."""

from __future__ import annotations

from pathlib import Path

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})
SKIPPED_NAMES = frozenset({"manifest.json", "tags.json", "README.md"})


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_skipped(name: str) -> bool:
    """Return True for dotfiles and known non-image artifacts."""
    return is_hidden(name) or name in SKIPPED_NAMES or name.endswith("-manifest.json")


def is_image(name: str) -> bool:
    """Return True when ``name`` has an allowed image extension (case-insensitive)."""
    return not is_skipped(name) and Path(name).suffix.lower() in IMAGE_EXTENSIONS


def list_entries(directory: Path) -> list[Path]:
    """Return the non-skipped children of ``directory`` in lexical order.

    Raises:
        OSError: If the directory cannot be read.
    """
    return sorted(
        (child for child in directory.iterdir() if not is_skipped(child.name)),
        key=lambda child: child.name,
    )


def list_subdirectories(directory: Path) -> list[Path]:
    """Return visible subdirectories of ``directory`` in lexical order."""
    return [child for child in list_entries(directory) if child.is_dir()]


def list_images(directory: Path, *, recursive: bool = False) -> list[str]:
    """Return image names under ``directory`` sorted lexically.

    Args:
        directory: Folder to inspect.
        recursive: Include images from nested folders as relative POSIX paths.

    Raises:
        OSError: If ``directory`` cannot be read.
    """
    images: list[str] = []
    for child in list_entries(directory):
        if child.is_dir():
            if recursive:
                images.extend(
                    f"{child.name}/{name}" for name in list_images(child, recursive=True)
                )
            continue
        if child.is_file() and is_image(child.name):
            images.append(child.name)
    return sorted(images)


__all__ = [
    "IMAGE_EXTENSIONS",
    "SKIPPED_NAMES",
    "is_image",
    "is_skipped",
    "list_entries",
    "list_images",
    "list_subdirectories",
]
