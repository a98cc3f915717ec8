"""foliogen: date inference and JSON manifests for photography portfolios."""

from importlib import metadata as _metadata

__all__ = ["__version__"]

_DIST_NAME = "foliogen"


def __getattr__(name: str):
    if name != "__version__":
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    try:
        return _metadata.version(_DIST_NAME)
    except _metadata.PackageNotFoundError:
        # Running from a source checkout without an install.
        return "0.0.0+local"


def __dir__():
    return sorted([*globals(), "__version__"])
