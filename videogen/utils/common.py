import random
from pathlib import Path

from videogen.errors import InvalidDimensionsError

DIMENSION_MULTIPLE = 32
MAX_SEED = 2**31 - 1


def ensure_directory(path: str | Path) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def parent_directory(path: str | Path) -> Path | None:
    """Return the directory that must exist before ``path`` can be written.

    ``None`` means the file goes into the current working directory.
    """
    parent = Path(path).parent
    if str(parent) in {"", "."}:
        return None
    return parent


def validate_dimensions(height: int, width: int) -> None:
    if height <= 0 or width <= 0:
        raise InvalidDimensionsError(f"Height and width must be positive. got={width}x{height}")
    if height % DIMENSION_MULTIPLE != 0 or width % DIMENSION_MULTIPLE != 0:
        raise InvalidDimensionsError(
            f"Height and width must be divisible by {DIMENSION_MULTIPLE}. got={width}x{height}"
        )


def resolve_seed(seed: int | None) -> int:
    # Zero and None both mean "pick one for me".
    if not seed:
        return random.randint(1, MAX_SEED)
    return seed
