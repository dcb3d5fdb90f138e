import logging
from dataclasses import dataclass
from typing import Any

from videogen.errors import RuntimeInitError, VideoUnavailableError

LOGGER = logging.getLogger(__name__)

VIDEO_PIPELINE_CLASS = "LTXPipeline"


@dataclass(frozen=True)
class RuntimeInfo:
    device: str
    dtype: Any
    torch_version: str
    diffusers_version: str


def init_runtime() -> RuntimeInfo:
    try:
        import diffusers
        import torch
    except ImportError as exc:
        raise RuntimeInitError(f"torch/diffusers stack is not importable: {exc}") from exc

    device = "cuda" if torch.cuda.is_available() else "cpu"
    if device == "cuda":
        torch.backends.cuda.matmul.allow_tf32 = True
        torch.backends.cudnn.allow_tf32 = True
        dtype = torch.bfloat16
        LOGGER.info("CUDA detected. Enabled TF32 matmul and cuDNN optimizations.")
    else:
        dtype = torch.float32
        LOGGER.warning("CUDA not available. Falling back to CPU inference (slow).")

    info = RuntimeInfo(
        device=device,
        dtype=dtype,
        torch_version=str(torch.__version__),
        diffusers_version=str(diffusers.__version__),
    )
    LOGGER.info(
        "Runtime initialized. device=%s dtype=%s torch=%s diffusers=%s",
        info.device,
        info.dtype,
        info.torch_version,
        info.diffusers_version,
    )
    return info


def runtime_version() -> str:
    import diffusers

    return str(diffusers.__version__)


def is_video_available() -> bool:
    try:
        import diffusers
    except ImportError:
        return False
    # diffusers resolves pipeline classes lazily; a broken optional dependency
    # surfaces here rather than at import time.
    try:
        getattr(diffusers, VIDEO_PIPELINE_CLASS)
    except (AttributeError, ImportError, RuntimeError) as exc:
        LOGGER.warning("Video pipeline class %s unavailable: %s", VIDEO_PIPELINE_CLASS, exc)
        return False
    return True


def require_video() -> None:
    if not is_video_available():
        raise VideoUnavailableError(
            "Video pipeline is not available. Please install a diffusers release with LTX-Video support."
        )
