import logging
from pathlib import Path
from typing import Iterable

import imageio
import numpy as np
from PIL import Image

LOGGER = logging.getLogger(__name__)


def normalize_frame(frame: np.ndarray | Image.Image) -> np.ndarray:
    if isinstance(frame, Image.Image):
        return np.array(frame.convert("RGB"), dtype=np.uint8)

    array = np.asarray(frame)
    if array.ndim == 2:
        array = np.stack([array, array, array], axis=-1)
    if array.ndim != 3:
        raise ValueError("Invalid frame shape. Expected HxW or HxWxC.")
    if array.shape[-1] == 4:
        array = array[..., :3]
    if array.shape[-1] != 3:
        raise ValueError("Invalid frame channels. Expected 3-channel RGB frames.")
    if array.dtype != np.uint8:
        # Pipelines asked for numpy output return floats in [0, 1].
        if np.issubdtype(array.dtype, np.floating) and array.size and float(array.max()) <= 1.0:
            array = array * 255.0
        array = np.clip(array, 0, 255).astype(np.uint8)
    return array


def _frame_list(frames: Iterable[np.ndarray | Image.Image]) -> list[np.ndarray]:
    frame_list = [normalize_frame(frame) for frame in frames]
    if not frame_list:
        raise ValueError("No frames to save.")
    return frame_list


def save_frames_to_dir(
    frames: Iterable[np.ndarray | Image.Image],
    directory: Path,
    prefix: str = "frame",
) -> list[Path]:
    frame_list = _frame_list(frames)
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {directory}")

    width = max(4, len(str(len(frame_list) - 1)))
    LOGGER.info("Writing frames. directory=%s frames=%d", directory, len(frame_list))
    written: list[Path] = []
    for index, frame in enumerate(frame_list):
        path = directory / f"{prefix}_{index:0{width}d}.png"
        Image.fromarray(frame).save(path, format="PNG")
        written.append(path)
    LOGGER.info("Frames written. directory=%s count=%d", directory, len(written))
    return written


def save_frames_to_gif(
    frames: Iterable[np.ndarray | Image.Image],
    output_path: Path,
    fps: int,
) -> Path:
    if fps <= 0:
        raise ValueError(f"fps must be positive. got={fps}")
    frame_list = _frame_list(frames)
    output_path = Path(output_path)
    duration_ms = max(1, int(round(1000.0 / fps)))
    LOGGER.info(
        "Encoding GIF. output=%s fps=%s frames=%d duration_ms=%d",
        output_path,
        fps,
        len(frame_list),
        duration_ms,
    )

    images = [Image.fromarray(frame) for frame in frame_list]
    images[0].save(
        output_path,
        format="GIF",
        save_all=True,
        append_images=images[1:],
        duration=duration_ms,
        loop=0,
        optimize=False,
    )
    LOGGER.info("GIF encode complete. output=%s", output_path)
    return output_path


def save_frames_to_mp4(
    frames: Iterable[np.ndarray | Image.Image],
    output_path: Path,
    fps: int,
) -> Path:
    if fps <= 0:
        raise ValueError(f"fps must be positive. got={fps}")
    frame_list = _frame_list(frames)
    output_path = Path(output_path)
    LOGGER.info("Encoding video to mp4. output=%s fps=%s frames=%d", output_path, fps, len(frame_list))

    writer = imageio.get_writer(
        str(output_path),
        fps=fps,
        format="FFMPEG",
        codec="libx264",
        macro_block_size=1,
        pixelformat="yuv420p",
        quality=8,
    )
    try:
        for frame in frame_list:
            writer.append_data(frame)
    finally:
        writer.close()

    LOGGER.info("Video encode complete. output=%s", output_path)
    return output_path
