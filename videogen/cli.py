import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence

from pydantic import ValidationError

from videogen.core.config import settings
from videogen.core.logging import configure_logging
from videogen.errors import VideoGenError
from videogen.runtime import init_runtime, require_video, runtime_version
from videogen.schemas import GenerationRequest
from videogen.services.pipeline_manager import VideoPipeline, VideoResult
from videogen.utils.common import ensure_directory, parent_directory

LOGGER = logging.getLogger(__name__)

# Save failures are reported and skipped, never fatal.
SAVE_ERRORS = (OSError, ValueError, RuntimeError)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="videogen",
        description="Generate a short video from a text prompt with a diffusers video pipeline.",
    )
    parser.add_argument("--model", default=settings.model_id, help="Hugging Face model ID for video generation.")
    parser.add_argument(
        "--cache",
        default=str(settings.cache_dir or ""),
        help="Optional cache directory for model weights.",
    )
    parser.add_argument(
        "--output",
        default=str(settings.output_dir),
        help="Output directory for generated video frames.",
    )
    parser.add_argument("--gif", default="", help="Output path for GIF file (optional).")
    parser.add_argument("--mp4", default="", help="Output path for MP4 file (optional).")
    parser.add_argument("--prompt", default=settings.default_prompt, help="Text prompt for video generation.")
    parser.add_argument(
        "--negative-prompt",
        default=settings.default_negative_prompt,
        help="Negative prompt. Pass an empty string to disable.",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=settings.default_height,
        help="Video height (must be divisible by 32).",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=settings.default_width,
        help="Video width (must be divisible by 32).",
    )
    parser.add_argument("--frames", type=int, default=settings.default_num_frames, help="Number of frames to generate.")
    parser.add_argument(
        "--steps",
        type=int,
        default=settings.default_num_inference_steps,
        help="Number of inference steps.",
    )
    parser.add_argument("--guidance", type=float, default=settings.default_guidance_scale, help="Guidance scale.")
    parser.add_argument("--fps", type=int, default=settings.default_fps, help="Frames per second for output.")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (0 for random).")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Console log level. The log file always records INFO and above.",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> GenerationRequest:
    return GenerationRequest(
        model_id=args.model,
        cache_dir=args.cache,
        output_dir=args.output,
        gif_path=args.gif,
        mp4_path=args.mp4,
        prompt=args.prompt,
        negative_prompt=args.negative_prompt,
        height=args.height,
        width=args.width,
        num_frames=args.frames,
        num_inference_steps=args.steps,
        guidance_scale=args.guidance,
        fps=args.fps,
        seed=args.seed,
    )


def _fatal(message: str) -> int:
    LOGGER.error(message)
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _describe_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        text = error.get("msg", "invalid value")
        messages.append(f"{location}: {text}" if location else text)
    return "; ".join(messages)


def _save_artifact(label: str, path: Path, save: Callable[[Path], Path]) -> None:
    directory = parent_directory(path)
    if directory is not None:
        try:
            ensure_directory(directory)
        except OSError as exc:
            LOGGER.warning("Failed to create %s directory: %s", label, exc)

    print(f"\nSaving {label} to {path}...")
    try:
        save(path)
    except SAVE_ERRORS as exc:
        LOGGER.warning("Failed to save %s: %s", label, exc)
    else:
        print(f"{label} saved to {path}")


def save_outputs(request: GenerationRequest, result: VideoResult) -> int:
    try:
        ensure_directory(request.output_dir)
    except OSError as exc:
        return _fatal(f"Failed to create output directory: {exc}")

    print(f"\nSaving frames to {request.output_dir}...")
    try:
        result.save_frames(request.output_dir)
    except SAVE_ERRORS as exc:
        LOGGER.warning("Failed to save frames: %s", exc)
    else:
        print(f"Frames saved to {request.output_dir}/")

    if request.gif_path is not None:
        _save_artifact("GIF", request.gif_path, result.save_gif)
    if request.mp4_path is not None:
        _save_artifact("MP4", request.mp4_path, result.save_mp4)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log_file = configure_logging(args.log_level)
    LOGGER.info("Starting video generation run. log_file=%s", log_file)

    try:
        runtime = init_runtime()
    except VideoGenError as exc:
        return _fatal(f"Failed to initialize runtime: {exc}")
    print("diffusers version:", runtime_version())

    try:
        require_video()
    except VideoGenError as exc:
        return _fatal(str(exc))

    try:
        request = request_from_args(args)
    except ValidationError as exc:
        return _fatal(f"Invalid generation parameters: {_describe_validation_error(exc)}")

    print("\n--- Video Generation ---")
    print(f"Model: {request.model_id}")
    print(f"Prompt: {request.prompt}")
    print(
        f"Resolution: {request.width}x{request.height}, "
        f"{request.num_frames} frames @ {request.fps} fps"
    )
    print(f"Steps: {request.num_inference_steps}, Guidance: {request.guidance_scale:.1f}")

    print("\nLoading video pipeline...")
    try:
        pipeline = VideoPipeline(request.video_config(), runtime=runtime)
    except VideoGenError as exc:
        return _fatal(f"Failed to create video pipeline: {exc}")

    with pipeline:
        print("Pipeline loaded successfully")

        print("\nGenerating video...")
        try:
            result = pipeline.generate(request.prompt, request.generation_params())
        except VideoGenError as exc:
            return _fatal(f"Video generation failed: {exc}")

        with result:
            print(f"Generated {result.frame_count} frames at {result.fps} fps (seed {result.seed})")
            status = save_outputs(request, result)

    if status != 0:
        return status
    print("\nDone!")
    return 0
