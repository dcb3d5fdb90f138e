import gc
import inspect
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from videogen.core.config import settings
from videogen.errors import GenerationError, PipelineLoadError
from videogen.media.video import save_frames_to_dir, save_frames_to_gif, save_frames_to_mp4
from videogen.runtime import VIDEO_PIPELINE_CLASS, RuntimeInfo, init_runtime
from videogen.utils.common import resolve_seed, validate_dimensions

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoConfig:
    model_id: str
    cache_dir: Path | None = None


@dataclass(frozen=True)
class VideoGenerationParams:
    height: int
    width: int
    num_frames: int
    num_inference_steps: int
    guidance_scale: float
    frame_rate: int
    seed: int = 0
    negative_prompt: str | None = None


class VideoResult:
    """Frames produced by one :meth:`VideoPipeline.generate` call.

    The result owns the decoded frames until :meth:`close` is called; saving
    afterwards raises ``RuntimeError``.
    """

    def __init__(self, frames: list[Any], fps: int, seed: int) -> None:
        self._frames: list[Any] | None = list(frames)
        self.fps = fps
        self.seed = seed
        self._frame_count = len(self._frames)

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def closed(self) -> bool:
        return self._frames is None

    @property
    def frames(self) -> list[Any]:
        if self._frames is None:
            raise RuntimeError("Video result has been released.")
        return self._frames

    def save_frames(self, directory: str | Path) -> list[Path]:
        return save_frames_to_dir(self.frames, Path(directory))

    def save_gif(self, path: str | Path) -> Path:
        return save_frames_to_gif(self.frames, Path(path), fps=self.fps)

    def save_mp4(self, path: str | Path) -> Path:
        return save_frames_to_mp4(self.frames, Path(path), fps=self.fps)

    def close(self) -> None:
        if self._frames is None:
            return
        self._frames = None
        LOGGER.info("Video result released. frames=%d", self._frame_count)

    def __enter__(self) -> "VideoResult":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _resolve_pipeline_class() -> Any:
    import diffusers

    return getattr(diffusers, VIDEO_PIPELINE_CLASS)


class VideoPipeline:
    def __init__(self, config: VideoConfig, runtime: RuntimeInfo | None = None) -> None:
        self.config = config
        self.runtime = runtime or init_runtime()
        self.device = self.runtime.device
        self.dtype = self.runtime.dtype
        self.pipe: Any | None = None
        self._pipe_call_arg_names: set[str] = set()
        self._load_pipeline()

    def _load_with(self, local_only: bool) -> Any:
        pipeline_class = _resolve_pipeline_class()
        cache_dir = str(self.config.cache_dir) if self.config.cache_dir else None
        return pipeline_class.from_pretrained(
            self.config.model_id,
            torch_dtype=self.dtype,
            cache_dir=cache_dir,
            token=settings.hf_token or None,
            local_files_only=local_only,
        )

    def _load_pipeline(self) -> None:
        start_time = time.perf_counter()
        LOGGER.info(
            "Loading model pipeline. model_id=%s cache_dir=%s device=%s",
            self.config.model_id,
            self.config.cache_dir,
            self.device,
        )
        if settings.hf_token is None:
            LOGGER.info("HF_TOKEN is not set. Gated repositories will fail to download.")
        try:
            try:
                self.pipe = self._load_with(settings.local_files_only)
            except Exception as exc:
                if settings.local_files_only and settings.allow_remote_fallback:
                    LOGGER.warning(
                        "Local-only model load failed; retrying with remote fallback. error=%s",
                        exc,
                    )
                    self.pipe = self._load_with(False)
                else:
                    raise
            self._configure_pipe()
        except Exception as exc:
            self.pipe = None
            LOGGER.exception("Failed to load model pipeline: %s", exc)
            raise PipelineLoadError(f"Failed to load {self.config.model_id}: {exc}") from exc

        LOGGER.info(
            "Loaded model pipeline successfully. model_id=%s elapsed=%.2fs",
            self.config.model_id,
            time.perf_counter() - start_time,
        )

    def _configure_pipe(self) -> None:
        try:
            self._pipe_call_arg_names = set(inspect.signature(self.pipe.__call__).parameters.keys())
        except (TypeError, ValueError):  # pragma: no cover
            self._pipe_call_arg_names = set()

        using_cpu_offload = False
        if self.device == "cuda":
            if settings.enable_sequential_cpu_offload and hasattr(self.pipe, "enable_sequential_cpu_offload"):
                self.pipe.enable_sequential_cpu_offload()
                using_cpu_offload = True
                LOGGER.info("Sequential CPU offload enabled.")
            elif settings.enable_model_cpu_offload and hasattr(self.pipe, "enable_model_cpu_offload"):
                self.pipe.enable_model_cpu_offload()
                using_cpu_offload = True
                LOGGER.info("Model CPU offload enabled.")

        if not using_cpu_offload and hasattr(self.pipe, "to"):
            self.pipe.to(self.device)

        vae = getattr(self.pipe, "vae", None)
        if vae is None:
            return
        if settings.enable_vae_tiling and hasattr(vae, "enable_tiling"):
            vae.enable_tiling()
            LOGGER.info("VAE tiling enabled.")
        if settings.enable_vae_slicing and hasattr(vae, "enable_slicing"):
            vae.enable_slicing()
            LOGGER.info("VAE slicing enabled.")

    @staticmethod
    def _extract_frames(output: Any) -> list[Any]:
        frames = None

        if hasattr(output, "frames"):
            frames = output.frames
        elif isinstance(output, dict) and "frames" in output:
            frames = output["frames"]

        if frames is None:
            raise GenerationError("Pipeline did not return frames.")

        # Batched output: one entry per prompt, we only ever send one.
        if isinstance(frames, (list, tuple)) and frames and isinstance(frames[0], (list, tuple)):
            return list(frames[0])
        if hasattr(frames, "ndim") and frames.ndim == 5:
            return list(frames[0])
        return list(frames)

    @staticmethod
    def _build_progress_bar(current_step: int, total_steps: int, width: int) -> str:
        safe_total = max(total_steps, 1)
        safe_width = max(width, 8)
        progress_ratio = min(max(current_step / safe_total, 0.0), 1.0)
        filled = int(progress_ratio * safe_width)
        bar = ("#" * filled) + ("-" * (safe_width - filled))
        return f"[{bar}] {current_step}/{safe_total} ({progress_ratio * 100:.1f}%)"

    def _make_step_callback(self, total_steps: int, params: VideoGenerationParams):
        last_logged = {"step": 0}

        def _callback(*args):
            if len(args) != 4:
                return args[-1] if args else {}
            _, step_index, _timestep, callback_kwargs = args
            current_step = int(step_index) + 1
            log_every = max(1, settings.progress_log_every_steps)
            if (
                current_step == 1
                or current_step == total_steps
                or current_step % log_every == 0
            ) and current_step > last_logged["step"]:
                bar = self._build_progress_bar(current_step, total_steps, settings.progress_bar_width)
                LOGGER.info(
                    "Denoise progress %s | res=%sx%s frames=%s",
                    bar,
                    params.width,
                    params.height,
                    params.num_frames,
                )
                last_logged["step"] = current_step
            return callback_kwargs

        return _callback

    def generate(self, prompt: str, params: VideoGenerationParams) -> VideoResult:
        if self.pipe is None:
            raise GenerationError("Pipeline has been closed.")
        validate_dimensions(params.height, params.width)
        if not prompt or not prompt.strip():
            raise GenerationError("Prompt must not be empty.")

        used_seed = resolve_seed(params.seed)
        LOGGER.info(
            "Pipeline generation started. res=%sx%s frames=%s steps=%s guidance=%.2f fps=%s seed=%s",
            params.width,
            params.height,
            params.num_frames,
            params.num_inference_steps,
            params.guidance_scale,
            params.frame_rate,
            used_seed,
        )
        import torch

        generation_start = time.perf_counter()
        try:
            with torch.inference_mode():
                generator = torch.Generator(device=self.device).manual_seed(used_seed)
                pipe_kwargs: dict[str, Any] = {
                    "prompt": prompt,
                    "height": params.height,
                    "width": params.width,
                    "num_frames": params.num_frames,
                    "num_inference_steps": params.num_inference_steps,
                    "guidance_scale": params.guidance_scale,
                    "frame_rate": params.frame_rate,
                    "generator": generator,
                    "output_type": "pil",
                    "callback_on_step_end": self._make_step_callback(
                        total_steps=params.num_inference_steps,
                        params=params,
                    ),
                    "callback_on_step_end_tensor_inputs": ["latents"],
                }
                if params.negative_prompt:
                    pipe_kwargs["negative_prompt"] = params.negative_prompt

                if self._pipe_call_arg_names:
                    pipe_kwargs = {
                        key: value
                        for key, value in pipe_kwargs.items()
                        if key in self._pipe_call_arg_names
                    }

                output = self.pipe(**pipe_kwargs)
        except Exception as exc:
            LOGGER.exception("Pipeline generation failed: %s", exc)
            raise GenerationError(f"Video generation failed: {exc}") from exc

        frames = self._extract_frames(output)
        if not frames:
            raise GenerationError("No frames generated.")

        LOGGER.info(
            "Pipeline generation completed. generated_frames=%d requested_frames=%d elapsed=%.2fs",
            len(frames),
            params.num_frames,
            time.perf_counter() - generation_start,
        )
        return VideoResult(frames=frames, fps=params.frame_rate, seed=used_seed)

    def close(self) -> None:
        if self.pipe is None:
            return
        self.pipe = None
        gc.collect()
        if self.device == "cuda":
            import torch

            torch.cuda.empty_cache()
        LOGGER.info("Pipeline released. model_id=%s", self.config.model_id)

    def __enter__(self) -> "VideoPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
