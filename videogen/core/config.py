import os
from pathlib import Path


class Settings:
    def __init__(self) -> None:
        def _bool_env(name: str, default: str) -> bool:
            return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

        def _optional_path_env(name: str) -> Path | None:
            raw = os.getenv(name)
            if raw is None or not raw.strip():
                return None
            return Path(raw.strip())

        self.model_id = os.getenv("MODEL_ID", "Lightricks/LTX-Video-2b-v0.9")
        self.hf_token = os.getenv("HF_TOKEN") or os.getenv("HUGGING_FACE_HUB_TOKEN")
        self.cache_dir = _optional_path_env("MODEL_CACHE_DIR")

        self.output_dir = Path(os.getenv("OUTPUT_DIR", "./output"))
        self.logs_dir = Path(os.getenv("LOG_DIR", "./logs"))
        self.app_log_file = Path(os.getenv("APP_LOG", self.logs_dir / "videogen.log"))
        self.log_level = os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

        self.default_prompt = os.getenv(
            "DEFAULT_PROMPT",
            "A cat playing piano in a cozy living room, cinematic lighting",
        ).strip()
        self.default_negative_prompt = os.getenv(
            "DEFAULT_NEGATIVE_PROMPT",
            "worst quality, inconsistent motion, blurry, jittery, distorted",
        ).strip()

        self.default_height = int(os.getenv("DEFAULT_HEIGHT", "512"))
        self.default_width = int(os.getenv("DEFAULT_WIDTH", "704"))
        self.default_num_frames = int(os.getenv("DEFAULT_NUM_FRAMES", "65"))
        self.default_num_inference_steps = int(os.getenv("DEFAULT_NUM_INFERENCE_STEPS", "30"))
        self.default_guidance_scale = float(os.getenv("DEFAULT_GUIDANCE_SCALE", "3.0"))
        self.default_fps = int(os.getenv("DEFAULT_FPS", "24"))

        self.local_files_only = _bool_env("LOCAL_FILES_ONLY", "0")
        self.allow_remote_fallback = _bool_env("ALLOW_REMOTE_FALLBACK", "1")
        self.enable_sequential_cpu_offload = _bool_env("ENABLE_SEQUENTIAL_CPU_OFFLOAD", "0")
        self.enable_model_cpu_offload = _bool_env("ENABLE_MODEL_CPU_OFFLOAD", "1")
        self.enable_vae_tiling = _bool_env("ENABLE_VAE_TILING", "1")
        self.enable_vae_slicing = _bool_env("ENABLE_VAE_SLICING", "1")

        self.progress_log_every_steps = int(os.getenv("PROGRESS_LOG_EVERY_STEPS", "1"))
        self.progress_bar_width = int(os.getenv("PROGRESS_BAR_WIDTH", "24"))


settings = Settings()
