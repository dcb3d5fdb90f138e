from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from videogen.services.pipeline_manager import VideoConfig, VideoGenerationParams
from videogen.utils.common import validate_dimensions


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class GenerationRequest(BaseModel):
    model_id: str = Field(min_length=1)
    cache_dir: Path | None = None
    output_dir: Path
    gif_path: Path | None = None
    mp4_path: Path | None = None
    prompt: str = Field(min_length=1)
    negative_prompt: str | None = None
    height: int = Field(gt=0)
    width: int = Field(gt=0)
    num_frames: int = Field(gt=0)
    num_inference_steps: int = Field(gt=0)
    guidance_scale: float = Field(ge=0.0)
    fps: int = Field(gt=0)
    seed: int = Field(default=0, ge=0, lt=2**64)

    @field_validator("cache_dir", "gif_path", "mp4_path", "negative_prompt", mode="before")
    @classmethod
    def _empty_means_unset(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt must not be blank.")
        return value

    @model_validator(mode="after")
    def _dimensions_divisible(self) -> "GenerationRequest":
        validate_dimensions(self.height, self.width)
        return self

    def video_config(self) -> VideoConfig:
        return VideoConfig(model_id=self.model_id, cache_dir=self.cache_dir)

    def generation_params(self) -> VideoGenerationParams:
        return VideoGenerationParams(
            height=self.height,
            width=self.width,
            num_frames=self.num_frames,
            num_inference_steps=self.num_inference_steps,
            guidance_scale=self.guidance_scale,
            frame_rate=self.fps,
            seed=self.seed,
            negative_prompt=self.negative_prompt,
        )
