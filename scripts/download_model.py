import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv()

from videogen.core.config import settings
from videogen.core.logging import configure_logging
from videogen.errors import VideoGenError
from videogen.services.pipeline_manager import VideoConfig, VideoPipeline


def download_model(model_id: str, cache_dir: str | None) -> None:
    # Loading once is enough to populate the Hugging Face cache.
    settings.local_files_only = False
    config = VideoConfig(model_id=model_id, cache_dir=Path(cache_dir) if cache_dir else None)
    with VideoPipeline(config) as pipeline:
        print(f"Model {model_id} downloaded to {cache_dir or 'the default cache'} and initialized on {pipeline.device}.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Pre-download video generation model weights.")
    parser.add_argument("--model-id", default=settings.model_id, help="Model ID from Hugging Face Hub.")
    parser.add_argument(
        "--cache-dir",
        default=str(settings.cache_dir) if settings.cache_dir else None,
        help="Model cache directory.",
    )
    args = parser.parse_args()

    configure_logging("INFO")
    try:
        download_model(model_id=args.model_id, cache_dir=args.cache_dir)
    except VideoGenError as exc:
        raise SystemExit(f"Download failed: {exc}") from exc


if __name__ == "__main__":
    main()
