import os
import unittest
from pathlib import Path
from unittest import mock

from videogen.core.config import Settings


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        self.assertEqual(settings.model_id, "Lightricks/LTX-Video-2b-v0.9")
        self.assertIsNone(settings.cache_dir)
        self.assertIsNone(settings.hf_token)
        self.assertEqual(settings.output_dir, Path("./output"))
        self.assertEqual((settings.default_height, settings.default_width), (512, 704))
        self.assertEqual(settings.default_num_frames, 65)
        self.assertEqual(settings.default_num_inference_steps, 30)
        self.assertEqual(settings.default_guidance_scale, 3.0)
        self.assertEqual(settings.default_fps, 24)
        self.assertFalse(settings.local_files_only)
        self.assertTrue(settings.enable_model_cpu_offload)

    def test_environment_overrides(self):
        env = {
            "MODEL_ID": "Lightricks/LTX-Video",
            "MODEL_CACHE_DIR": "/data/hf",
            "HUGGING_FACE_HUB_TOKEN": "secret",
            "DEFAULT_FPS": "30",
            "LOCAL_FILES_ONLY": "yes",
            "LOG_LEVEL": "info",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings()

        self.assertEqual(settings.model_id, "Lightricks/LTX-Video")
        self.assertEqual(settings.cache_dir, Path("/data/hf"))
        self.assertEqual(settings.hf_token, "secret")
        self.assertEqual(settings.default_fps, 30)
        self.assertTrue(settings.local_files_only)
        self.assertEqual(settings.log_level, "INFO")

    def test_blank_cache_dir_is_unset(self):
        with mock.patch.dict(os.environ, {"MODEL_CACHE_DIR": "  "}, clear=True):
            settings = Settings()
        self.assertIsNone(settings.cache_dir)


if __name__ == "__main__":
    unittest.main()
