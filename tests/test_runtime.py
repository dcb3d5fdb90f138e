import sys
import types
import unittest
from unittest import mock

import torch

from videogen import runtime
from videogen.errors import RuntimeInitError, VideoUnavailableError


class RuntimeTests(unittest.TestCase):
    def test_video_available_when_pipeline_class_exported(self):
        fake = types.SimpleNamespace(__version__="9.9.9", LTXPipeline=object)
        with mock.patch.dict(sys.modules, {"diffusers": fake}):
            self.assertTrue(runtime.is_video_available())
            self.assertEqual(runtime.runtime_version(), "9.9.9")

    def test_video_unavailable_without_pipeline_class(self):
        fake = types.SimpleNamespace(__version__="0.1.0")
        with mock.patch.dict(sys.modules, {"diffusers": fake}):
            self.assertFalse(runtime.is_video_available())

    def test_require_video_raises_when_unavailable(self):
        fake = types.SimpleNamespace(__version__="0.1.0")
        with mock.patch.dict(sys.modules, {"diffusers": fake}):
            with self.assertRaises(VideoUnavailableError):
                runtime.require_video()

    def test_require_video_passes_when_available(self):
        fake = types.SimpleNamespace(__version__="9.9.9", LTXPipeline=object)
        with mock.patch.dict(sys.modules, {"diffusers": fake}):
            runtime.require_video()

    def test_init_runtime_reports_missing_torch(self):
        fake = types.SimpleNamespace(__version__="9.9.9")
        with mock.patch.dict(sys.modules, {"diffusers": fake, "torch": None}):
            with self.assertRaises(RuntimeInitError):
                runtime.init_runtime()

    def test_cli_modules_do_not_bind_torch_at_import(self):
        from videogen import cli
        from videogen.services import pipeline_manager

        self.assertFalse(hasattr(pipeline_manager, "torch"))
        self.assertFalse(hasattr(cli, "torch"))

    def test_init_runtime_on_cpu(self):
        fake = types.SimpleNamespace(__version__="9.9.9")
        with mock.patch.dict(sys.modules, {"diffusers": fake}), \
            mock.patch("torch.cuda.is_available", return_value=False):
            info = runtime.init_runtime()

        self.assertEqual(info.device, "cpu")
        self.assertEqual(info.dtype, torch.float32)
        self.assertEqual(info.diffusers_version, "9.9.9")


if __name__ == "__main__":
    unittest.main()
