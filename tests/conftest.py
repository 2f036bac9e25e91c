import os
import pathlib
import sys

import pytest

# Ensure project root is on sys.path so `import genpipe...` works without installing
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep tests offline and deterministic
os.environ["GENPIPE_BACKEND"] = "echo"
os.environ["GENPIPE_MODEL"] = "llava"
os.environ.pop("GENPIPE_MODEL_MEDIA", None)
os.environ.pop("GENPIPE_MODEL_MULTITURN", None)
os.environ["DEFAULT_ASSET_PATH"] = str(PROJECT_ROOT / "tests" / "does-not-exist.jpeg")

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + b"\x00" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 16


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def pipeline():
    from genpipe.flows.std import register_std_flows
    from genpipe.pipeline import Pipeline
    from genpipe.plugins.echo import EchoBackend

    p = Pipeline()
    backend = p.add_backend(EchoBackend())
    backend.define_model(p.models, "llava")
    register_std_flows(p.flows, "llava")
    return p
