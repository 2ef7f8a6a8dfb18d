import pytest
from graphcodec.env import (
	ENV_GRAPHCODEC_COMPACT,
	ENV_GRAPHCODEC_DETECT_CIRCULAR,
	ENV_GRAPHCODEC_INCLUDE_FUNCTIONS,
	ENV_GRAPHCODEC_INCLUDE_INHERITED,
	ENV_GRAPHCODEC_MEM_LIMIT,
	ENV_GRAPHCODEC_RESTORE_CIRCULAR,
)


@pytest.fixture(autouse=True)
def _clean_codec_env(monkeypatch: pytest.MonkeyPatch):  # pyright: ignore[reportUnusedFunction]
	for name in (
		ENV_GRAPHCODEC_COMPACT,
		ENV_GRAPHCODEC_DETECT_CIRCULAR,
		ENV_GRAPHCODEC_INCLUDE_FUNCTIONS,
		ENV_GRAPHCODEC_INCLUDE_INHERITED,
		ENV_GRAPHCODEC_MEM_LIMIT,
		ENV_GRAPHCODEC_RESTORE_CIRCULAR,
	):
		monkeypatch.delenv(name, raising=False)
	yield
