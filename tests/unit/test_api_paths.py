"""build_url placeholder substitution."""

from qgame import api_paths
from qgame.api_paths import build_url


class TestBuildUrl:
    def test_substitutes_placeholder(self):
        assert build_url(api_paths.CHAINS_GET, {"id": 7}) == "/api/chains/7"

    def test_no_params_returns_path(self):
        assert build_url(api_paths.CHAINS_LIST) == "/api/chains"
        assert build_url(api_paths.CHAINS_GET, {}) == "/api/chains/{id}"

    def test_ignores_params_without_placeholder(self):
        assert build_url(api_paths.CHAINS_GET, {"id": "3", "page": 2}) == "/api/chains/3"

    def test_leaves_unmatched_placeholder(self):
        assert build_url("/api/a/{x}/b/{y}", {"x": 1}) == "/api/a/1/b/{y}"
