"""Property-based tests for the repository registry."""

import tempfile
from pathlib import Path

from hypothesis import given, settings, strategies as st

from stratum.config import RepositoryConfig, RepositoryRegistry, ServerConfig

# =============================================================================
# Strategies
# =============================================================================

label = st.from_regex(r"[a-z0-9]([a-z0-9-]{0,8}[a-z0-9])?", fullmatch=True)
repository_name = st.lists(label, min_size=2, max_size=3).map(".".join)
owner = st.sampled_from(["root", "stratum", "cvmfs"])
role = st.sampled_from(["origin", "replica"])


def _config(name: str, owner: str, role: str, server: ServerConfig) -> RepositoryConfig:
    if role == "origin":
        return RepositoryConfig.new_origin(name, owner=owner, server=server)
    return RepositoryConfig.new_replica(
        name,
        owner=owner,
        server=server,
        stratum0_url=f"http://origin.example.org/stratum/{name}",
    )


class TestRegistryProperties:
    @given(name=repository_name, owner=owner, role=role)
    @settings(max_examples=50, deadline=None)
    def test_saved_config_loads_unchanged(
        self, name: str, owner: str, role: str
    ) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            server = ServerConfig.from_dict({}, config_dir=Path(tmp))
            registry = RepositoryRegistry(Path(tmp))
            config = _config(name, owner, role, server)

            registry.create(config)

            assert registry.load(name) == config
            assert registry.names() == [name]

    @given(names=st.sets(repository_name, min_size=1, max_size=5))
    @settings(max_examples=25, deadline=None)
    def test_names_are_sorted_and_complete(self, names: set[str]) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            server = ServerConfig.from_dict({}, config_dir=Path(tmp))
            registry = RepositoryRegistry(Path(tmp))
            for name in names:
                config = RepositoryConfig.new_origin(name, owner="root", server=server)
                registry.create(config)

            assert registry.names() == sorted(names)
            assert [config.name for config in registry.load_all()] == sorted(names)
