"""
Tests for the batch driver and the sync checker.
"""
import pytest

from conftest import read_manifest, write_package
from utils.exceptions import BatchApplyError, ManifestError, PlatformVersionError, RegistryError
from versioning import set_version as set_version_module
from versioning.set_version import check_versions, set_version


def _snapshot(repo):
    return {
        p.parent.name: p.read_bytes()
        for p in sorted((repo / "packages").glob("*/package.json"))
    }


class TestSetVersion:
    """Tests for set_version."""

    @pytest.mark.asyncio
    async def test_release(self, repo, config):
        result = await set_version("0.2.0", config=config)

        assert dict(result.mapping) == {"core": "0.2.0", "tool-a": "0.2.0", "tool-b": "0.2.0"}
        assert result.distinguished_version == "0.2.0"

        core = read_manifest(repo / "packages" / "core")
        assert core["version"] == "0.2.0"
        assert core["devDependencies"]["tool-a"] == "0.2.0"

        tool_a = read_manifest(repo / "packages" / "tool-a")
        assert tool_a["version"] == "0.2.0"
        assert tool_a["dependencies"] == {"core": "0.2.0", "left-pad": "^1.3.0"}

        tool_b = read_manifest(repo / "packages" / "tool-b")
        assert tool_b["devDependencies"] == {"tool-a": "0.2.0", "jest": "^29.0.0"}
        assert tool_b["license"] == "MIT"

    @pytest.mark.asyncio
    async def test_private_packages_untouched(self, repo, config):
        before = (repo / "packages" / "internal" / "package.json").read_bytes()
        result = await set_version("0.2.0", config=config)
        assert "internal" not in result.mapping
        assert (repo / "packages" / "internal" / "package.json").read_bytes() == before

    @pytest.mark.asyncio
    async def test_skip_distinguished_uses_sentinel(self, repo, config):
        result = await set_version("0.2.0", True, config=config)

        assert result.mapping["core"] == "1000.0.0"
        assert result.mapping["tool-a"] == "0.2.0"
        assert result.mapping["tool-b"] == "0.2.0"
        assert result.distinguished_version == "1000.0.0"
        assert read_manifest(repo / "packages" / "core")["version"] == "1000.0.0"
        assert read_manifest(repo / "packages" / "tool-a")["dependencies"]["core"] == "1000.0.0"

    @pytest.mark.asyncio
    async def test_platform_setter_receives_resolved_version(self, config, monkeypatch):
        calls = []

        async def record(self, version, mapping):
            calls.append((version, dict(mapping)))

        monkeypatch.setattr(
            set_version_module.PlatformVersionSetter, "set_distinguished_version", record
        )
        await set_version("0.2.0", True, config=config)

        assert calls == [("1000.0.0", {"core": "1000.0.0", "tool-a": "0.2.0", "tool-b": "0.2.0"})]

    @pytest.mark.asyncio
    async def test_distinguished_manifest_not_written_by_batch(self, repo, config, monkeypatch):
        async def noop(self, version, mapping):
            return None

        monkeypatch.setattr(
            set_version_module.PlatformVersionSetter, "set_distinguished_version", noop
        )
        before = (repo / "packages" / "core" / "package.json").read_bytes()

        result = await set_version("0.2.0", config=config)

        assert (repo / "packages" / "core" / "package.json").read_bytes() == before
        assert sorted(u.name for u in result.updates) == ["tool-a", "tool-b"]

    @pytest.mark.asyncio
    async def test_idempotent(self, repo, config):
        await set_version("0.2.0", config=config)
        first = _snapshot(repo)
        result = await set_version("0.2.0", config=config)
        assert _snapshot(repo) == first
        assert result.changed == []

    @pytest.mark.asyncio
    async def test_dry_run(self, repo, config):
        before = _snapshot(repo)
        result = await set_version("0.2.0", config=config, dry_run=True)

        assert _snapshot(repo) == before
        assert result.dry_run
        assert sorted(u.name for u in result.changed) == ["tool-a", "tool-b"]
        assert result.platform_files == [repo / "packages" / "core" / "package.json"]

    @pytest.mark.asyncio
    async def test_without_distinguished_package(self, tmp_path, config):
        root = tmp_path / "other"
        write_package(root / "packages", "solo", {"name": "solo", "version": "1.0.0"})
        config.root_dir = str(root)
        result = await set_version("2.0.0", config=config)
        assert dict(result.mapping) == {"solo": "2.0.0"}
        assert result.distinguished_version is None
        assert result.platform_files == []
        assert read_manifest(root / "packages" / "solo")["version"] == "2.0.0"

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_siblings(self, repo, config, monkeypatch):
        original = set_version_module.rewrite_manifest

        async def flaky(package_path, manifest, mapping, **kwargs):
            if manifest["name"] == "tool-a":
                raise OSError("disk full")
            return await original(package_path, manifest, mapping, **kwargs)

        monkeypatch.setattr(set_version_module, "rewrite_manifest", flaky)

        with pytest.raises(BatchApplyError) as exc_info:
            await set_version("0.2.0", config=config)

        assert len(exc_info.value.errors) == 1
        assert read_manifest(repo / "packages" / "tool-b")["version"] == "0.2.0"
        assert read_manifest(repo / "packages" / "core")["version"] == "0.2.0"
        assert read_manifest(repo / "packages" / "tool-a")["version"] == "0.1.0"

    @pytest.mark.asyncio
    async def test_malformed_manifest_fails_batch(self, repo, config):
        write_package(repo / "packages", "broken", {"version": "0.1.0"})

        with pytest.raises(BatchApplyError) as exc_info:
            await set_version("0.2.0", config=config)

        assert isinstance(exc_info.value.errors[0], ManifestError)
        assert read_manifest(repo / "packages" / "tool-b")["version"] == "0.2.0"

    @pytest.mark.asyncio
    async def test_platform_failure_stops_batch(self, repo, config):
        android = repo / "packages" / "core" / "android"
        android.mkdir()
        (android / "build.gradle").write_text(
            'android {\n    defaultConfig {\n        versionCode 100\n        versionName "0.1.0"\n    }\n}\n',
            encoding="utf-8"
        )
        config.platform.gradle_files = ["android/build.gradle"]
        before = _snapshot(repo)

        # "nightly" has no semver form to derive a versionCode from
        with pytest.raises(PlatformVersionError):
            await set_version("nightly", config=config)

        after = _snapshot(repo)
        assert after["tool-a"] == before["tool-a"]
        assert after["tool-b"] == before["tool-b"]
        assert after["internal"] == before["internal"]

    @pytest.mark.asyncio
    async def test_registry_failure(self, tmp_path, config):
        config.root_dir = str(tmp_path / "nowhere")
        with pytest.raises(RegistryError):
            await set_version("0.2.0", config=config)


class TestCheckVersions:
    """Tests for check_versions."""

    @pytest.mark.asyncio
    async def test_out_of_sync(self, config):
        mismatches = await check_versions("0.2.0", config=config)
        found = {(m.package, m.field): (m.found, m.expected) for m in mismatches}
        assert found[("core", "version")] == ("0.1.0", "0.2.0")
        assert found[("tool-a", "dependencies.core")] == ("^0.1.0", "0.2.0")
        assert found[("tool-b", "devDependencies.tool-a")] == ("0.1.0", "0.2.0")
        assert all(m.package != "internal" for m in mismatches)

    @pytest.mark.asyncio
    async def test_in_sync_after_release(self, config):
        await set_version("0.2.0", True, config=config)
        assert await check_versions("0.2.0", True, config=config) == []
        assert await check_versions("0.2.0", False, config=config) != []

    @pytest.mark.asyncio
    async def test_check_writes_nothing(self, repo, config):
        before = _snapshot(repo)
        await check_versions("0.2.0", config=config)
        assert _snapshot(repo) == before
