"""Tests for the build and deploy pipeline."""

from __future__ import annotations

import asyncio
import os
import stat
import zipfile

import pytest
from dotenv import dotenv_values

from skillfactory.errors import BuildError, DeployError
from skillfactory.skill.builder import build_and_deploy, build_skill, deploy_skill
from skillfactory.skill.manifest import Manifest

CLI_SOURCE = """\
def main():
    print("hello from demo")
"""


def _skill(tmp_path, **kwargs) -> Manifest:
    skill_dir = tmp_path / "skills" / "demo"
    skill_dir.mkdir(parents=True, exist_ok=True)
    return Manifest(name="demo", version="1.2.3", path=str(skill_dir), **kwargs)


def _make_binary(manifest: Manifest, name: str = "demo") -> str:
    bin_dir = os.path.join(manifest.path, "bin")
    os.makedirs(bin_dir, exist_ok=True)
    path = os.path.join(bin_dir, name)
    with open(path, "w") as fh:
        fh.write("#!/bin/sh\necho demo\n")
    return path


# ── Build ────────────────────────────────────────────────────────────────


class TestBuildSkill:
    def test_no_build_step_is_skipped(self, tmp_path):
        result = asyncio.run(build_skill(_skill(tmp_path)))
        assert result.skipped
        assert result.output == "No build step configured"

    def test_custom_command(self, tmp_path):
        manifest = _skill(
            tmp_path,
            build={"command": ["{python}", "-c", "import os; print(os.getcwd()); print('{output}')"]},
        )
        result = asyncio.run(build_skill(manifest))
        assert not result.skipped
        lines = result.output.splitlines()
        assert os.path.realpath(lines[0]) == os.path.realpath(manifest.path)
        assert lines[1] == os.path.join("bin", "demo")
        assert os.path.isdir(os.path.join(manifest.path, "bin"))

    def test_failing_command_keeps_output(self, tmp_path):
        manifest = _skill(
            tmp_path,
            build={"command": ["python", "-c", "import sys; print('oops'); sys.exit(3)"]},
        )
        with pytest.raises(BuildError) as exc_info:
            asyncio.run(build_skill(manifest))
        assert "exit status 3" in str(exc_info.value)
        assert "(skill: demo)" in str(exc_info.value)
        assert exc_info.value.output == "oops"

    def test_missing_executable(self, tmp_path):
        manifest = _skill(tmp_path, build={"command": ["no-such-build-tool-xyz"]})
        with pytest.raises(BuildError, match="not found"):
            asyncio.run(build_skill(manifest))

    def test_timeout(self, tmp_path):
        manifest = _skill(tmp_path, build={"command": ["{python}", "-c", "import time; time.sleep(10)"]})
        with pytest.raises(BuildError, match="timed out"):
            asyncio.run(build_skill(manifest, timeout=0.5))

    def test_shell_braces_are_left_alone(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SKILLFACTORY_TEST_VAR", "from-env")
        manifest = _skill(
            tmp_path,
            build={"command": ["sh", "-c", "echo \"${SKILLFACTORY_TEST_VAR}\" {binary} '{\"k\": 1}'"]},
        )
        result = asyncio.run(build_skill(manifest))
        assert result.output == 'from-env demo {"k": 1}'

    def test_command_not_executable(self, tmp_path):
        manifest = _skill(tmp_path, build={"command": ["./build.sh"]})
        script = os.path.join(manifest.path, "build.sh")
        with open(script, "w") as fh:
            fh.write("#!/bin/sh\necho built\n")
        os.chmod(script, 0o644)
        with pytest.raises(BuildError, match="failed to start './build.sh'") as exc_info:
            asyncio.run(build_skill(manifest))
        assert exc_info.value.skill_name == "demo"

    def test_bin_dir_cannot_be_created(self, tmp_path):
        manifest = _skill(tmp_path, build={"command": ["{python}", "-c", "pass"]})
        # A regular file where bin/ should go
        with open(os.path.join(manifest.path, "bin"), "w") as fh:
            fh.write("")
        with pytest.raises(BuildError, match="failed to create bin directory"):
            asyncio.run(build_skill(manifest))

    def test_staging_failure(self, tmp_path, monkeypatch):
        pkg = tmp_path / "demo_pkg"
        pkg.mkdir()
        (pkg / "cli.py").write_text(CLI_SOURCE)
        manifest = _skill(tmp_path, build={"entry": str(pkg)})

        def broken_copytree(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("skillfactory.skill.builder.shutil.copytree", broken_copytree)
        with pytest.raises(BuildError, match="failed to stage entry"):
            asyncio.run(build_skill(manifest))

    def test_default_zipapp_build(self, tmp_path):
        manifest = _skill(tmp_path, build={"entry": "src/demo_cli", "binary": "demo"})
        pkg = os.path.join(manifest.path, "src", "demo_cli")
        os.makedirs(pkg)
        with open(os.path.join(pkg, "__init__.py"), "w") as fh:
            fh.write("")
        with open(os.path.join(pkg, "cli.py"), "w") as fh:
            fh.write(CLI_SOURCE)

        asyncio.run(build_skill(manifest))

        built = os.path.join(manifest.path, "bin", "demo")
        assert os.stat(built).st_mode & stat.S_IXUSR
        with zipfile.ZipFile(built) as zf:
            names = zf.namelist()
            main_src = zf.read("__main__.py").decode()
        assert "demo_cli/cli.py" in names
        assert "demo_cli.cli" in main_src

    def test_missing_entry_dir(self, tmp_path):
        manifest = _skill(tmp_path, build={"entry": "nowhere"})
        with pytest.raises(BuildError, match="not a directory"):
            asyncio.run(build_skill(manifest))


# ── Deploy ───────────────────────────────────────────────────────────────


class TestDeploySkill:
    def test_copies_files_and_writes_env(self, tmp_path):
        manifest = _skill(
            tmp_path,
            deploy={"files": [{"source": "bin/demo", "target": "bin/demo"}]},
        )
        _make_binary(manifest)
        target = str(tmp_path / "deployed" / "demo")

        result = deploy_skill(manifest, {"URL": "https://x", "TOKEN": "s3cr3t value"}, target)

        assert result.deploy_path == target
        assert os.path.isfile(os.path.join(target, "bin", "demo"))
        env_path = os.path.join(target, "bin", ".env")
        assert env_path in result.files
        assert stat.S_IMODE(os.stat(env_path).st_mode) == 0o600
        assert dotenv_values(env_path) == {"URL": "https://x", "TOKEN": "s3cr3t value"}

    def test_env_is_rewritten(self, tmp_path):
        manifest = _skill(tmp_path)
        target = str(tmp_path / "out")
        deploy_skill(manifest, {"OLD": "1"}, target)
        deploy_skill(manifest, {"NEW": "2"}, target)
        assert dotenv_values(os.path.join(target, "bin", ".env")) == {"NEW": "2"}

    def test_copies_directories(self, tmp_path):
        manifest = _skill(tmp_path, deploy={"files": [{"source": "assets", "target": "assets"}]})
        assets = os.path.join(manifest.path, "assets", "nested")
        os.makedirs(assets)
        with open(os.path.join(assets, "a.txt"), "w") as fh:
            fh.write("a")
        target = str(tmp_path / "out")
        deploy_skill(manifest, {}, target)
        assert os.path.isfile(os.path.join(target, "assets", "nested", "a.txt"))

    def test_renders_docs(self, tmp_path):
        manifest = _skill(
            tmp_path,
            description="Demo skill",
            skill_description="Use demo for demos",
            build={"binary": "dm"},
            docs={"template": "SKILL.md.tmpl"},
        )
        with open(os.path.join(manifest.path, "SKILL.md.tmpl"), "w") as fh:
            fh.write("---\nname: $name\ndescription: $skill_description\n---\n"
                     "Run ./$binary (v$version). Cost: $$5 $unknown\n")
        target = str(tmp_path / "out")
        deploy_skill(manifest, {}, target)
        with open(os.path.join(target, "SKILL.md")) as fh:
            rendered = fh.read()
        assert "name: demo" in rendered
        assert "description: Use demo for demos" in rendered
        assert "Run ./dm (v1.2.3). Cost: $5 $unknown" in rendered

    def test_wrapper(self, tmp_path):
        manifest = _skill(tmp_path, deploy={"wrapper": True})
        target = str(tmp_path / "out")
        result = deploy_skill(manifest, {}, target)
        wrapper = os.path.join(target, "demo")
        assert wrapper in result.files
        with open(wrapper) as fh:
            script = fh.read()
        assert script.startswith("#!/bin/sh")
        assert 'bin/demo" "$@"' in script
        assert os.stat(wrapper).st_mode & stat.S_IXUSR

    def test_missing_source(self, tmp_path):
        manifest = _skill(tmp_path, deploy={"files": [{"source": "bin/demo", "target": "bin/demo"}]})
        with pytest.raises(DeployError, match="does not exist"):
            deploy_skill(manifest, {}, str(tmp_path / "out"))

    def test_target_outside_deploy_path(self, tmp_path):
        manifest = _skill(tmp_path, deploy={"files": [{"source": "bin/demo", "target": "../escape"}]})
        _make_binary(manifest)
        with pytest.raises(DeployError, match="not within"):
            deploy_skill(manifest, {}, str(tmp_path / "out"))
        assert not (tmp_path / "escape").exists()

    def test_missing_template(self, tmp_path):
        manifest = _skill(tmp_path, docs={"template": "missing.tmpl"})
        with pytest.raises(DeployError, match="docs template"):
            deploy_skill(manifest, {}, str(tmp_path / "out"))


class TestBuildAndDeploy:
    def test_pipeline(self, tmp_path):
        script = "import os; open(os.path.join('bin', 'demo'), 'w').write('built')"
        manifest = _skill(
            tmp_path,
            build={"command": ["{python}", "-c", script]},
            deploy={"files": [{"source": "bin/demo", "target": "bin/demo"}]},
        )
        target = str(tmp_path / "out")
        build, deploy = asyncio.run(build_and_deploy(manifest, {"K": "v"}, target))
        assert not build.skipped
        with open(os.path.join(target, "bin", "demo")) as fh:
            assert fh.read() == "built"
        assert len(deploy.files) == 2
