"""Tests for the wizard state machine."""

from __future__ import annotations

import os

from skillfactory.display.logging_config import secret_redaction_filter
from skillfactory.errors import SkillManifestError
from skillfactory.skill.discovery import SkillLoadError
from skillfactory.skill.manifest import Manifest, Variable
from skillfactory.wizard import (
    DEPLOY_SUCCESS_MSG,
    SKILL_NAME_LABEL,
    SKILLS_FOLDER_LABEL,
    View,
    Wizard,
)


def _manifest(name: str = "vikunja", **kwargs) -> Manifest:
    variables = kwargs.pop(
        "variables",
        [
            Variable(name="URL", label="Server URL", required=True, placeholder="https://x"),
            Variable(name="TOKEN", required=True, type="secret"),
            Variable(name="PROJECT", default="7"),
        ],
    )
    return Manifest(name=name, variables=variables, **kwargs)


def _configured(tmp_path, **kwargs) -> Wizard:
    wizard = Wizard(manifests=[_manifest(**kwargs)])
    wizard.select()
    wizard.set_value(0, "https://vikunja.local/api/v1")
    wizard.set_value(1, "tok-secret-value")
    wizard.set_value(3, str(tmp_path))
    return wizard


class TestSkillList:
    def test_cursor_is_clamped(self):
        err = SkillLoadError("bad", "/x/bad", SkillManifestError("boom"))
        wizard = Wizard(manifests=[_manifest("a"), _manifest("b")], skill_errors=[err])
        assert wizard.total_items == 3
        wizard.move_cursor(-1)
        assert wizard.cursor == 0
        wizard.move_cursor(10)
        assert wizard.cursor == 2

    def test_cursor_without_items(self):
        wizard = Wizard()
        wizard.move_cursor(1)
        assert wizard.cursor == 0
        assert wizard.select() is False

    def test_select_skill(self):
        wizard = Wizard(manifests=[_manifest()])
        assert wizard.select() is True
        assert wizard.view == View.CONFIG
        assert wizard.selected_skill.name == "vikunja"

    def test_select_error_row(self):
        err = SkillLoadError("bad", "/x/bad", SkillManifestError("failed to parse skill.yaml: x"))
        wizard = Wizard(manifests=[_manifest()], skill_errors=[err])
        wizard.move_cursor(1)
        assert wizard.select() is False
        assert wizard.view == View.SKILL_LIST
        assert wizard.selected_error is err
        assert wizard.error_msg == "failed to parse skill.yaml: x"


class TestConfigure:
    def test_fields_layout(self):
        wizard = Wizard(manifests=[_manifest()], skills_folder="/skills")
        wizard.select()
        labels = [f.label for f in wizard.fields]
        assert labels == ["Server URL", "TOKEN", "PROJECT", SKILLS_FOLDER_LABEL, SKILL_NAME_LABEL]
        assert wizard.fields[1].secret
        # Defaults are placeholders, not values
        assert wizard.fields[2].value == ""
        assert wizard.fields[2].placeholder == "7"
        assert wizard.fields[3].value == "/skills"
        assert wizard.fields[4].value == "vikunja"
        assert wizard.fields[4].char_limit == 100
        assert wizard.focus == 0

    def test_previous_values_are_restored(self):
        wizard = Wizard(manifests=[_manifest()], config_values={"URL": "https://old"})
        wizard.select()
        assert wizard.fields[0].value == "https://old"

    def test_focus_wraps(self):
        wizard = Wizard(manifests=[_manifest()])
        wizard.select()
        wizard.focus_prev()
        assert wizard.focus == len(wizard.fields) - 1
        wizard.focus_next()
        assert wizard.focus == 0

    def test_required_variable(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.set_value(0, "")
        assert wizard.submit_config() is False
        assert wizard.error_msg == "Server URL is required"
        assert wizard.view == View.CONFIG

    def test_required_folder_and_name(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.set_value(3, "")
        assert not wizard.validate()
        assert wizard.error_msg == f"{SKILLS_FOLDER_LABEL} is required"
        wizard.set_value(3, str(tmp_path))
        wizard.set_value(4, "")
        assert not wizard.validate()
        assert wizard.error_msg == f"{SKILL_NAME_LABEL} is required"

    def test_absolute_skill_name_rejected(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.set_value(4, "/etc/evil")
        assert wizard.submit_config() is False
        assert wizard.error_msg == f"{SKILL_NAME_LABEL} must be a folder name, not an absolute path"
        assert wizard.view == View.CONFIG

    def test_deploy_path_stays_in_skills_folder(self):
        wizard = Wizard(skills_folder="/home/u/.claude/skills", skill_folder_name="/etc/evil")
        assert wizard.deploy_path() == os.path.join("/home/u/.claude/skills", "etc/evil")

    def test_json_variable(self, tmp_path):
        wizard = Wizard(manifests=[_manifest(variables=[Variable(name="MAP", type="json")])])
        wizard.select()
        wizard.set_value(0, "{not json")
        wizard.set_value(1, str(tmp_path))
        assert not wizard.validate()
        assert wizard.error_msg == "MAP must be valid JSON"
        wizard.set_value(0, '{"a": 1}')
        assert wizard.validate()

    def test_submit_saves_values(self, tmp_path):
        wizard = _configured(tmp_path)
        assert wizard.submit_config() is True
        assert wizard.view == View.CONFIRM
        assert wizard.config_values["URL"] == "https://vikunja.local/api/v1"
        assert wizard.skills_folder == str(tmp_path)
        assert wizard.skill_folder_name == "vikunja"
        assert wizard.deploy_path() == os.path.join(str(tmp_path), "vikunja")

    def test_secret_registered_for_redaction(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        assert "tok-secret-value" in secret_redaction_filter._secrets

    def test_back_to_list_clears_error(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.set_value(0, "")
        wizard.submit_config()
        wizard.back_to_list()
        assert wizard.view == View.SKILL_LIST
        assert wizard.error_msg == ""


class TestConfirmAndBuild:
    def test_fresh_deploy_starts_building(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        assert wizard.confirm() is True
        assert wizard.view == View.BUILDING
        assert wizard.building

    def test_existing_deploy_asks_for_overwrite(self, tmp_path):
        bin_dir = tmp_path / "vikunja" / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / "vikunja").write_text("#!/bin/sh\n")

        wizard = _configured(tmp_path)
        wizard.submit_config()
        assert wizard.skill_exists()
        assert wizard.confirm() is False
        assert wizard.view == View.OVERWRITE

        wizard.cancel_overwrite()
        assert wizard.view == View.CONFIRM

        wizard.confirm()
        wizard.confirm_overwrite()
        assert wizard.view == View.BUILDING

    def test_back_to_config(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        wizard.focus = 3
        wizard.back_to_config()
        assert wizard.view == View.CONFIG
        assert wizard.focus == 0

    def test_variable_values_use_defaults(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        assert wizard.variable_values() == {
            "URL": "https://vikunja.local/api/v1",
            "TOKEN": "tok-secret-value",
            "PROJECT": "7",
        }

    def test_build_failure_goes_to_done(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        wizard.confirm()
        assert wizard.build_finished("compiler output", "Build failed: exit status 2") is False
        assert wizard.view == View.DONE
        assert not wizard.building
        assert wizard.build_output == "compiler output"
        assert wizard.error_msg == "Build failed: exit status 2"

    def test_success_and_restart(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        wizard.confirm()
        assert wizard.build_finished("ok") is True
        wizard.deploy_finished()
        assert wizard.view == View.DONE
        assert wizard.status_msg == DEPLOY_SUCCESS_MSG

        wizard.restart()
        assert wizard.view == View.SKILL_LIST
        assert wizard.status_msg == ""
        assert wizard.build_output == ""
        # Entered values survive a restart
        assert wizard.config_values["URL"] == "https://vikunja.local/api/v1"

    def test_deploy_failure(self, tmp_path):
        wizard = _configured(tmp_path)
        wizard.submit_config()
        wizard.confirm()
        wizard.build_finished("")
        wizard.deploy_finished("deploy failed")
        assert wizard.view == View.DONE
        assert wizard.error_msg == "deploy failed"
        assert wizard.status_msg == ""
