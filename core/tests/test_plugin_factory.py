"""
Tests for declarative task construction and the composer CLI.
"""

import json
import logging
import sys
import textwrap

import pytest

from composer import cli
from composer.errors import TaskConfigurationError
from composer.plugins.factory import TaskPluginFactory, load_profiles, load_yaml_file
from composer.profiles.profile import ContactCheckProfile
from composer.tasks.discrete_contact_check_task import DiscreteContactCheckTask

TASKS_YAML = textwrap.dedent(
    """
    tasks:
      DiscreteContactCheckTask:
        class: DiscreteContactCheckTaskFactory
        config:
          conditional: true
          inputs: [output_data]
      FinalCheck:
        class: DiscreteContactCheckTask
        config:
          conditional: false
          inputs: final_program
    """
)

PROFILES_YAML = textwrap.dedent(
    """
    profiles:
      DiscreteContactCheckTask:
        DEFAULT:
          config:
            longest_valid_segment_length: 0.05
        SLOW:
          config:
            longest_valid_segment_length: 0.001
            check_program_mode: all_except_start
            contact_manager_config:
              default_margin: 0.025
    """
)


@pytest.fixture
def tasks_file(tmp_path):
    path = tmp_path / "tasks.yaml"
    path.write_text(TASKS_YAML)
    return path


@pytest.fixture
def profiles_file(tmp_path):
    path = tmp_path / "profiles.yaml"
    path.write_text(PROFILES_YAML)
    return path


class TestTaskPluginFactory:
    def test_creates_tasks_from_yaml(self, tasks_file):
        tasks = TaskPluginFactory().create_task_nodes(load_yaml_file(tasks_file))

        assert tasks["DiscreteContactCheckTask"] == DiscreteContactCheckTask(
            "DiscreteContactCheckTask", "output_data", True
        )
        assert tasks["FinalCheck"] == DiscreteContactCheckTask("FinalCheck", "final_program", False)

    def test_unknown_class(self):
        with pytest.raises(TaskConfigurationError, match="unknown class 'NopeFactory'"):
            TaskPluginFactory().create_task_node("t", {"class": "NopeFactory", "config": {}})

    def test_missing_class(self):
        with pytest.raises(TaskConfigurationError, match="missing a 'class' entry"):
            TaskPluginFactory().create_task_node("t", {"config": {"inputs": ["a"]}})

    def test_shape_errors_surface_at_build_time(self):
        factory = TaskPluginFactory()
        with pytest.raises(TaskConfigurationError, match="missing 'inputs' entry"):
            factory.create_task_node("t", {"class": "DiscreteContactCheckTaskFactory"})
        with pytest.raises(TaskConfigurationError, match="only supports one input key"):
            factory.create_task_node(
                "t",
                {"class": "DiscreteContactCheckTaskFactory", "config": {"inputs": ["a", "b"]}},
            )

    def test_missing_tasks_section(self):
        with pytest.raises(TaskConfigurationError, match="no 'tasks' entry"):
            TaskPluginFactory().create_task_nodes({"something": {}})

    def test_register_rejects_non_tasks(self):
        with pytest.raises(TypeError):
            TaskPluginFactory().register_task("Bad", dict)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("tasks: [unclosed")
        with pytest.raises(TaskConfigurationError, match="Invalid YAML"):
            load_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(TaskConfigurationError, match="Cannot read"):
            load_yaml_file(tmp_path / "nope.yaml")


class TestLoadProfiles:
    def test_loads_contact_check_profiles(self, profiles_file):
        profiles = load_profiles(load_yaml_file(profiles_file))

        slow = profiles.get_profile("DiscreteContactCheckTask", "SLOW")
        assert isinstance(slow, ContactCheckProfile)
        assert slow.config.longest_valid_segment_length == 0.001
        assert slow.config.contact_manager_config.default_margin == 0.025

    def test_invalid_profile_fields(self):
        data = {"profiles": {"T": {"P": {"config": {"longest_valid_segment_length": -1}}}}}
        with pytest.raises(TaskConfigurationError, match="Invalid profile definition"):
            load_profiles(data)


class TestCli:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def run_cli(self, monkeypatch, *argv):
        monkeypatch.setattr(sys, "argv", ["composer", "--log-format", "human", *argv])
        with pytest.raises(SystemExit) as exc:
            cli.main()
        return exc.value.code

    def test_validate_success(self, monkeypatch, capsys, tasks_file):
        assert self.run_cli(monkeypatch, "validate", str(tasks_file)) == 0
        out = capsys.readouterr().out
        assert "FinalCheck: DiscreteContactCheckTask (unconditional)" in out
        assert "2 task(s) valid" in out

    def test_validate_failure(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "tasks:\n  T:\n    class: DiscreteContactCheckTaskFactory\n    config: {inputs: []}\n"
        )
        assert self.run_cli(monkeypatch, "validate", str(path)) == 1
        assert "missing 'inputs' entry" in capsys.readouterr().err

    def test_profiles_with_remap(self, monkeypatch, capsys, profiles_file):
        code = self.run_cli(
            monkeypatch,
            "profiles",
            str(profiles_file),
            "--task",
            "DiscreteContactCheckTask",
            "--profile",
            "FREESPACE",
            "--remap",
            "FREESPACE=SLOW",
        )
        assert code == 0
        header, _, body = capsys.readouterr().out.partition("\n")
        assert "'FREESPACE' -> 'SLOW' (registry)" in header
        assert json.loads(body)["config"]["check_program_mode"] == "all_except_start"

    def test_profiles_unknown_name_uses_default(self, monkeypatch, capsys, profiles_file):
        code = self.run_cli(
            monkeypatch,
            "profiles",
            str(profiles_file),
            "--task",
            "OtherTask",
            "--profile",
            "SLOW",
        )
        assert code == 0
        assert "(default)" in capsys.readouterr().out

    def test_profiles_bad_remap(self, monkeypatch, capsys, profiles_file):
        code = self.run_cli(
            monkeypatch, "profiles", str(profiles_file), "--task", "T", "--remap", "broken"
        )
        assert code == 1
        assert "expected FROM=TO" in capsys.readouterr().err
