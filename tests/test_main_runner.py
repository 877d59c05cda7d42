import main_runner


def test_lists_task_modules():
    assert main_runner.list_tasks() == ["airdrop.py", "csv_to_json.py"]


def test_missing_directory(tmp_path):
    assert main_runner.list_tasks(tmp_path / "nope") == []


def test_runs_selected_module_main(tmp_path):
    task = tmp_path / "hello.py"
    task.write_text("def main(argv=None):\n    return 3\n")
    assert main_runner.load_and_run_module(str(task)) == 3


def test_module_without_main(tmp_path):
    task = tmp_path / "nothing.py"
    task.write_text("X = 1\n")
    assert main_runner.load_and_run_module(str(task)) is None
