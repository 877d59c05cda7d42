# main_runner.py
import os
import sys
import importlib.util
import questionary
from rich.console import Console
from config import MODULE_PATH

console = Console()

TASK_TITLES = {
    "csv_to_json": "Prepare airdrop.json from CSV snapshot",
    "airdrop": "Send airdrop batches",
}


def load_and_run_module(module_path):
    """
    Load a task module from its path and run its main(); returns main()'s result.
    """
    module_name = os.path.splitext(os.path.basename(module_path))[0]

    spec = importlib.util.spec_from_file_location(module_name, module_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "main"):
        console.log(f"[yellow]No main() function found in {module_name}. Skipping...[/yellow]")
        return None
    # task modules parse their own CLI; the runner passes none through
    return module.main([])


def list_tasks(module_path=MODULE_PATH):
    if not os.path.isdir(module_path):
        return []
    return sorted(f for f in os.listdir(module_path) if f.endswith(".py") and not f.startswith("_"))


def run_selected_module():
    """
    Let the user pick a task module and run it.
    """
    python_files = list_tasks()
    if not python_files:
        console.log(f"[red]No task modules found in '{MODULE_PATH}'.[/red]")
        return 1

    choices = [
        questionary.Choice(
            title=f"{idx + 1}. {TASK_TITLES.get(os.path.splitext(fname)[0], os.path.splitext(fname)[0])}",
            value=fname
        )
        for idx, fname in enumerate(python_files)
    ]
    selected_file = questionary.select("Select the task you want to run:", choices=choices).ask()
    if not selected_file:
        console.log("No task selected.")
        return 0

    return load_and_run_module(os.path.join(MODULE_PATH, selected_file)) or 0


if __name__ == "__main__":
    sys.exit(run_selected_module())
