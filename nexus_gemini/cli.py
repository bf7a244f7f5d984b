import argparse
import dataclasses
import json
import logging
import os
import sys

from nexus_gemini import __version__
from nexus_gemini.adapters.storage import FileStorage
from nexus_gemini.core.config import API_KEY_ENV_VAR, TaskDefinitionLoader
from nexus_gemini.core.run_context import RunContext, variable_renderer
from nexus_gemini.core.utils.logging_filters import install_secret_redaction
from nexus_gemini.tasks import TASK_TYPES


def _parse_vars(pairs):
    variables = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid variable {pair!r}, expected KEY=VALUE")
        variables[key.strip()] = value
    return variables


def run_task(args) -> dict:
    """Run the task defined in ``args.file`` and return its output and metrics."""
    task = TaskDefinitionLoader.load(args.file)
    run_context = RunContext(
        storage=FileStorage(args.storage_dir),
        variables=_parse_vars(args.var),
        renderer=variable_renderer,
        task_id=task.id,
    )
    output = task.run(run_context)
    return {
        "output": dataclasses.asdict(output),
        "metrics": {counter.name: counter.value for counter in run_context.metrics},
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Nexus Gemini CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # Run
    run_parser = subparsers.add_parser("run", help="Run a task definition")
    run_parser.add_argument("file", help="YAML task definition")
    run_parser.add_argument("--storage-dir", default=".nexus-storage", help="Directory backing nexus:/// URIs")
    run_parser.add_argument("--var", action="append", metavar="KEY=VALUE", help="Variable for {{ KEY }} placeholders")

    # List
    subparsers.add_parser("list", help="List available tasks")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if os.environ.get(API_KEY_ENV_VAR):
        install_secret_redaction([os.environ[API_KEY_ENV_VAR]])

    if args.command == "run":
        print(json.dumps(run_task(args), indent=2, default=str))
    elif args.command == "list":
        for task_type in sorted(TASK_TYPES, key=lambda t: t.plugin_name):
            print(f"{task_type.plugin_name}\t{__version__}\t{task_type.description}")
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
