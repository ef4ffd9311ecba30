"""
This module runs lab variants described by a JSON parameter file, in parallel and split across tasks.

Every entry of the parameter file is a dict of command-line options. A value may be a scalar, a list
of alternatives, ``{"range": [start, stop, step]}`` (stop inclusive) or ``{"perm": [...], "reverse": bool}``
for every non-empty combination of the numbers (useful for layer sizes). The optional ``module`` key
selects the lab to run and defaults to the MNIST GAN.

Functions:
- load_parameters: Expand a parameter file into all option combinations.
- build_command: Turn one combination into a command line.
- execute_variant: Run one combination in a subprocess.
- run_in_batches: Run the share of combinations that belongs to one task.
"""

import argparse
import json
import logging
import subprocess
import sys
from concurrent.futures import ProcessPoolExecutor
from itertools import combinations, product

import numpy as np

from dl_labs.shared.logger_config import setup_logger

logger = logging.getLogger()

DEFAULT_MODULE = "dl_labs.mnist_gan.main"


def load_parameters(param_file):
    """
    Load parameters from a JSON file and generate all combinations.

    Args:
        param_file (str): Path to the JSON file containing parameter definitions.

    Returns:
        list: A list of dictionaries representing all possible combinations of parameters.

    Example:
        load_parameters("./config/gan_params.json")
    """
    with open(param_file, "r") as file:
        raw_parameters = json.load(file)

    all_parameter_combinations = []

    for param_set in raw_parameters:
        resolved_parameters = {name: _resolve_values(value) for name, value in param_set.items()}

        keys, values = zip(*resolved_parameters.items())
        all_parameter_combinations.extend(dict(zip(keys, combination)) for combination in product(*values))

    return all_parameter_combinations


def _resolve_values(param_value):
    """Expands a single parameter definition into the list of its alternatives."""
    if isinstance(param_value, dict):
        if "range" in param_value:
            start, stop, step = param_value["range"]
            return np.arange(start, stop + step, step).tolist()
        if "perm" in param_value:
            numbers = param_value["perm"]
            return [sorted(comb, reverse=param_value.get("reverse", False))
                    for r in range(1, len(numbers) + 1) for comb in combinations(numbers, r)]
        raise ValueError(f"Unsupported parameter definition: {param_value}")
    return param_value if isinstance(param_value, list) else [param_value]


def build_command(parameters):
    """
    Build the command line for one parameter combination.

    Booleans become flags that are present only when true, lists are passed as several values.

    Args:
        parameters (dict): Option names mapped to values, plus an optional "module".

    Returns:
        list: The command, starting with the current Python interpreter.
    """
    command = [sys.executable, "-m", parameters.get("module", DEFAULT_MODULE)]

    for param_name, param_value in parameters.items():
        if param_name == "module":
            continue
        if isinstance(param_value, bool):
            if param_value:
                command.append(f"--{param_name}")
        elif isinstance(param_value, list):
            command.append(f"--{param_name}")
            command.extend(map(str, param_value))
        else:
            command.extend([f"--{param_name}", str(param_value)])

    return command


def execute_variant(parameters):
    """
    Run a single variant using the provided parameters.

    Args:
        parameters (dict): A dictionary containing parameter names as keys and their corresponding values.

    Returns:
        dict: A dictionary with the keys "params", "returncode", "stdout" and "stderr".
    """
    result = subprocess.run(build_command(parameters), capture_output=True, text=True)
    return {
        "params": parameters,
        "returncode": result.returncode,
        "stdout": result.stdout,
        "stderr": result.stderr,
    }


def task_share(parameter_combinations, total_tasks, task_id):
    """
    Select the contiguous chunk of combinations that belongs to one task.

    Returns:
        tuple: (index of the first selected combination, list of selected combinations).
    """
    chunk_size = (len(parameter_combinations) + total_tasks - 1) // total_tasks
    start_idx = task_id * chunk_size
    end_idx = min(start_idx + chunk_size, len(parameter_combinations))
    return start_idx, parameter_combinations[start_idx:end_idx]


def run_in_batches(param_file, max_workers, total_tasks, task_id, verbose=False):
    """
    Execute the parameter variants assigned to this specific task in parallel batches.

    Args:
        param_file (str): Path to the parameter file containing the parameter combinations.
        max_workers (int): The maximum number of workers for parallel processing.
        total_tasks (int): The total number of tasks to split the work across.
        task_id (int): The task ID (0-based index) to identify the specific task's assigned parameters.
        verbose (bool, optional): Flag to enable detailed logging. Defaults to False.

    Returns:
        list: The result dict of every executed variant.
    """
    parameter_combinations = load_parameters(param_file)
    logger.info(f"Total {len(parameter_combinations)} Variants to process")

    start_idx, parameters_for_task = task_share(parameter_combinations, total_tasks, task_id)
    logger.debug(f"Task {task_id}: Running {len(parameters_for_task)} Variants")

    with ProcessPoolExecutor(max_workers=max_workers, initializer=setup_logger,
                             initargs=(verbose,)) as executor:
        results = list(executor.map(execute_variant, parameters_for_task))

    for i, result in enumerate(results):
        logger.info(f"Variant {start_idx + i + 1} finished with return code {result['returncode']}")
        logger.debug(f"Standard Output:\n{result['stdout']}")
        logger.debug(f"Standard Error:\n{result['stderr']}")

    return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Parallel Batch Runner")
    parser.add_argument("--param_file", type=str, default="./config/gan_params.json", help="Path to parameter file")
    parser.add_argument("--max_workers", type=int, default=1, help="Maximum number of workers for subprocesses")
    parser.add_argument("--total_tasks", type=int, default=1, help="Total number of tasks to split the work")
    parser.add_argument("--task_id", type=int, default=None, help="Task ID (0-based index)")
    parser.add_argument("--verbose", action="store_true", default=False, help="Enable detailed logging")
    args = parser.parse_args()

    if args.total_tasks != 1 and args.task_id is None:
        parser.error("--task_id is required when total_tasks != 1")

    if args.task_id is None:
        args.task_id = 0

    setup_logger(args.verbose)

    import multiprocessing

    multiprocessing.set_start_method('spawn')

    run_in_batches(args.param_file, args.max_workers, args.total_tasks, args.task_id, args.verbose)
