import yaml
import numpy as np
import os

from components.hormone_bank import HORMONE_NAMES, PARAMETER_FIELDS


class ScenarioFuzzer:
    """
    Generates fuzzed operation sequences to probe the hormone bank's
    invariants under unexpected inputs.
    """
    def __init__(self, fuzz_params=None):
        """
        Args:
            fuzz_params (dict): Parameters controlling the fuzzing process:
                - length (int): Operations per scenario.
                - force_range (list[float]): Bounds for fuzzed ``force`` edits.
                - decay_range (list[float]): Bounds for fuzzed ``decay`` edits.
                - op_weights (list[float]): Relative odds of tick / inject / set_parameter.
        """
        self.fuzz_params = {
            "length": 200,
            "force_range": [-50.0, 200.0],
            "decay_range": [0.0, 2.0],
            "op_weights": [0.5, 0.3, 0.2],
        }
        self.fuzz_params.update(fuzz_params or {})

    def fuzz_scenario(self, seed=None):
        """
        Generates a single fuzzed scenario.

        Args:
            seed (int, optional): A seed for the random number generator.

        Returns:
            list[dict]: Operations such as ``{"op": "inject", "name": "cortisol"}``.
        """
        rng = np.random.default_rng(seed)
        weights = np.asarray(self.fuzz_params["op_weights"], dtype=float)
        weights = weights / weights.sum()

        ops = []
        for _ in range(self.fuzz_params["length"]):
            kind = str(rng.choice(["tick", "inject", "set_parameter"], p=weights))
            if kind == "tick":
                ops.append({"op": "tick"})
                continue
            name = HORMONE_NAMES[rng.integers(len(HORMONE_NAMES))].value
            if kind == "inject":
                ops.append({"op": "inject", "name": name})
            else:
                field = PARAMETER_FIELDS[rng.integers(len(PARAMETER_FIELDS))]
                low, high = self.fuzz_params[f"{field}_range"]
                ops.append({"op": "set_parameter", "name": name, "field": field,
                            "value": float(rng.uniform(low, high))})
        return ops

    @staticmethod
    def apply(bank, ops, on_step=None):
        """Replays ``ops`` against ``bank``, calling ``on_step(bank, op)`` after each one."""
        for op in ops:
            if op["op"] == "tick":
                bank.tick()
            elif op["op"] == "inject":
                bank.inject(op["name"])
            elif op["op"] == "set_parameter":
                bank.set_parameter(op["name"], op["field"], op["value"])
            else:
                raise ValueError(f"Unknown fuzz operation: {op['op']}")
            if on_step is not None:
                on_step(bank, op)
        return bank

    def generate_fuzz_suite(self, num_scenarios, output_dir):
        """
        Generates and saves a suite of fuzzed scenarios.

        Args:
            num_scenarios (int): The number of scenarios to generate.
            output_dir (str): The directory to save the YAML files.
        """
        os.makedirs(output_dir, exist_ok=True)
        for i in range(num_scenarios):
            filename = os.path.join(output_dir, f"fuzzed_scenario_{i:03d}.yaml")
            with open(filename, "w") as f:
                yaml.dump({"seed": i, "ops": self.fuzz_scenario(seed=i)}, f, default_flow_style=False)
        print(f"Generated {num_scenarios} fuzzed scenarios in {output_dir}")


if __name__ == "__main__":
    fuzzer = ScenarioFuzzer({"length": 500})
    fuzzer.generate_fuzz_suite(20, os.path.join("benchmarks", "fuzz_suite"))
