"""
Tests for chain_fold.simulation
"""

import json
import unittest

import numpy as np

from chain_fold.core.errors import InvalidInputError
from chain_fold.core.target import build_target
from chain_fold.simulation import (
    RunnerState,
    SimulationConfig,
    SimulationRunner,
    run_simulation,
)


class TestSimulationConfig(unittest.TestCase):

    def test_defaults(self):
        config = SimulationConfig().validate()
        self.assertEqual(config.n_units, 10)
        self.assertEqual(config.probability, 1.0)
        self.assertIsNone(config.seed)
        self.assertEqual(config.sampler, "numpy")

    def test_normalises(self):
        config = SimulationConfig(probability=1.0 + 1e-12, sampler="QUBIT").validate()
        self.assertEqual(config.probability, 1.0)
        self.assertEqual(config.sampler, "qubit")

    def test_invalid(self):
        bad_configs = [
            SimulationConfig(n_units=0),
            SimulationConfig(probability=2.0),
            SimulationConfig(probability=0.0),
            SimulationConfig(sampler="dice"),
            SimulationConfig(seed=-1),
            SimulationConfig(seed=1.5),
        ]
        for config in bad_configs:
            with self.assertRaises(InvalidInputError, msg=repr(config)):
                config.validate()

    def test_numpy_integer_seed(self):
        config = SimulationConfig(seed=np.int64(7)).validate()
        self.assertEqual(config.seed, 7)
        self.assertIs(type(config.seed), int)
        self.assertEqual(run_simulation(SimulationConfig(probability=0.5, seed=np.int64(7))),
                         run_simulation(SimulationConfig(probability=0.5, seed=7)))

    def test_with_probability_returns_new_config(self):
        base = SimulationConfig(probability=0.3)
        changed = base.with_probability(0.6)
        self.assertEqual(base.probability, 0.3)
        self.assertEqual(changed.probability, 0.6)


class TestRunSimulation(unittest.TestCase):

    def test_result_shape(self):
        result = run_simulation(SimulationConfig(n_units=8, probability=0.5, seed=1))
        self.assertEqual(result.target, build_target(8))
        self.assertEqual(len(result.quantum), 11)
        self.assertEqual(len(result.classical), 6)
        self.assertEqual(result.quantum.metadata["probability"], 0.5)

    def test_seeded_runs_reproduce(self):
        config = SimulationConfig(probability=0.4, seed=9)
        self.assertEqual(run_simulation(config), run_simulation(config))

    def test_run_index_selects_new_stream(self):
        config = SimulationConfig(probability=0.4, seed=9)
        a = run_simulation(config, run_index=0)
        b = run_simulation(config, run_index=1)
        self.assertNotEqual(a.quantum.steps[5], b.quantum.steps[5])
        self.assertEqual(a.classical, b.classical)

    def test_frame_wraps_each_run(self):
        result = run_simulation(SimulationConfig(seed=3))
        frame = result.frame(7)
        self.assertEqual(frame["quantum"], (result.quantum.steps[7], result.quantum.scores[7]))
        self.assertEqual(frame["classical"], (result.classical.steps[1], result.classical.scores[1]))
        self.assertEqual(result.frame(11)["quantum"][0], result.quantum.steps[0])

    def test_to_dict_is_json_serialisable(self):
        result = run_simulation(SimulationConfig(n_units=4, probability=0.7, seed=2))
        data = json.loads(json.dumps(result.to_dict()))
        self.assertEqual(data["config"]["n_units"], 4)
        self.assertEqual(len(data["target"]), 4)
        self.assertEqual(len(data["quantum"]["steps"]), 11)
        self.assertEqual(data["classical"]["label"], "classical")

    def test_qubit_sampler(self):
        result = run_simulation(SimulationConfig(n_units=5, probability=1.0, seed=4, sampler="qubit"))
        self.assertEqual(result.quantum.scores[-1], 100.0)


class TestSimulationRunner(unittest.TestCase):

    def test_lifecycle(self):
        runner = SimulationRunner(SimulationConfig(seed=5))
        self.assertEqual(runner.state, RunnerState.IDLE)
        self.assertIsNone(runner.result)

        result = runner.run()
        self.assertEqual(runner.state, RunnerState.READY)
        self.assertIs(runner.result, result)
        self.assertEqual(runner.n_runs, 1)

    def test_set_probability_reruns_fresh(self):
        runner = SimulationRunner(SimulationConfig(probability=1.0, seed=5))
        first = runner.run()
        second = runner.set_probability(0.5)

        self.assertIsNot(first, second)
        self.assertEqual(runner.config.probability, 0.5)
        self.assertEqual(second.quantum.metadata["probability"], 0.5)
        # the earlier result is left exactly as it was
        self.assertEqual(first.quantum.metadata["probability"], 1.0)
        self.assertEqual(first.quantum.scores[-1], 100.0)
        self.assertEqual(runner.n_runs, 2)

    def test_repeated_seeded_runs_use_new_draws(self):
        runner = SimulationRunner(SimulationConfig(probability=0.5, seed=5))
        a = runner.run()
        b = runner.run()
        self.assertNotEqual(a.quantum.steps[5], b.quantum.steps[5])

    def test_invalid_probability_keeps_previous_result(self):
        runner = SimulationRunner(SimulationConfig(probability=0.7, seed=5))
        result = runner.run()
        with self.assertRaises(InvalidInputError):
            runner.set_probability(1.5)
        self.assertEqual(runner.config.probability, 0.7)
        self.assertIs(runner.result, result)
        self.assertEqual(runner.state, RunnerState.READY)

    def test_listeners_receive_every_result(self):
        runner = SimulationRunner(SimulationConfig(seed=1))
        seen = []
        runner.subscribe(lambda r: seen.append((r, runner.state)))
        runner.run()
        runner.set_probability(0.2)
        self.assertEqual(len(seen), 2)
        self.assertTrue(all(state == RunnerState.READY for _, state in seen))
        self.assertEqual(seen[1][0].config.probability, 0.2)

    def test_invalid_config_rejected_up_front(self):
        with self.assertRaises(InvalidInputError):
            SimulationRunner(SimulationConfig(n_units=-2))


if __name__ == "__main__":
    unittest.main()
