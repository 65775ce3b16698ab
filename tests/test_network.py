"""
Unit tests for the feed-forward network.

Tests construction invariants, inference, mutation, crossover, copying and
record import/export.
"""

import json

import numpy as np
import pytest

from racer import DimensionError, NeuralNetwork, RecordFormatError
from racer.network import build_network_inputs, interpret_outputs, sigmoid


class TestConstruction:
    """Test suite for network construction"""

    def test_random_network_shapes(self, rng: np.random.Generator) -> None:
        """Test that a random network has matrices of the declared shape"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        assert net.shape == (9, 8, 3)
        assert net.weights_input_hidden.shape == (9, 8)
        assert net.weights_hidden_output.shape == (8, 3)
        assert net.bias_hidden.shape == (8,)
        assert net.bias_output.shape == (3,)

    def test_random_parameters_in_unit_range(self, rng: np.random.Generator) -> None:
        """Test that random weights and biases lie in [-1, 1]"""
        net = NeuralNetwork.create_random(20, 16, 3, rng)

        for param in net.parameters():
            assert np.all(param >= -1.0)
            assert np.all(param <= 1.0)

    @pytest.mark.parametrize("counts", [(0, 8, 3), (9, 0, 3), (9, 8, -1)])
    def test_random_rejects_non_positive_counts(self, counts, rng: np.random.Generator) -> None:
        """Test that non-positive node counts are rejected"""
        with pytest.raises(DimensionError):
            NeuralNetwork.create_random(*counts, rng)

    def test_mismatched_matrices_rejected(self) -> None:
        """Test that inconsistent shapes are a construction error"""
        with pytest.raises(DimensionError):
            NeuralNetwork(np.zeros((3, 4)), np.zeros((5, 2)), np.zeros(4), np.zeros(2))
        with pytest.raises(DimensionError):
            NeuralNetwork(np.zeros((3, 4)), np.zeros((4, 2)), np.zeros(3), np.zeros(2))
        with pytest.raises(DimensionError):
            NeuralNetwork(np.zeros((3, 4)), np.zeros((4, 2)), np.zeros(4), np.zeros(3))

    def test_constructor_copies_arrays(self) -> None:
        """Test that the network does not alias caller arrays"""
        w = np.zeros((2, 2))
        net = NeuralNetwork(w, np.zeros((2, 1)), np.zeros(2), np.zeros(1))
        w[0, 0] = 5.0

        assert net.weights_input_hidden[0, 0] == 0.0


class TestFeedForward:
    """Test suite for inference"""

    def test_hand_computed_output(self) -> None:
        """Test the forward pass against a hand computation"""
        net = NeuralNetwork(
            weights_input_hidden=[[1.0, -1.0], [0.5, 2.0]],
            weights_hidden_output=[[1.0], [-1.0]],
            bias_hidden=[0.0, 0.5],
            bias_output=[0.25],
        )
        inputs = [0.2, 0.4]

        h0 = 1 / (1 + np.exp(-(0.0 + 0.2 * 1.0 + 0.4 * 0.5)))
        h1 = 1 / (1 + np.exp(-(0.5 + 0.2 * -1.0 + 0.4 * 2.0)))
        expected = 1 / (1 + np.exp(-(0.25 + h0 * 1.0 + h1 * -1.0)))

        output = net.feed_forward(inputs)

        assert output.shape == (1,)
        assert abs(output[0] - expected) < 1e-12

    def test_deterministic(self, rng: np.random.Generator) -> None:
        """Test that repeated calls give bit-identical outputs"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)
        inputs = rng.uniform(0, 1, 9)

        first = net.feed_forward(inputs)
        for _ in range(5):
            assert np.array_equal(net.feed_forward(inputs), first)

    def test_outputs_in_unit_interval(self, rng: np.random.Generator) -> None:
        """Test that outputs stay inside the sigmoid range"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        output = net.feed_forward(rng.uniform(-100, 100, 9))

        assert np.all(output >= 0.0)
        assert np.all(output <= 1.0)

    @pytest.mark.parametrize("length", [8, 10, 0])
    def test_wrong_input_length(self, length: int, rng: np.random.Generator) -> None:
        """Test that inputs are never silently truncated or padded"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        with pytest.raises(DimensionError):
            net.feed_forward(np.zeros(length))

    def test_sigmoid_extremes_do_not_overflow(self) -> None:
        """Test that sigmoid saturates without overflow"""
        values = sigmoid(np.array([-1000.0, 0.0, 1000.0]))

        np.testing.assert_allclose(values, [0.0, 0.5, 1.0])


class TestCopyMutateCrossover:
    """Test suite for genetic operators on networks"""

    def test_copy_is_independent(self, rng: np.random.Generator) -> None:
        """Test that a copy shares no storage with its source"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)
        clone = net.copy()

        clone.weights_input_hidden[0, 0] += 1.0
        clone.bias_output[0] += 1.0

        assert not net.same_parameters(clone)
        for original, copied in zip(net.parameters(), clone.parameters()):
            assert not np.shares_memory(original, copied)

    def test_zero_rate_mutation_keeps_copy_identical(self, rng: np.random.Generator) -> None:
        """Test that zero-rate mutation changes nothing"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        mutated = net.copy().mutate(rate=0.0, strength=5.0, rng=rng)

        assert mutated.same_parameters(net)

    def test_full_rate_mutation_changes_every_parameter(self, rng: np.random.Generator) -> None:
        """Test that full-rate mutation changes every parameter"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        mutated = net.mutate(rate=1.0, strength=1.0, rng=rng)

        for before, after in zip(net.parameters(), mutated.parameters()):
            assert np.all(before != after)

    def test_mutation_bounded_by_strength(self, rng: np.random.Generator) -> None:
        """Test that each perturbation lies within +-strength/2"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        mutated = net.mutate(rate=1.0, strength=0.4, rng=rng)

        for before, after in zip(net.parameters(), mutated.parameters()):
            assert np.all(np.abs(after - before) <= 0.2 + 1e-12)

    def test_mutation_leaves_input_untouched(self, rng: np.random.Generator) -> None:
        """Test that mutate returns a new network and leaves its input alone"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)
        snapshot = net.copy()

        net.mutate(rate=1.0, strength=2.0, rng=rng)

        assert net.same_parameters(snapshot)

    def test_crossover_takes_genes_from_parents(self, rng: np.random.Generator) -> None:
        """Test that every child parameter comes from one of the two parents"""
        a = NeuralNetwork(np.zeros((9, 8)), np.zeros((8, 3)), np.zeros(8), np.zeros(3))
        b = NeuralNetwork(np.ones((9, 8)), np.ones((8, 3)), np.ones(8), np.ones(3))

        child = a.crossover(b, rng)

        genes = np.concatenate([p.ravel() for p in child.parameters()])
        assert set(np.unique(genes)) <= {0.0, 1.0}
        # 107 fair coin flips: both parents contribute
        assert 0 < genes.sum() < len(genes)

    def test_crossover_rejects_mismatched_shapes(self, rng: np.random.Generator) -> None:
        """Test that crossover requires matching shapes"""
        a = NeuralNetwork.create_random(9, 8, 3, rng)
        b = NeuralNetwork.create_random(9, 6, 3, rng)

        with pytest.raises(DimensionError):
            a.crossover(b, rng)

    def test_crossover_does_not_alias_parents(self, rng: np.random.Generator) -> None:
        """Test that a child shares no storage with its parents"""
        a = NeuralNetwork.create_random(9, 8, 3, rng)
        b = NeuralNetwork.create_random(9, 8, 3, rng)

        child = a.crossover(b, rng)

        for param in child.parameters():
            for parent_param in a.parameters() + b.parameters():
                assert not np.shares_memory(param, parent_param)


class TestRecords:
    """Test suite for record import/export"""

    def test_record_round_trip(self, rng: np.random.Generator) -> None:
        """Test that a network survives a JSON round trip"""
        net = NeuralNetwork.create_random(9, 8, 3, rng)

        restored = NeuralNetwork.from_json(net.to_json())

        assert restored.same_parameters(net)

    def test_record_is_plain_json(self, rng: np.random.Generator) -> None:
        """Test that a record is plain JSON-compatible data"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()

        decoded = json.loads(json.dumps(record))

        assert decoded["version"] == 1
        assert decoded["input_count"] == 4
        assert len(decoded["weights_input_hidden"]) == 4
        assert len(decoded["weights_input_hidden"][0]) == 3

    def test_missing_key(self, rng: np.random.Generator) -> None:
        """Test that a record missing a key is rejected"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()
        del record["bias_hidden"]

        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_record(record)

    def test_unsupported_version(self, rng: np.random.Generator) -> None:
        """Test that an unknown record version is rejected"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()
        record["version"] = 99

        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_record(record)

    def test_declared_counts_must_match_matrices(self, rng: np.random.Generator) -> None:
        """Test that declared counts must match the matrices"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()
        record["input_count"] = 5

        with pytest.raises(DimensionError):
            NeuralNetwork.from_record(record)

    def test_ragged_matrix(self, rng: np.random.Generator) -> None:
        """Test that a ragged matrix is rejected"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()
        record["weights_input_hidden"][1] = [0.0]

        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_record(record)

    def test_non_finite_values(self, rng: np.random.Generator) -> None:
        """Test that NaN values are rejected"""
        record = NeuralNetwork.create_random(4, 3, 3, rng).to_record()
        record["bias_output"][0] = float("nan")

        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_record(record)

    def test_invalid_json(self) -> None:
        """Test that malformed JSON is rejected"""
        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_json("{not json")

    def test_non_mapping_record(self) -> None:
        """Test that a record must be a mapping"""
        with pytest.raises(RecordFormatError):
            NeuralNetwork.from_record([1, 2, 3])


class TestInputsAndOutputs:
    """Test suite for input building and output interpretation"""

    def test_input_layout(self) -> None:
        """Test the input order and normalisation"""
        inputs = build_network_inputs(
            [150.0, 300.0, 600.0], sensor_length=300.0, speed=50.0, speed_scale=200.0,
            angle=0.0, braking=0.25,
        )

        np.testing.assert_allclose(inputs, [0.5, 1.0, 1.0, 0.25, 0.0, 1.0, 0.25])

    def test_speed_capped_at_one(self) -> None:
        """Test that speed input is capped at 1"""
        inputs = build_network_inputs([0.0, 0.0], 300.0, 1000.0, 200.0, 0.0, 0.0)

        assert inputs[2] == 1.0

    def test_interpret_outputs(self) -> None:
        """Test that outputs map to steering, throttle and brake"""
        controls = interpret_outputs([0.0, 0.3, 0.9])

        assert controls.steering == -1.0
        assert controls.throttle == 0.3
        assert controls.brake == 0.9

    def test_interpret_centre_steering(self) -> None:
        """Test that a 0.5 steering output means straight ahead"""
        assert interpret_outputs([0.5, 0.0, 0.0]).steering == 0.0

    def test_interpret_wrong_length(self) -> None:
        """Test that anything but three outputs is rejected"""
        with pytest.raises(DimensionError):
            interpret_outputs([0.5, 0.5])
