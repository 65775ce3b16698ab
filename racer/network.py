"""
Fixed-topology feed-forward network used as a car's brain
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple
import json
import numpy as np
from scipy.special import expit

from racer.errors import DimensionError, RecordFormatError

RECORD_VERSION = 1

RECORD_KEYS = (
    "version",
    "input_count",
    "hidden_count",
    "output_count",
    "weights_input_hidden",
    "weights_hidden_output",
    "bias_hidden",
    "bias_output",
)


def sigmoid(x: np.ndarray) -> np.ndarray:
    """Logistic function 1 / (1 + e^-x), elementwise"""
    return expit(x)


class NeuralNetwork:
    """Input -> hidden -> output perceptron with sigmoid activations"""

    def __init__(
        self,
        weights_input_hidden: np.ndarray,
        weights_hidden_output: np.ndarray,
        bias_hidden: np.ndarray,
        bias_output: np.ndarray,
    ) -> None:
        """
        Build a network from explicit parameters

        Arrays are copied, so the network never shares storage with the caller.

        Args:
            weights_input_hidden: [input x hidden] matrix
            weights_hidden_output: [hidden x output] matrix
            bias_hidden: [hidden] vector
            bias_output: [output] vector

        Raises:
            DimensionError: if the shapes are not mutually consistent
        """
        w_ih = np.array(weights_input_hidden, dtype=float)
        w_ho = np.array(weights_hidden_output, dtype=float)
        b_h = np.array(bias_hidden, dtype=float)
        b_o = np.array(bias_output, dtype=float)

        if w_ih.ndim != 2 or w_ho.ndim != 2 or b_h.ndim != 1 or b_o.ndim != 1:
            raise DimensionError("weights must be 2-D matrices and biases 1-D vectors")
        input_count, hidden_count = w_ih.shape
        if min(input_count, hidden_count, w_ho.shape[1]) <= 0:
            raise DimensionError("layer sizes must be positive")
        if w_ho.shape[0] != hidden_count:
            raise DimensionError(
                f"weights_hidden_output has {w_ho.shape[0]} rows, expected {hidden_count}"
            )
        if b_h.shape[0] != hidden_count:
            raise DimensionError(f"bias_hidden has {b_h.shape[0]} entries, expected {hidden_count}")
        if b_o.shape[0] != w_ho.shape[1]:
            raise DimensionError(f"bias_output has {b_o.shape[0]} entries, expected {w_ho.shape[1]}")

        self.weights_input_hidden = w_ih
        self.weights_hidden_output = w_ho
        self.bias_hidden = b_h
        self.bias_output = b_o

    @property
    def input_count(self) -> int:
        """Number of input nodes"""
        return self.weights_input_hidden.shape[0]

    @property
    def hidden_count(self) -> int:
        """Number of hidden nodes"""
        return self.weights_input_hidden.shape[1]

    @property
    def output_count(self) -> int:
        """Number of output nodes"""
        return self.weights_hidden_output.shape[1]

    @property
    def shape(self) -> Tuple[int, int, int]:
        """(input_count, hidden_count, output_count)"""
        return self.input_count, self.hidden_count, self.output_count

    def parameters(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """All parameter arrays, in record order"""
        return (
            self.weights_input_hidden,
            self.weights_hidden_output,
            self.bias_hidden,
            self.bias_output,
        )

    @classmethod
    def create_random(
        cls,
        input_count: int,
        hidden_count: int,
        output_count: int,
        rng: np.random.Generator,
    ) -> "NeuralNetwork":
        """
        Network with every weight and bias drawn uniformly from [-1, 1]

        Raises:
            DimensionError: if any layer size is not positive
        """
        if min(input_count, hidden_count, output_count) <= 0:
            raise DimensionError(
                f"layer sizes must be positive, got {(input_count, hidden_count, output_count)}"
            )
        return cls(
            rng.uniform(-1.0, 1.0, (input_count, hidden_count)),
            rng.uniform(-1.0, 1.0, (hidden_count, output_count)),
            rng.uniform(-1.0, 1.0, hidden_count),
            rng.uniform(-1.0, 1.0, output_count),
        )

    def feed_forward(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Run inference

        Args:
            inputs: Vector of exactly ``input_count`` values

        Returns:
            Output activations, each in (0, 1)

        Raises:
            DimensionError: if the input length does not match
        """
        x = np.asarray(inputs, dtype=float)
        if x.ndim != 1 or x.shape[0] != self.input_count:
            raise DimensionError(f"expected {self.input_count} inputs, got shape {x.shape}")

        hidden = sigmoid(self.bias_hidden + x @ self.weights_input_hidden)
        return sigmoid(self.bias_output + hidden @ self.weights_hidden_output)

    def copy(self) -> "NeuralNetwork":
        """Independent deep copy"""
        return NeuralNetwork(*self.parameters())

    def mutate(self, rate: float, strength: float, rng: np.random.Generator) -> "NeuralNetwork":
        """
        New network with each parameter perturbed with probability ``rate``

        A perturbed parameter moves by uniform(-0.5, 0.5) * strength. The
        receiver is left unchanged.
        """
        child = self.copy()
        for param in child.parameters():
            mask = rng.random(param.shape) < rate
            noise = (rng.random(param.shape) - 0.5) * strength
            param[mask] += noise[mask]
        return child

    def crossover(self, other: "NeuralNetwork", rng: np.random.Generator) -> "NeuralNetwork":
        """
        Uniform crossover: start from this network, take each parameter from
        ``other`` with probability 0.5

        Raises:
            DimensionError: if the two networks have different shapes
        """
        if self.shape != other.shape:
            raise DimensionError(f"cannot cross networks of shape {self.shape} and {other.shape}")
        genes = []
        for mine, theirs in zip(self.parameters(), other.parameters()):
            take_other = rng.random(mine.shape) < 0.5
            genes.append(np.where(take_other, theirs, mine))
        return NeuralNetwork(*genes)

    def same_parameters(self, other: "NeuralNetwork") -> bool:
        """True when both networks hold bit-identical parameters"""
        return self.shape == other.shape and all(
            np.array_equal(a, b) for a, b in zip(self.parameters(), other.parameters())
        )

    def to_record(self) -> Dict[str, Any]:
        """Plain, JSON-friendly record of the network"""
        return {
            "version": RECORD_VERSION,
            "input_count": self.input_count,
            "hidden_count": self.hidden_count,
            "output_count": self.output_count,
            "weights_input_hidden": self.weights_input_hidden.tolist(),
            "weights_hidden_output": self.weights_hidden_output.tolist(),
            "bias_hidden": self.bias_hidden.tolist(),
            "bias_output": self.bias_output.tolist(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "NeuralNetwork":
        """
        Parse and validate a record produced by ``to_record``

        Raises:
            RecordFormatError: missing keys, unsupported version or non-numeric data
            DimensionError: matrices disagree with the declared node counts
        """
        if not isinstance(record, dict):
            raise RecordFormatError(f"network record must be a mapping, got {type(record).__name__}")
        missing = [key for key in RECORD_KEYS if key not in record]
        if missing:
            raise RecordFormatError(f"network record is missing keys: {', '.join(missing)}")
        if record["version"] != RECORD_VERSION:
            raise RecordFormatError(f"unsupported network record version {record['version']!r}")

        counts = []
        for key in ("input_count", "hidden_count", "output_count"):
            value = record[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise RecordFormatError(f"{key} must be a positive integer, got {value!r}")
            counts.append(value)
        input_count, hidden_count, output_count = counts

        arrays = {}
        for key in RECORD_KEYS[4:]:
            try:
                arrays[key] = np.array(record[key], dtype=float)
            except (TypeError, ValueError) as e:
                raise RecordFormatError(f"{key} is not a numeric array: {e}") from e
            if not np.all(np.isfinite(arrays[key])):
                raise RecordFormatError(f"{key} contains non-finite values")

        expected = {
            "weights_input_hidden": (input_count, hidden_count),
            "weights_hidden_output": (hidden_count, output_count),
            "bias_hidden": (hidden_count,),
            "bias_output": (output_count,),
        }
        for key, shape in expected.items():
            if arrays[key].shape != shape:
                raise DimensionError(f"{key} has shape {arrays[key].shape}, expected {shape}")

        return cls(
            arrays["weights_input_hidden"],
            arrays["weights_hidden_output"],
            arrays["bias_hidden"],
            arrays["bias_output"],
        )

    def to_json(self) -> str:
        """Record serialised as a JSON string"""
        return json.dumps(self.to_record())

    @classmethod
    def from_json(cls, text: str) -> "NeuralNetwork":
        """Parse a network from ``to_json`` output; bad JSON raises RecordFormatError"""
        try:
            record = json.loads(text)
        except json.JSONDecodeError as e:
            raise RecordFormatError(f"network record is not valid JSON: {e}") from e
        return cls.from_record(record)

    def __repr__(self) -> str:
        """Short form showing the topology"""
        return f"NeuralNetwork(shape={self.shape})"


@dataclass(frozen=True)
class ControlSignals:
    """Driving commands decoded from network outputs"""

    steering: float  # -1 full left, +1 full right
    throttle: float  # [0, 1]
    brake: float  # [0, 1]


def build_network_inputs(
    sensor_distances: Sequence[float],
    sensor_length: float,
    speed: float,
    speed_scale: float,
    angle: float,
    braking: float,
) -> np.ndarray:
    """
    Normalised input vector: sensors, speed, sin(heading), cos(heading), braking

    Sensor distances and speed are scaled to [0, 1] and capped at 1.
    """
    sensors = np.minimum(np.asarray(sensor_distances, dtype=float) / sensor_length, 1.0)
    extras = np.array([
        min(speed / speed_scale, 1.0),
        np.sin(angle),
        np.cos(angle),
        min(max(braking, 0.0), 1.0),
    ])
    return np.concatenate([sensors, extras])


def interpret_outputs(outputs: Sequence[float]) -> ControlSignals:
    """Map the three sigmoid outputs to steering, throttle and brake"""
    if len(outputs) != 3:
        raise DimensionError(f"expected 3 network outputs, got {len(outputs)}")
    return ControlSignals(
        steering=float(outputs[0]) * 2.0 - 1.0,
        throttle=float(outputs[1]),
        brake=float(outputs[2]),
    )
