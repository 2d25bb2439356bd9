"""Posterior traces of the model indicator."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

import numpy as np
import pandas as pd

from bmodeltest.exceptions import InvalidInput

logger = logging.getLogger(__name__)

# Largest magnitude that survives the float -> int64 cast exactly
MAX_MODEL_ID = 2.0 ** 62


def round_model_id(x: float) -> int:
    """
    Round a sample to its discrete model ID with floor(x + 0.5).

    Halves always round up: 2.5 -> 3, -0.5 -> 0, -1.5 -> -1.
    """
    return int(np.floor(x + 0.5))


def discretise(samples: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """
    Vectorised round_model_id.

    Raises:
        InvalidInput: If a rounded sample does not fit in a 64-bit integer
    """
    rounded = np.floor(np.asarray(samples, dtype=float) + 0.5)
    if rounded.size and not np.all(np.abs(rounded) <= MAX_MODEL_ID):
        raise InvalidInput(
            "Trace samples are out of range for discrete model IDs",
            context={"max_abs": float(np.nanmax(np.abs(rounded)))},
        )
    return rounded.astype(np.int64)


@dataclass(frozen=True, eq=False)
class Trace:
    """
    Post burn-in samples of one logged quantity.

    Attributes:
        label: Column name in the log (e.g. 'substmodel.s:data')
        samples: Read-only array of real-valued samples
    """

    label: str
    samples: np.ndarray = field(repr=False)

    def __post_init__(self):
        samples = np.array(self.samples, dtype=float)
        if samples.ndim != 1 or samples.size == 0:
            raise InvalidInput(
                f"Trace '{self.label}' must be a non-empty sequence of samples",
                context={"label": self.label},
            )
        if not np.all(np.isfinite(samples)):
            raise InvalidInput(
                f"Trace '{self.label}' contains non-finite samples",
                context={"label": self.label},
            )
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_samples(cls, samples: Sequence[float], label: str = "trace") -> "Trace":
        return cls(label=label, samples=np.asarray(samples, dtype=float))

    def model_ids(self) -> np.ndarray:
        """Discrete model ID of every sample."""
        return discretise(self.samples)

    def __len__(self) -> int:
        return int(self.samples.size)


def load_traces(
    path: Union[str, Path],
    prefix: str = "substmodel",
    burnin: int = 10,
) -> List[Trace]:
    """
    Read model-indicator traces from a tab-separated BEAST log.

    Args:
        path: Trace log; lines starting with '#' are ignored
        prefix: Keep columns whose label starts with this prefix
        burnin: Percentage of leading samples to discard (negative means 0)

    Returns:
        One Trace per matching column, in column order

    Raises:
        InvalidInput: If the file is missing or burnin >= 100
    """
    path = Path(path)
    if burnin >= 100:
        raise InvalidInput(
            "burnin is a percentage and should be smaller than 100",
            context={"burnin": burnin},
        )
    burnin = max(burnin, 0)
    if not path.exists():
        raise InvalidInput(f"Trace log not found: {path}", context={"path": str(path)})

    try:
        df = pd.read_csv(path, sep="\t", comment="#")
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise InvalidInput(
            f"Could not parse trace log {path}: {e}", context={"path": str(path)}
        ) from e
    n_discard = int(burnin * len(df) / 100)
    df = df.iloc[n_discard:]
    logger.info(
        f"Read {len(df) + n_discard} samples from {path.name}, "
        f"discarding {n_discard} as burn-in"
    )

    traces = []
    for label in df.columns:
        if str(label).startswith(prefix):
            try:
                samples = df[label].to_numpy(dtype=float)
            except (TypeError, ValueError) as e:
                raise InvalidInput(
                    f"Column '{label}' of {path.name} is not numeric",
                    context={"path": str(path), "label": str(label)},
                ) from e
            traces.append(Trace(label=str(label), samples=samples))

    if not traces:
        logger.warning(f"No column starting with '{prefix}' in {path.name}")
    return traces
