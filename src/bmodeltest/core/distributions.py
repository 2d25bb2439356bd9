"""Parametric distributions used as priors on substitution rates."""

from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy import stats


@dataclass(frozen=True)
class ParametricDistribution:
    """
    A univariate prior backed by a frozen scipy.stats distribution.

    `log_density` evaluates the distribution as is; callers subtract
    `offset` from the value first.

    Attributes:
        name: Short description, e.g. 'exponential(1)'
        frozen: Frozen scipy.stats distribution
        offset: Shift of the support
    """

    name: str
    frozen: Any
    offset: float = 0.0

    def log_density(self, x: float) -> float:
        """Log density at x; -inf outside the support."""
        return float(self.frozen.logpdf(x))

    def density(self, x: float) -> float:
        return float(self.frozen.pdf(x))

    def mean(self) -> float:
        return float(self.frozen.mean()) + self.offset

    def __repr__(self) -> str:
        if self.offset:
            return f"ParametricDistribution({self.name}, offset={self.offset})"
        return f"ParametricDistribution({self.name})"


def exponential(mean: float = 1.0, offset: float = 0.0) -> ParametricDistribution:
    """Exponential with the given mean (rate 1/mean)."""
    if mean <= 0:
        raise ValueError(f"Exponential mean must be positive, got {mean}")
    return ParametricDistribution(
        name=f"exponential({mean:g})",
        frozen=stats.expon(scale=mean),
        offset=offset,
    )


def log_normal(
    m: float = 1.0,
    s: float = 1.25,
    mean_in_real_space: bool = False,
    offset: float = 0.0,
) -> ParametricDistribution:
    """
    Log-normal distribution.

    Args:
        m: Mean of log(x), or of x when mean_in_real_space is set
        s: Standard deviation of log(x)
        mean_in_real_space: Interpret m as the mean of x itself
        offset: Shift of the support
    """
    if s <= 0:
        raise ValueError(f"Log-normal S must be positive, got {s}")
    if mean_in_real_space:
        if m <= 0:
            raise ValueError(f"Real-space mean must be positive, got {m}")
        mu = np.log(m) - 0.5 * s * s
    else:
        mu = m
    return ParametricDistribution(
        name=f"log-normal({m:g}, {s:g})",
        frozen=stats.lognorm(s=s, scale=np.exp(mu)),
        offset=offset,
    )


def gamma(alpha: float = 2.0, beta: float = 2.0, offset: float = 0.0) -> ParametricDistribution:
    """Gamma with shape alpha and scale beta."""
    if alpha <= 0 or beta <= 0:
        raise ValueError(f"Gamma parameters must be positive, got ({alpha}, {beta})")
    return ParametricDistribution(
        name=f"gamma({alpha:g}, {beta:g})",
        frozen=stats.gamma(a=alpha, scale=beta),
        offset=offset,
    )


def uniform(lower: float = 0.0, upper: float = 1.0, offset: float = 0.0) -> ParametricDistribution:
    if upper <= lower:
        raise ValueError(f"Uniform needs lower < upper, got ({lower}, {upper})")
    return ParametricDistribution(
        name=f"uniform({lower:g}, {upper:g})",
        frozen=stats.uniform(loc=lower, scale=upper - lower),
        offset=offset,
    )


def normal(mean: float = 0.0, sigma: float = 1.0, offset: float = 0.0) -> ParametricDistribution:
    if sigma <= 0:
        raise ValueError(f"Normal sigma must be positive, got {sigma}")
    return ParametricDistribution(
        name=f"normal({mean:g}, {sigma:g})",
        frozen=stats.norm(loc=mean, scale=sigma),
        offset=offset,
    )
