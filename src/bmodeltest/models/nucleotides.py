"""Nucleotide alphabet and the six reversible rate classes."""

from typing import Dict, Tuple


NUCLEOTIDES = ['A', 'C', 'G', 'T']
PURINES = {'A', 'G'}
PYRIMIDINES = {'C', 'T'}

# Upper triangle of the 4x4 rate matrix, row-major: AC, AG, AT, CG, CT, GT
RATE_CLASSES: Tuple[Tuple[str, str], ...] = tuple(
    (NUCLEOTIDES[i], NUCLEOTIDES[j])
    for i in range(len(NUCLEOTIDES))
    for j in range(i + 1, len(NUCLEOTIDES))
)

N_RATE_CLASSES = len(RATE_CLASSES)

NT_TO_INDEX: Dict[str, int] = {nt: i for i, nt in enumerate(NUCLEOTIDES)}


def is_transition(nt_i: str, nt_j: str) -> bool:
    """
    Check if nt_i↔nt_j is a transition (purine↔purine or pyrimidine↔pyrimidine).

    Transitions: A↔G, C↔T
    """
    nt_i, nt_j = nt_i.upper(), nt_j.upper()
    if nt_i == nt_j:
        return False
    return (nt_i in PURINES and nt_j in PURINES) or \
           (nt_i in PYRIMIDINES and nt_j in PYRIMIDINES)


def is_transversion(nt_i: str, nt_j: str) -> bool:
    """
    Check if nt_i↔nt_j is a transversion (purine↔pyrimidine).

    Transversions: A↔C, A↔T, G↔C, G↔T
    """
    if nt_i.upper() == nt_j.upper():
        return False
    return not is_transition(nt_i, nt_j)


# Positions of the packed six-class layout that hold transitions: (1, 4)
TRANSITION_POSITIONS: Tuple[int, ...] = tuple(
    k for k, (a, b) in enumerate(RATE_CLASSES) if is_transition(a, b)
)

TRANSVERSION_POSITIONS: Tuple[int, ...] = tuple(
    k for k in range(N_RATE_CLASSES) if k not in TRANSITION_POSITIONS
)


def rate_class_name(position: int) -> str:
    """Name of the rate class at a layout position, e.g. 1 -> 'AG'."""
    a, b = RATE_CLASSES[position]
    return a + b


def rate_class_position(nt_i: str, nt_j: str) -> int:
    """Layout position of the rate class between two nucleotides (order-free)."""
    i, j = NT_TO_INDEX[nt_i.upper()], NT_TO_INDEX[nt_j.upper()]
    if i == j:
        raise ValueError(f"No rate class for {nt_i}↔{nt_j}")
    return RATE_CLASSES.index((NUCLEOTIDES[min(i, j)], NUCLEOTIDES[max(i, j)]))
